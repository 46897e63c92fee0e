"""Module entrypoint for ``python -m wikiview``.

All argument parsing and runtime setup happen in ``wikiview.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
