"""Viewer state, commands and the controller that ties them together."""

from __future__ import annotations

from .commands import BINDABLE_COMMANDS, Command, CommandName
from .controller import ViewportController
from .state import ActionResult, DrawFrame, Mode, NavigationRequest, RequestKind, ViewerState, Viewport

__all__ = [
    "ActionResult",
    "BINDABLE_COMMANDS",
    "Command",
    "CommandName",
    "DrawFrame",
    "Mode",
    "NavigationRequest",
    "RequestKind",
    "ViewerState",
    "Viewport",
    "ViewportController",
]
