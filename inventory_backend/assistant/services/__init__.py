from .actions import ACTION_HANDLERS, ActionResult, UnknownActionError, execute_action

__all__ = [
    "ACTION_HANDLERS",
    "ActionResult",
    "UnknownActionError",
    "execute_action",
]
