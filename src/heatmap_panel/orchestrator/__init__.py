from .sync_engine import (
    NONE_OPTION,
    CENTER_ANIMATION_MS,
    SyncEngine,
    SelectionState,
    PanelInputs,
    PanelState,
    Transition,
    mount,
    reconcile,
)

__all__ = [
    "NONE_OPTION",
    "CENTER_ANIMATION_MS",
    "SyncEngine",
    "SelectionState",
    "PanelInputs",
    "PanelState",
    "Transition",
    "mount",
    "reconcile",
]
