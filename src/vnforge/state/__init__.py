"""Story state: partial updates and text rendering."""

from vnforge.state.delta import apply_state_delta, render_state_to_text
from vnforge.state.models import (
    Flag,
    Promise,
    PromiseUpdate,
    Relation,
    RelationUpdate,
    StateDelta,
    StoryState,
)

__all__ = [
    "Flag",
    "Promise",
    "PromiseUpdate",
    "Relation",
    "RelationUpdate",
    "StateDelta",
    "StoryState",
    "apply_state_delta",
    "render_state_to_text",
]
