"""Apply partial updates to story state and render state as text."""

from __future__ import annotations

from vnforge.state.models import Promise, Relation, StateDelta, StoryState


def apply_state_delta(state: StoryState, delta: StateDelta) -> StoryState:
    """Return a new state with ``delta`` merged in; ``state`` is not mutated.

    Flags, relations and promises are upserted by key, character id and
    promise id respectively, so applying the same delta twice is a no-op
    the second time.
    """
    new_state = state.model_copy(deep=True)

    if delta.chapter is not None:
        new_state.chapter = delta.chapter
    if delta.act is not None:
        new_state.act = delta.act
    if delta.current_faction is not None:
        new_state.current_faction = delta.current_faction

    for flag in delta.flags or []:
        existing = next((f for f in new_state.flags if f.key == flag.key), None)
        if existing is not None:
            existing.value = flag.value
        else:
            new_state.flags.append(flag.model_copy())

    for update in delta.relations or []:
        if not update.character_id:
            continue
        existing = next(
            (r for r in new_state.relations if r.character_id == update.character_id),
            None,
        )
        if existing is not None:
            if update.trust is not None:
                existing.trust = update.trust
            if update.affection is not None:
                existing.affection = update.affection
        else:
            new_state.relations.append(Relation(
                character_id=update.character_id,
                trust=update.trust if update.trust is not None else 0.5,
                affection=update.affection if update.affection is not None else 0.5,
            ))

    for update in delta.promises or []:
        existing = next((p for p in new_state.promises if p.id == update.id), None)
        if existing is not None:
            if "kept" in update.model_fields_set:
                existing.kept = update.kept
            if update.description:
                existing.description = update.description
        else:
            new_state.promises.append(Promise(
                id=update.id,
                description=update.description or "",
                kept=update.kept,
            ))

    return new_state


def _promise_status(kept: bool | None) -> str:
    if kept is None:
        return "unresolved"
    return "kept" if kept else "broken"


def render_state_to_text(state: StoryState) -> str:
    """Human-readable state dump for prompts and debugging.

    Field order is fixed: chapter/act, faction, flags, relations, promises.
    Empty collections are omitted.
    """
    lines = [
        "CURRENT STATE:",
        f"- Chapter {state.chapter}, Act {state.act}",
        f"- Faction: {state.current_faction}",
    ]
    if state.flags:
        lines.append("- Flags: " + ", ".join(f"{f.key}={f.value}" for f in state.flags))
    if state.relations:
        lines.append("- Relations: " + ", ".join(
            f"{r.character_id} (Trust: {r.trust:.1f})" for r in state.relations
        ))
    if state.promises:
        lines.append("- Promises: " + ", ".join(
            f"{p.description} ({_promise_status(p.kept)})" for p in state.promises
        ))
    return "\n".join(lines)
