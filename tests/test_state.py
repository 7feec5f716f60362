"""Tests for story state deltas and rendering."""

from __future__ import annotations

from vnforge.state.delta import apply_state_delta, render_state_to_text
from vnforge.state.models import (
    Flag,
    PromiseUpdate,
    RelationUpdate,
    StateDelta,
    StoryState,
)


class TestApplyStateDelta:
    def test_does_not_mutate_input(self, sample_state: StoryState):
        before = sample_state.model_dump()
        delta = StateDelta(
            chapter=3,
            flags=[Flag(key="met_friend", value=False)],
            relations=[RelationUpdate(character_id="friend", trust=0.1)],
            promises=[PromiseUpdate(id="p1", kept=True)],
        )
        apply_state_delta(sample_state, delta)
        assert sample_state.model_dump() == before

    def test_empty_delta_is_identity(self, sample_state: StoryState):
        result = apply_state_delta(sample_state, StateDelta())
        assert result.model_dump() == sample_state.model_dump()
        assert result is not sample_state

    def test_scalar_fields(self, sample_state: StoryState):
        delta = StateDelta(chapter=2, act=1, current_faction="Crown")
        result = apply_state_delta(sample_state, delta)
        assert (result.chapter, result.act, result.current_faction) == (2, 1, "Crown")

    def test_change_aliases(self, sample_state: StoryState):
        delta = StateDelta.model_validate({"chapterChange": 4, "actChange": 3})
        result = apply_state_delta(sample_state, delta)
        assert result.chapter == 4
        assert result.act == 3

    def test_flag_upsert(self, sample_state: StoryState):
        delta = StateDelta(flags=[
            Flag(key="met_friend", value=False),
            Flag(key="torch_count", value=2),
        ])
        result = apply_state_delta(sample_state, delta)
        assert [(f.key, f.value) for f in result.flags] == [
            ("met_friend", False),
            ("torch_count", 2),
        ]

    def test_relation_partial_update(self, sample_state: StoryState):
        delta = StateDelta(relations=[RelationUpdate(character_id="friend", affection=0.9)])
        relation = apply_state_delta(sample_state, delta).relations[0]
        assert relation.trust == 0.7
        assert relation.affection == 0.9

    def test_new_relation_defaults(self, sample_state: StoryState):
        delta = StateDelta(relations=[RelationUpdate(character_id="stranger", trust=0.2)])
        result = apply_state_delta(sample_state, delta)
        stranger = next(r for r in result.relations if r.character_id == "stranger")
        assert stranger.trust == 0.2
        assert stranger.affection == 0.5

    def test_relation_without_character_ignored(self, sample_state: StoryState):
        delta = StateDelta(relations=[RelationUpdate(trust=1.0)])
        result = apply_state_delta(sample_state, delta)
        assert result.model_dump()["relations"] == sample_state.model_dump()["relations"]

    def test_promise_resolution(self, sample_state: StoryState):
        delta = StateDelta(promises=[PromiseUpdate(id="p1", kept=False)])
        promise = apply_state_delta(sample_state, delta).promises[0]
        assert promise.kept is False
        assert promise.description == "Return the torch"

    def test_promise_absent_kept_left_unchanged(self, sample_state: StoryState):
        resolved = apply_state_delta(
            sample_state, StateDelta(promises=[PromiseUpdate(id="p1", kept=True)])
        )
        result = apply_state_delta(
            resolved, StateDelta(promises=[PromiseUpdate(id="p1", description="Return it")])
        )
        assert result.promises[0].kept is True
        assert result.promises[0].description == "Return it"

    def test_explicit_null_reopens_promise(self, sample_state: StoryState):
        resolved = apply_state_delta(
            sample_state, StateDelta(promises=[PromiseUpdate(id="p1", kept=True)])
        )
        delta = StateDelta.model_validate({"promises": [{"id": "p1", "kept": None}]})
        assert apply_state_delta(resolved, delta).promises[0].kept is None

    def test_new_promise(self, sample_state: StoryState):
        delta = StateDelta(promises=[PromiseUpdate(id="p2")])
        result = apply_state_delta(sample_state, delta)
        assert result.promises[-1].id == "p2"
        assert result.promises[-1].description == ""
        assert result.promises[-1].kept is None

    def test_idempotent(self, sample_state: StoryState):
        delta = StateDelta(
            chapter=2,
            flags=[Flag(key="found_camp", value=True)],
            relations=[RelationUpdate(character_id="hero", trust=0.9)],
            promises=[PromiseUpdate(id="p9", description="Keep watch", kept=True)],
        )
        once = apply_state_delta(sample_state, delta)
        twice = apply_state_delta(once, delta)
        assert once.model_dump() == twice.model_dump()

    def test_camel_case_delta(self, sample_state: StoryState):
        delta = StateDelta.model_validate({
            "currentFaction": "Guild",
            "relations": [{"characterId": "friend", "trust": 0.3}],
        })
        result = apply_state_delta(sample_state, delta)
        assert result.current_faction == "Guild"
        assert result.relations[0].trust == 0.3


class TestRenderStateToText:
    def test_full_render(self, sample_state: StoryState):
        assert render_state_to_text(sample_state) == (
            "CURRENT STATE:\n"
            "- Chapter 1, Act 2\n"
            "- Faction: Rebels\n"
            "- Flags: met_friend=True\n"
            "- Relations: friend (Trust: 0.7)\n"
            "- Promises: Return the torch (unresolved)"
        )

    def test_empty_collections_omitted(self):
        text = render_state_to_text(StoryState())
        assert text == "CURRENT STATE:\n- Chapter 1, Act 1\n- Faction: "

    def test_promise_statuses(self, sample_state: StoryState):
        delta = StateDelta(promises=[
            PromiseUpdate(id="p1", kept=True),
            PromiseUpdate(id="p2", description="Spare the thief", kept=False),
        ])
        text = render_state_to_text(apply_state_delta(sample_state, delta))
        assert "Return the torch (kept)" in text
        assert "Spare the thief (broken)" in text
