"""Shared test fixtures for vnforge."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from vnforge.state.models import Flag, Promise, Relation, StoryState
from vnforge.story.models import Story


def _line(character_id, text, kind="text"):
    return {"type": kind, "characterId": character_id, "text": text}


@pytest.fixture
def story_data() -> dict:
    """A small story in the authoring app's camelCase JSON shape.

    start -> meet_friend -> adventure_yes -> camp
                         -> adventure_no (ending)
    side_quest has no incoming edges.
    """
    return {
        "id": "story_1",
        "name": "A Simple Adventure",
        "startSceneId": "start",
        "characters": {
            "hero": {
                "id": "hero",
                "name": "Hero",
                "talkingStyle": "Confident and optimistic.",
                "appearance": "A young adventurer in practical leather armor.",
            },
            "friend": {
                "id": "friend",
                "name": "Friend",
                "talkingStyle": "Slightly cautious but warm and friendly.",
                "appearance": "Dressed in comfortable, casual clothes.",
            },
        },
        "scenes": {
            "start": {
                "id": "start",
                "name": "The Adventure Begins",
                "isCheckpoint": True,
                "importance": {"decisionWeight": 1.0, "payoffWeight": 0.0,
                               "emotionalIntensity": 0.0, "loreDensity": 0.0},
                "characters": [{"characterId": "hero", "spriteId": "normal", "position": "left"}],
                "dialogue": [
                    _line("hero", "What a beautiful day! I should go find my friend."),
                    {"type": "transition", "nextSceneId": "meet_friend"},
                ],
            },
            "meet_friend": {
                "id": "meet_friend",
                "name": "Meeting a Friend",
                "characters": [
                    {"characterId": "hero", "spriteId": "happy", "position": "left"},
                    {"characterId": "friend", "spriteId": "normal", "position": "right"},
                ],
                "dialogue": [
                    _line("hero", "Hey there! Fancy seeing you here."),
                    _line("friend", "Oh! You startled me. What are you up to?"),
                    {
                        "type": "choice",
                        "choices": [
                            {"text": "Want to go on an adventure?", "nextSceneId": "adventure_yes"},
                            {"text": "Just enjoying the weather.", "nextSceneId": "adventure_no"},
                            {"text": "Broken option"},
                            None,
                        ],
                    },
                ],
            },
            "adventure_yes": {
                "id": "adventure_yes",
                "name": "Adventure Accepted",
                "isCheckpoint": True,
                "characters": [{"characterId": "friend", "spriteId": "normal", "position": "right"}],
                "dialogue": [
                    _line("friend", "An adventure? I'm in!"),
                    {"type": "transition", "nextSceneId": "camp"},
                ],
            },
            "adventure_no": {
                "id": "adventure_no",
                "name": "Adventure Declined",
                "characters": [{"characterId": "friend", "spriteId": "normal", "position": "right"}],
                "dialogue": [
                    _line("friend", "Same here. It's a lovely day."),
                    {"type": "end_story"},
                ],
            },
            "camp": {
                "id": "camp",
                "name": "The Old Camp",
                "characters": [
                    {"characterId": "hero", "position": "left"},
                    {"characterId": "friend", "position": "right"},
                    {"characterId": "stranger", "position": "center"},
                ],
                "dialogue": [
                    _line("hero", "We made it to the old camp."),
                    _line("friend", "It looks abandoned."),
                    _line("hero", "Something feels off.", kind="thought"),
                    _line(None, "A twig snaps in the dark."),
                    _line("hero", "Show yourself!"),
                    _line("friend", "Maybe we should leave."),
                    _line("hero", "Not yet."),
                    _line("friend", "Fine, but I'm keeping the torch."),
                    {"type": "end_story"},
                ],
            },
            "side_quest": {
                "id": "side_quest",
                "name": "Forgotten Side Quest",
                "isCheckpoint": True,
                "characters": [{"characterId": "hero", "position": "left"}],
                "dialogue": [_line("hero", "Nobody links here.")],
            },
        },
        "checkpointSummaries": {
            "start": {"text": "The hero set out to find a friend.", "tokens": 9},
            "adventure_yes": {"text": "The friend agreed to join the adventure.", "tokens": 12},
            "side_quest": {"text": "An unrelated detour.", "tokens": 5},
        },
    }


@pytest.fixture
def story(story_data: dict) -> Story:
    return Story.model_validate(story_data)


@pytest.fixture
def story_file(tmp_path: Path, story_data: dict) -> Path:
    path = tmp_path / "story.json"
    path.write_text(json.dumps(story_data))
    return path


@pytest.fixture
def cyclic_story() -> Story:
    """a -> b -> c -> a, d -> b, e isolated."""

    def scene(scene_id: str, *targets: str) -> dict:
        return {
            "id": scene_id,
            "dialogue": [{"type": "transition", "nextSceneId": t} for t in targets],
        }

    return Story.model_validate({
        "startSceneId": "a",
        "scenes": {
            "a": scene("a", "b"),
            "b": scene("b", "c"),
            "c": scene("c", "a"),
            "d": scene("d", "b"),
            "e": scene("e"),
        },
    })


@pytest.fixture
def sample_state() -> StoryState:
    return StoryState(
        chapter=1,
        act=2,
        current_faction="Rebels",
        flags=[Flag(key="met_friend", value=True)],
        relations=[Relation(character_id="friend", trust=0.7, affection=0.4)],
        promises=[Promise(id="p1", description="Return the torch", kept=None)],
    )
