"""Data models for story state and partial state updates."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from vnforge.story.models import StoryModel


class Flag(StoryModel):
    """A keyed story flag."""

    key: str
    value: str | int | float | bool


class Relation(StoryModel):
    """Trust and affection between the player and one character."""

    character_id: str
    trust: float = 0.5
    affection: float = 0.5


class Promise(StoryModel):
    """A promise made during play. ``kept`` is None while unresolved."""

    id: str
    description: str = ""
    kept: bool | None = None


class StoryState(StoryModel):
    """Running state of one playthrough."""

    chapter: int = 1
    act: int = 1
    current_faction: str = ""
    flags: list[Flag] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)
    promises: list[Promise] = Field(default_factory=list)


class RelationUpdate(StoryModel):
    """Partial relation update; absent fields are left unchanged."""

    character_id: str = ""
    trust: float | None = None
    affection: float | None = None


class PromiseUpdate(StoryModel):
    """Partial promise update; absent fields are left unchanged.

    An explicit ``kept: null`` marks the promise unresolved again.
    """

    id: str
    description: str | None = None
    kept: bool | None = None


class StateDelta(StoryModel):
    """Partial update to a StoryState. A ``None`` field means no change."""

    chapter: int | None = Field(
        default=None, validation_alias=AliasChoices("chapter", "chapterChange")
    )
    act: int | None = Field(
        default=None, validation_alias=AliasChoices("act", "actChange")
    )
    current_faction: str | None = None
    flags: list[Flag] | None = None
    relations: list[RelationUpdate] | None = None
    promises: list[PromiseUpdate] | None = None
