"""Load and save story files."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from vnforge.exceptions import StoryLoadError
from vnforge.story.models import Story


def load_story(path: str | Path) -> Story:
    """Load a story from a JSON file.

    Accepts either a bare story object or a project file of the shape
    ``{"stories": {id: story, ...}}``, in which case the first story is used.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise StoryLoadError(f"Could not read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise StoryLoadError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict) and "stories" in data and "scenes" not in data:
        stories = data.get("stories") or {}
        if not stories:
            raise StoryLoadError(f"Project file {path} contains no stories")
        data = next(iter(stories.values()))

    try:
        return Story.model_validate(data)
    except ValidationError as e:
        raise StoryLoadError(f"Invalid story in {path}: {e}") from e


def save_story(story: Story, path: str | Path) -> None:
    """Write a story as app-shaped (camelCase) JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(story.model_dump(by_alias=True), indent=2))
