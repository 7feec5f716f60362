"""Custom exceptions for vnforge."""


class VNForgeError(Exception):
    """Base exception for all vnforge errors."""


class ConfigError(VNForgeError):
    """Configuration-related errors."""


class StoryLoadError(VNForgeError):
    """A story or state file could not be read or validated."""


class UnknownSceneError(VNForgeError):
    """A scene id was requested that the story does not contain."""

    def __init__(self, scene_id: str):
        super().__init__(f"Scene '{scene_id}' not found in story")
        self.scene_id = scene_id
