class LevelGenError(Exception):
    """Base error for level generation."""


class ConfigError(LevelGenError):
    """Raised when generation settings are invalid."""


class TemplateError(LevelGenError):
    """Raised when a room template definition is invalid."""


class CatalogEmptyError(LevelGenError):
    """Raised when no room templates are available to build a catalog."""


class DepthError(LevelGenError, ValueError):
    """Raised when a container is asked for a depth it cannot reach."""


class GenerationStalledError(LevelGenError):
    """Raised when a generation step exhausts its sampling budget."""


class GenerationExhaustedError(LevelGenError):
    """Raised when the accept/reject loop exceeds its reset cap."""


class DepthMismatchWarning(UserWarning):
    """Issued when joining containers that live at different depths."""
