class ExmachinaError(Exception):
    """Base class for errors raised while assembling the site."""


class ContentError(ExmachinaError):
    """A content file cannot be turned into a post."""

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source


class PluginConfigError(ExmachinaError):
    """A plugin entry in the site config is unknown or malformed."""


class BuildError(ExmachinaError):
    """The static build cannot complete."""
