"""Prerender error hierarchy.

All prerender-specific errors inherit from PrerenderError for easy catching.
"""


class PrerenderError(Exception):
    """Base error for all prerender operations."""


class ConfigError(PrerenderError):
    """Invalid or unreadable configuration."""


class BuildError(PrerenderError):
    """The external build command did not exit cleanly."""


class ServerError(PrerenderError):
    """The local static server could not be started."""


class RenderError(PrerenderError):
    """The render worker was used incorrectly (e.g. before initialization)."""


class OutputWriteError(PrerenderError):
    """A page rendered successfully but could not be written to disk."""
