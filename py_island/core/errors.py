"""Exceptions raised by the island generation pipeline."""


class ConfigurationError(ValueError):
    """Invalid generation settings, detected before any buffer is touched."""


class JobInProgressError(RuntimeError):
    """A shore falloff job is still running on the elevation buffer."""
