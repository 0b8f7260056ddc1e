"""
medtriage/errors.py
Error taxonomy for the analysis core and its outer surfaces.
"""


class TriageError(Exception):
    """Base class for every error raised by medtriage."""


class InvalidInput(TriageError, ValueError):
    """Empty, missing or non-text message. Rejected before the pipeline runs."""


class ClassifierUnready(TriageError, RuntimeError):
    """classify() called before train(). Programmer error."""


class UpstreamUnavailable(TriageError):
    """A voice or EHR service failed. Callers degrade by omitting that signal."""


class ConfigurationDisabled(TriageError):
    """A feature toggle is off; the request is refused before the pipeline."""

    def __init__(self, section: str, key: str = 'enabled'):
        self.section = section
        self.key     = key
        super().__init__(f"Feature disabled: {section}.{key}")
