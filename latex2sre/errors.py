"""
Exception hierarchy for latex2sre.

Only configuration errors and engine setup errors are fatal for a run.
Asset and conversion errors are raised per expression so that batch and
stream processing can report them and move on.
"""


class Latex2SreError(Exception):
    """Base class for all errors raised by latex2sre."""


class ConfigurationError(Latex2SreError):
    """Bad or missing override path, config file, or engine setup."""


class AssetNotFoundError(Latex2SreError):
    """Requested locale data is missing from every available source."""

    def __init__(self, locale: str, source: str = ""):
        self.locale = locale
        self.source = source
        message = f"Locale data not found: {locale}"
        if source:
            message += f" ({source})"
        super().__init__(message)


# Name used by the locale cache
LocaleNotFoundError = AssetNotFoundError


class ExtractionError(Latex2SreError):
    """Embedded assets could not be extracted to a temporary directory."""


class ConversionError(Latex2SreError):
    """A single expression failed to convert to MathML or to speech."""
