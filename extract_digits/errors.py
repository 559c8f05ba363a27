class ExtractDigitsError(Exception):
    """Base class for errors raised by extract_digits."""


class InvalidImageError(ExtractDigitsError, ValueError):
    """The input image is missing or has zero area."""


class ModelLoadError(ExtractDigitsError, RuntimeError):
    """The model artifact could not be opened."""


class ModelNotLoadedError(ExtractDigitsError, RuntimeError):
    """Classification was requested without an open model."""


class ModelOutputError(ExtractDigitsError, RuntimeError):
    """The model returned something other than 10 class scores."""
