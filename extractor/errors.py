from __future__ import annotations


class ImageInputError(ValueError):
    """The pasted or uploaded image cannot be sent to the model."""


class ExtractionError(RuntimeError):
    """The model call failed or returned nothing usable."""


class MissingApiKeyError(ExtractionError):
    pass


class NoTableFoundError(ExtractionError):
    """The model replied with the no-table sentinel."""
