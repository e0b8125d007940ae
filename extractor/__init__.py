from extractor.errors import (
    ExtractionError,
    ImageInputError,
    MissingApiKeyError,
    NoTableFoundError,
)
from extractor.gemini import build_model, extract_csv

__all__ = [
    "ExtractionError",
    "ImageInputError",
    "MissingApiKeyError",
    "NoTableFoundError",
    "build_model",
    "extract_csv",
]
