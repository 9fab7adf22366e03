"""OCR services package."""

from contaluz.services.ocr.plate_reader import (
    PLATE_READ_FAILED_MESSAGE,
    OCRError,
    PlateReadError,
    PlateReaderService,
    UnsupportedImageError,
)

__all__ = [
    "PLATE_READ_FAILED_MESSAGE",
    "OCRError",
    "PlateReadError",
    "PlateReaderService",
    "UnsupportedImageError",
]
