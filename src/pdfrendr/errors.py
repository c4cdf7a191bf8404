from __future__ import annotations

from enum import Enum


class ProcessingStage(str, Enum):
    EXTRACTION = "extraction"
    RENDERING = "rendering"
    SERIALIZATION = "serialization"


class PdfRendrError(Exception):
    """Base class for errors raised by pdfrendr."""


class ProcessingError(PdfRendrError):
    def __init__(self, stage: ProcessingStage, message: str) -> None:
        self.stage = stage
        self.message = message
        super().__init__(f"{stage.value} failed: {message}")
