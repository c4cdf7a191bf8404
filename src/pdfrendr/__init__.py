from .errors import PdfRendrError, ProcessingError, ProcessingStage
from .models import ProcessingOptions, ProcessingResult
from .processor import PdfProcessor, PdfRendr, process_pdf

__all__ = [
    "PdfProcessor",
    "PdfRendr",
    "PdfRendrError",
    "ProcessingError",
    "ProcessingOptions",
    "ProcessingResult",
    "ProcessingStage",
    "process_pdf",
]
