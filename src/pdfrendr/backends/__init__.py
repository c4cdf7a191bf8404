from .pymupdf import PyMuPdfDocumentBuilder, PyMuPdfOutputDocument, PyMuPdfPageRenderer

__all__ = ["PyMuPdfDocumentBuilder", "PyMuPdfOutputDocument", "PyMuPdfPageRenderer"]
