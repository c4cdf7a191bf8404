from __future__ import annotations

import asyncio
import logging

import fitz  # PyMuPDF

from pdfrendr.errors import ProcessingError, ProcessingStage
from pdfrendr.models import PageRaster, ProcessingOptions

LOGGER = logging.getLogger(__name__)


class PyMuPdfPageRenderer:
    """Renders every page of a PDF to PNG with MuPDF."""

    async def render(self, document: bytes, options: ProcessingOptions) -> list[PageRaster]:
        return await asyncio.to_thread(self._render, document, float(options.render_quality))

    def _render(self, document: bytes, zoom: float) -> list[PageRaster]:
        try:
            source = fitz.open(stream=document, filetype="pdf")
        except Exception as exc:  # noqa: BLE001
            raise ProcessingError(
                ProcessingStage.EXTRACTION, f"could not open PDF: {exc}"
            ) from exc

        try:
            if source.needs_pass:
                raise ProcessingError(
                    ProcessingStage.EXTRACTION, "document is password protected"
                )
            if source.page_count == 0:
                raise ProcessingError(ProcessingStage.EXTRACTION, "document has no pages")

            matrix = fitz.Matrix(zoom, zoom)
            rasters: list[PageRaster] = []
            for page_index in range(source.page_count):
                try:
                    page = source.load_page(page_index)
                    pixmap = page.get_pixmap(matrix=matrix, alpha=False)
                    image = pixmap.tobytes("png")
                except Exception as exc:  # noqa: BLE001
                    raise ProcessingError(
                        ProcessingStage.RENDERING, f"page {page_index + 1}: {exc}"
                    ) from exc

                rasters.append(
                    PageRaster(
                        page_index=page_index + 1,
                        width_pts=page.rect.width,
                        height_pts=page.rect.height,
                        image=image,
                    )
                )
                LOGGER.debug(
                    "Rendered page %d at %.1fx (%dx%d px).",
                    page_index + 1,
                    zoom,
                    pixmap.width,
                    pixmap.height,
                )
            return rasters
        finally:
            source.close()


class PyMuPdfOutputDocument:
    def __init__(self, document: fitz.Document) -> None:
        self._document = document
        self._closed = False

    def add_page(self, width: float, height: float) -> fitz.Page:
        return self._document.new_page(width=width, height=height)

    def draw_image(self, page: fitz.Page, image: bytes, width: float, height: float) -> None:
        page.insert_image(fitz.Rect(0, 0, width, height), stream=image)

    async def save(self, use_object_streams: bool) -> bytes:
        # The worker thread closes the document once serialization ends.
        return await asyncio.to_thread(self._save_and_close, use_object_streams)

    def _save_and_close(self, use_object_streams: bool) -> bytes:
        try:
            return self._document.tobytes(
                garbage=4,
                deflate=True,
                use_objstms=1 if use_object_streams else 0,
            )
        finally:
            self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._document.close()


class PyMuPdfDocumentBuilder:
    def create(self) -> PyMuPdfOutputDocument:
        return PyMuPdfOutputDocument(fitz.open())
