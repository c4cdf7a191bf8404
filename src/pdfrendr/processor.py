from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any, Protocol

from pdfrendr.analysis import detect_all
from pdfrendr.errors import ProcessingError, ProcessingStage
from pdfrendr.models import Finding, PageRaster, ProcessingOptions, ProcessingResult

LOGGER = logging.getLogger(__name__)

CLEAN_DOCUMENT_FINDING = "Document processed as images (dynamic objects removed)"


class PageRenderer(Protocol):
    async def render(self, document: bytes, options: ProcessingOptions) -> list[PageRaster]:
        ...


class OutputDocument(Protocol):
    def add_page(self, width: float, height: float) -> Any:
        ...

    def draw_image(self, page: Any, image: bytes, width: float, height: float) -> None:
        ...

    async def save(self, use_object_streams: bool) -> bytes:
        """Serialize and release the document, whether or not the caller is still waiting."""
        ...

    def close(self) -> None:
        ...


class DocumentBuilder(Protocol):
    def create(self) -> OutputDocument:
        ...


def detect_removed_objects(original: bytes) -> list[Finding]:
    findings = detect_all(original)
    if not findings:
        findings.append(Finding(name=CLEAN_DOCUMENT_FINDING))
    return findings


def _check_page_order(pages: Sequence[PageRaster]) -> None:
    previous = 0
    for page in pages:
        if page.page_index <= previous:
            raise ValueError(
                f"Page rasters must be in page order, got page {page.page_index} after {previous}."
            )
        previous = page.page_index


class PdfProcessor:
    """Rebuilds a document from page rasters and reports what was detected in the original."""

    def __init__(self, builder: DocumentBuilder, options: ProcessingOptions | None = None) -> None:
        self._builder = builder
        self._options = options or ProcessingOptions()

    @property
    def options(self) -> ProcessingOptions:
        return self._options

    async def process(self, original: bytes, pages: Sequence[PageRaster]) -> ProcessingResult:
        _check_page_order(pages)
        started = time.monotonic()

        findings = detect_removed_objects(original)
        LOGGER.debug("Detected %d indicator(s) in original document.", len(findings))

        try:
            document = self._builder.create()
        except Exception as exc:  # noqa: BLE001
            raise ProcessingError(
                ProcessingStage.SERIALIZATION, f"could not create document: {exc}"
            ) from exc

        try:
            for page in pages:
                self._add_page(document, page)
        except BaseException:
            document.close()
            raise

        # save() releases the document itself, even when this task is cancelled.
        try:
            rebuilt = await document.save(self._options.use_object_streams)
        except Exception as exc:  # noqa: BLE001
            raise ProcessingError(ProcessingStage.SERIALIZATION, str(exc)) from exc

        elapsed_ms = int((time.monotonic() - started) * 1000)
        LOGGER.info(
            "Rebuilt %d page(s): %d finding(s), %d -> %d bytes in %d ms.",
            len(pages),
            len(findings),
            len(original),
            len(rebuilt),
            elapsed_ms,
        )
        return ProcessingResult(
            rebuilt_document=rebuilt,
            findings=findings,
            original_size=len(original),
            rebuilt_size=len(rebuilt),
            elapsed_ms=elapsed_ms,
            page_count=len(pages),
        )

    def _add_page(self, document: OutputDocument, page: PageRaster) -> None:
        try:
            output_page = document.add_page(page.width_pts, page.height_pts)
            if not page.image:
                LOGGER.warning(
                    "No image data for page %d; emitting a blank page.", page.page_index
                )
                return
            document.draw_image(output_page, page.image, page.width_pts, page.height_pts)
        except Exception as exc:  # noqa: BLE001
            raise ProcessingError(
                ProcessingStage.SERIALIZATION, f"page {page.page_index}: {exc}"
            ) from exc


class PdfRendr:
    """Renders a document to page images and rebuilds it from those images only."""

    def __init__(
        self,
        renderer: PageRenderer,
        builder: DocumentBuilder,
        options: ProcessingOptions | None = None,
    ) -> None:
        self._renderer = renderer
        self._processor = PdfProcessor(builder, options)

    @property
    def options(self) -> ProcessingOptions:
        return self._processor.options

    async def sanitize(self, document: bytes) -> ProcessingResult:
        # Renderers may hold on to the buffer they are given.
        original = bytes(document)
        try:
            pages = await self._renderer.render(bytes(original), self.options)
        except ProcessingError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ProcessingError(ProcessingStage.EXTRACTION, str(exc)) from exc
        LOGGER.debug("Renderer returned %d page(s).", len(pages))
        return await self._processor.process(original, pages)


async def process_pdf(document: bytes, options: ProcessingOptions | None = None) -> ProcessingResult:
    from pdfrendr.backends import PyMuPdfDocumentBuilder, PyMuPdfPageRenderer

    rendr = PdfRendr(PyMuPdfPageRenderer(), PyMuPdfDocumentBuilder(), options)
    return await rendr.sanitize(document)
