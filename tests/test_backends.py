import asyncio

import fitz
import pytest

from pdfrendr.analysis import detect_all, score
from pdfrendr.backends import PyMuPdfDocumentBuilder, PyMuPdfPageRenderer
from pdfrendr.errors import ProcessingError, ProcessingStage
from pdfrendr.models import ProcessingOptions
from pdfrendr.processor import CLEAN_DOCUMENT_FINDING, process_pdf


def _pdf_with_pages(sizes):
    document = fitz.open()
    for width, height in sizes:
        page = document.new_page(width=width, height=height)
        page.insert_text((20, 40), "hello")
    data = document.tobytes()
    document.close()
    return data


def test_renderer_reports_page_sizes_in_points():
    source = _pdf_with_pages([(200, 300), (400, 250)])
    pages = asyncio.run(PyMuPdfPageRenderer().render(source, ProcessingOptions(render_quality=1.0)))

    assert [p.page_index for p in pages] == [1, 2]
    assert [(p.width_pts, p.height_pts) for p in pages] == [(200, 300), (400, 250)]
    assert all(p.image.startswith(b"\x89PNG") for p in pages)


def test_renderer_rejects_non_pdf():
    with pytest.raises(ProcessingError) as excinfo:
        asyncio.run(PyMuPdfPageRenderer().render(b"this is not a pdf", ProcessingOptions()))
    assert excinfo.value.stage is ProcessingStage.EXTRACTION


def test_builder_round_trip():
    source = _pdf_with_pages([(100, 100)])
    pages = asyncio.run(PyMuPdfPageRenderer().render(source, ProcessingOptions(render_quality=0.5)))

    output = PyMuPdfDocumentBuilder().create()
    page = output.add_page(100, 100)
    output.draw_image(page, pages[0].image, 100, 100)
    data = asyncio.run(output.save(use_object_streams=False))

    assert output._closed
    output.close()

    rebuilt = fitz.open(stream=data, filetype="pdf")
    assert rebuilt.page_count == 1
    assert len(rebuilt[0].get_images()) == 1
    rebuilt.close()


def test_process_pdf_clean_three_pages(make_pdf):
    original = make_pdf(page_count=3)
    result = asyncio.run(process_pdf(original, ProcessingOptions(render_quality=0.5)))

    assert [f.name for f in result.findings] == [CLEAN_DOCUMENT_FINDING]
    assert result.original_size == len(original)
    assert result.rebuilt_size == len(result.rebuilt_document) > 0
    assert result.page_count == 3


def test_process_pdf_strips_javascript(make_pdf):
    original = make_pdf(
        "/OpenAction 4 0 R",
        extra_objects=["<< /Type /Action /S /JavaScript /JS (app.alert(1);) >>"],
    )
    assert score(original).score >= 120

    result = asyncio.run(
        process_pdf(original, ProcessingOptions(render_quality=0.5, compression_level=0))
    )

    assert "JavaScript actions (/JavaScript)" in [f.name for f in result.findings]
    assert detect_all(result.rebuilt_document) == []
    assert score(result.rebuilt_document).suspicious_counts["OpenAction"] == 0


def test_renderer_rejects_empty_input():
    with pytest.raises(ProcessingError) as excinfo:
        asyncio.run(PyMuPdfPageRenderer().render(b"", ProcessingOptions()))
    assert excinfo.value.stage is ProcessingStage.EXTRACTION
