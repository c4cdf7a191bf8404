from pdfrendr.analysis import assess
from pdfrendr.evidence import format_evidence
from pdfrendr.formatting import MESSAGE_LIMIT, render_evidence, render_report
from pdfrendr.models import Finding, ProcessingResult
from pdfrendr.processor import CLEAN_DOCUMENT_FINDING


def test_render_evidence_marks_match():
    block = format_evidence(b"abc /JS (x)", 4, 3)
    text = render_evidence(block).split("\n")

    assert text[:3] == list(block.header)
    assert text[3] == "=" * 120
    assert "[2F 4A 53]" in text[4]
    assert text[4].endswith("|abc [/JS] (x)|")


def test_render_evidence_line_limit():
    block = format_evidence(b"x" * 400, 200, 1)
    assert len(render_evidence(block, max_lines=2).split("\n")) == 6


def test_render_report(make_pdf):
    original = make_pdf("/OpenAction << /S /JavaScript /JS (x) >>")
    assessment = assess(original)
    result = ProcessingResult(
        rebuilt_document=b"%PDF-1.7",
        findings=assessment.findings,
        original_size=len(original),
        rebuilt_size=2048,
        elapsed_ms=12,
        page_count=1,
    )

    report = render_report("invoice.pdf", result, assessment)

    assert "PDF sanitized: invoice.pdf" in report
    assert "Size: " in report and "-> 2.0 KB" in report
    assert f"Risk: CRITICAL (score {assessment.risk.score})" in report
    assert f"Fingerprint: {assessment.fingerprint}" in report
    offset = original.index(b"/JavaScript")
    assert f"- JavaScript actions (/JavaScript) at 0x{offset:08X}" in report


def test_render_report_clean_marker():
    result = ProcessingResult(
        rebuilt_document=b"x",
        findings=[Finding(name=CLEAN_DOCUMENT_FINDING)],
        original_size=10,
        rebuilt_size=1,
        elapsed_ms=0,
    )
    report = render_report("a.pdf", result)

    assert f"- {CLEAN_DOCUMENT_FINDING}" in report
    assert "Risk:" not in report


def test_render_report_fits_message_limit_for_heavily_obfuscated_names(make_pdf):
    names = " ".join(f"/J#61vaScript{i} 1" for i in range(300))
    original = make_pdf(names)
    assessment = assess(original)
    result = ProcessingResult(
        rebuilt_document=b"%PDF-1.7",
        findings=assessment.findings,
        original_size=len(original),
        rebuilt_size=1024,
        elapsed_ms=5,
        page_count=1,
    )

    report = render_report("obfuscated.pdf", result, assessment)

    assert len(render_report("obfuscated.pdf", result, assessment, max_length=None)) > MESSAGE_LIMIT
    assert len(report) <= MESSAGE_LIMIT
    assert "Suspicious obfuscated names detected: /J#61vaScript0 -> /JavaScript0" in report
    assert "PDF sanitized: obfuscated.pdf" in report


def test_render_report_truncates_to_max_length():
    findings = [Finding(name=f"Finding number {i}", byte_offset=i) for i in range(500)]
    result = ProcessingResult(
        rebuilt_document=b"x",
        findings=findings,
        original_size=10,
        rebuilt_size=1,
        elapsed_ms=0,
    )

    report = render_report("a.pdf", result, max_length=500)

    assert len(report) == 500
    assert report.endswith("... (report truncated)")
