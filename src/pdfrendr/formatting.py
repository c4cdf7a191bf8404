from __future__ import annotations

from pdfrendr.models import DocumentAssessment, EvidenceBlock, ProcessingResult, RiskTier

# Telegram rejects longer messages.
MESSAGE_LIMIT = 4096
MAX_SENTENCE_LENGTH = 300


def _human_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.2f} MB"


def _clip(sentence: str, limit: int = MAX_SENTENCE_LENGTH) -> str:
    if len(sentence) <= limit:
        return sentence
    return sentence[: limit - 3] + "..."


def _truncate(text: str, max_length: int | None) -> str:
    if max_length is None or len(text) <= max_length:
        return text
    marker = "\n... (report truncated)"
    return text[: max_length - len(marker)] + marker


def _tier_label(tier: RiskTier) -> str:
    if tier is RiskTier.CRITICAL:
        return "CRITICAL"
    if tier is RiskTier.HIGH:
        return "HIGH"
    if tier is RiskTier.MEDIUM:
        return "MEDIUM"
    return "LOW"


def render_evidence(block: EvidenceBlock, max_lines: int | None = None) -> str:
    """Plain-text evidence with highlighted hex and ASCII bytes wrapped in brackets."""
    lines = list(block.header)
    lines.append("=" * 120)
    shown = block.lines if max_lines is None else block.lines[:max_lines]
    for line in shown:
        text = line.text
        if line.hex_highlight is not None and line.ascii_highlight is not None:
            a_start = line.ascii_highlight.start
            a_end = a_start + line.ascii_highlight.length
            h_start = line.hex_highlight.start
            h_end = h_start + line.hex_highlight.length
            # ASCII column first so the hex indices stay valid.
            text = text[:a_start] + "[" + text[a_start:a_end] + "]" + text[a_end:]
            text = text[:h_start] + "[" + text[h_start:h_end] + "]" + text[h_end:]
        lines.append(text)
    return "\n".join(lines)


def render_report(
    file_name: str,
    result: ProcessingResult,
    assessment: DocumentAssessment | None = None,
    max_length: int | None = MESSAGE_LIMIT,
) -> str:
    lines = [
        f"PDF sanitized: {file_name}",
        f"Pages rebuilt: {result.page_count}",
        f"Size: {_human_size(result.original_size)} -> {_human_size(result.rebuilt_size)}",
        f"Time: {result.elapsed_ms} ms",
    ]

    if assessment is not None:
        lines.extend(
            [
                f"Risk: {_tier_label(assessment.risk.tier)} (score {assessment.risk.score})",
                f"Fingerprint: {assessment.fingerprint}",
                "",
                "Analysis:",
            ]
        )
        lines.extend(f"- {_clip(sentence)}" for sentence in assessment.risk.rationale)
        lines.extend(f"- {_clip(sentence)}" for sentence in assessment.obfuscation.analysis)

    lines.extend(["", "Removed:"])
    for finding in result.findings:
        if finding.byte_offset is None:
            lines.append(f"- {finding.name}")
        else:
            lines.append(f"- {finding.name} at 0x{finding.byte_offset:08X}")

    lines.extend(
        [
            "",
            "Guidance:",
            "- The rebuilt file contains page images only; text is no longer selectable.",
            "- Keep the original if you need its forms, links or signatures.",
        ]
    )
    return _truncate("\n".join(lines), max_length)
