from .obfuscation import analyze_obfuscation, detect_obfuscation, obfuscation_aware_pattern
from .patterns import INDICATOR_PATTERNS, IndicatorPattern, analyze_pdf, detect_all, detected_names
from .statistics import fingerprint, score, structure, tier_for_score
from .tokens import as_text

from pdfrendr.models import DocumentAssessment


def assess(buffer: bytes) -> DocumentAssessment:
    data = bytes(buffer)
    risk = score(data)
    info = structure(data)
    return DocumentAssessment(
        findings=detect_all(data),
        risk=risk,
        structure=info,
        fingerprint=fingerprint(risk, info),
        obfuscation=analyze_obfuscation(as_text(data)),
    )


__all__ = [
    "INDICATOR_PATTERNS",
    "IndicatorPattern",
    "analyze_obfuscation",
    "analyze_pdf",
    "as_text",
    "assess",
    "detect_all",
    "detect_obfuscation",
    "detected_names",
    "fingerprint",
    "obfuscation_aware_pattern",
    "score",
    "structure",
    "tier_for_score",
]
