from __future__ import annotations

import re
from dataclasses import dataclass

from pdfrendr.analysis.tokens import as_text, count_token, find_token
from pdfrendr.models import RiskAssessment, RiskTier, StructureInfo

_OBJECT_DEFINITION = re.compile(r"\b\d+\s+\d+\s+obj\b", re.ASCII)
_VERSION = re.compile(r"%PDF-(\d+\.\d+)")

_KEYWORDS: dict[str, re.Pattern[str]] = {
    "endobj": re.compile(r"\bendobj\b", re.ASCII),
    "stream": re.compile(r"\bstream\b", re.ASCII),
    "endstream": re.compile(r"\bendstream\b", re.ASCII),
    "xref": re.compile(r"\bxref\b", re.ASCII),
    "trailer": re.compile(r"\btrailer\b", re.ASCII),
    "startxref": re.compile(r"\bstartxref\b", re.ASCII),
}

STRUCTURAL_NAMES = ("Page", "Encrypt", "ObjStm")
SUSPICIOUS_NAMES = (
    "JavaScript",
    "JS",
    "AA",
    "OpenAction",
    "Launch",
    "URI",
    "SubmitForm",
    "GoTo",
    "GoToR",
    "Named",
    "JBIG2Decode",
    "RichMedia",
    "XFA",
    "EmbeddedFile",
    "Filespec",
    "AcroForm",
)


@dataclass(frozen=True)
class RiskRule:
    """Adds ``weight`` when every token group has at least one occurrence."""

    groups: tuple[tuple[str, ...], ...]
    weight: int
    message: str


# Heuristic weights; order is the order of the rationale sentences.
RISK_RULES: tuple[RiskRule, ...] = (
    RiskRule(
        (("JavaScript", "JS"),), 50, "JavaScript detected ({count} occurrences) - high risk"
    ),
    RiskRule(
        (("AA", "OpenAction"),),
        30,
        "Automatic actions detected ({count} occurrences) - automatic execution",
    ),
    RiskRule(
        (("JavaScript", "JS"), ("AA", "OpenAction")),
        40,
        "JavaScript + Automatic actions - extremely suspicious combination",
    ),
    RiskRule(
        (("Launch",),),
        25,
        "Launch actions detected ({count} occurrences) - can execute external programs",
    ),
    RiskRule(
        (("URI",),), 15, "External URIs detected ({count} occurrences) - potential data exfiltration"
    ),
    RiskRule(
        (("SubmitForm",),),
        20,
        "Form submission detected ({count} occurrences) - potential data leakage",
    ),
    RiskRule(
        (("EmbeddedFile",),), 15, "Embedded files detected ({count} occurrences) - hidden payloads"
    ),
    RiskRule(
        (("JBIG2Decode",),),
        25,
        "JBIG2 compression detected ({count} occurrences) - known exploit vector",
    ),
    RiskRule(
        (("RichMedia",),), 20, "Rich media detected ({count} occurrences) - Flash exploit vector"
    ),
    RiskRule(
        (("XFA",),), 15, "XFA forms detected ({count} occurrences) - complex dynamic forms"
    ),
    RiskRule(
        (("ObjStm",),), 10, "Object streams detected ({count} occurrences) - potential obfuscation"
    ),
    RiskRule(
        (("Encrypt",),), 5, "Encryption detected ({count} occurrences) - requires analysis"
    ),
)

TIER_THRESHOLDS: tuple[tuple[int, RiskTier, str], ...] = (
    (80, RiskTier.CRITICAL, "CRITICAL: Multiple high-risk indicators - likely malicious"),
    (50, RiskTier.HIGH, "HIGH RISK: Suspicious combination of features"),
    (20, RiskTier.MEDIUM, "MEDIUM RISK: Some suspicious features detected"),
    (0, RiskTier.LOW, "LOW RISK: Minimal suspicious indicators"),
)


def tier_for_score(score: int) -> tuple[RiskTier, str]:
    for threshold, tier, headline in TIER_THRESHOLDS:
        if score >= threshold:
            return tier, headline
    return RiskTier.LOW, TIER_THRESHOLDS[-1][2]


def structural_counts(text: str) -> dict[str, int]:
    counts = {"obj": len(_OBJECT_DEFINITION.findall(text))}
    for keyword, pattern in _KEYWORDS.items():
        counts[keyword] = len(pattern.findall(text))
    for name in STRUCTURAL_NAMES:
        counts[name] = count_token(text, f"/{name}")
    return counts


def suspicious_counts(text: str) -> dict[str, int]:
    return {name: count_token(text, f"/{name}") for name in SUSPICIOUS_NAMES}


def score_counts(counts: dict[str, int]) -> tuple[int, list[str]]:
    score = 0
    rationale: list[str] = []
    for rule in RISK_RULES:
        group_totals = [sum(counts.get(token, 0) for token in group) for group in rule.groups]
        if not all(group_totals):
            continue
        score += rule.weight
        rationale.append(rule.message.format(count=sum(group_totals)))
    return score, rationale


def score(buffer: bytes) -> RiskAssessment:
    """Count structural and suspicious tokens and derive a weighted risk score."""
    text = as_text(buffer)
    structural = structural_counts(text)
    suspicious = suspicious_counts(text)

    total, rationale = score_counts({**structural, **suspicious})
    tier, headline = tier_for_score(total)
    rationale.insert(0, headline)

    return RiskAssessment(
        structural_counts=structural,
        suspicious_counts=suspicious,
        score=total,
        tier=tier,
        rationale=rationale,
    )


def structure(buffer: bytes) -> StructureInfo:
    text = as_text(buffer)
    version_match = _VERSION.search(text)
    object_count = len(_OBJECT_DEFINITION.findall(text))
    endobj_count = len(_KEYWORDS["endobj"].findall(text))

    return StructureInfo(
        pdf_version=version_match.group(1) if version_match else "unknown",
        header_position=text.find("%PDF-"),
        is_linearized=find_token(text, "/Linearized") != -1,
        has_incremental_updates=len(_KEYWORDS["xref"].findall(text)) > 1,
        object_count_mismatch=object_count != endobj_count,
        total_object_count=object_count,
        stream_object_count=len(_KEYWORDS["stream"].findall(text)),
        object_stream_count=count_token(text, "/ObjStm"),
        encrypted_object_count=count_token(text, "/Encrypt"),
    )


def fingerprint(assessment: RiskAssessment, info: StructureInfo) -> str:
    """Coarse document-class identifier. Not a hash."""
    tags = [
        f"v{info.pdf_version}",
        f"obj:{assessment.count('obj')}",
        f"stream:{assessment.count('stream')}",
        f"page:{assessment.count('Page')}",
        "inc" if info.has_incremental_updates else "std",
        "lin" if info.is_linearized else "reg",
        "js" if assessment.count("JavaScript") > 0 else "",
        "aa" if assessment.count("AA") > 0 else "",
        "launch" if assessment.count("Launch") > 0 else "",
        "objstm" if assessment.count("ObjStm") > 0 else "",
        "enc" if assessment.count("Encrypt") > 0 else "",
    ]
    return "-".join(tag for tag in tags if tag)
