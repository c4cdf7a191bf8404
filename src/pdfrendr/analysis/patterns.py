from __future__ import annotations

from dataclasses import dataclass

from pdfrendr.analysis.tokens import as_text, find_token
from pdfrendr.evidence import format_evidence
from pdfrendr.models import DetectionSummary, Finding


@dataclass(frozen=True)
class IndicatorPattern:
    name: str
    literal: str
    bounded: bool = True

    def match(self, text: str, buffer: bytes) -> Finding | None:
        position = find_token(text, self.literal, self.bounded)
        if position == -1:
            return None
        return Finding(
            name=self.name,
            byte_offset=position,
            match_length=len(self.literal),
            evidence=format_evidence(buffer, position, len(self.literal)),
        )


# Display names are matched verbatim by consumers of the finding list.
INDICATOR_PATTERNS: tuple[IndicatorPattern, ...] = (
    IndicatorPattern("JavaScript actions (/JavaScript)", "/JavaScript"),
    IndicatorPattern("JavaScript objects (/JS)", "/JS"),
    IndicatorPattern("Form submission actions (/SubmitForm)", "/SubmitForm"),
    IndicatorPattern("External links (/URI)", "/URI"),
    IndicatorPattern("Embedded files (/EmbeddedFile)", "/EmbeddedFile"),
    IndicatorPattern("File specifications (/Filespec)", "/Filespec"),
    IndicatorPattern("Additional actions (/AA)", "/AA"),
    # the trailing space is the boundary
    IndicatorPattern("Action objects (/A)", "/A ", bounded=False),
    IndicatorPattern("Digital signatures (/Sig)", "/Sig"),
    IndicatorPattern("Signature fields (/ByteRange)", "/ByteRange"),
    IndicatorPattern("XFA forms (/XFA)", "/XFA"),
    IndicatorPattern("Type1 fonts (/Type1)", "/Type1"),
    IndicatorPattern("CFF fonts (/CFF)", "/CFF"),
    IndicatorPattern("TrueType fonts (/TrueType)", "/TrueType"),
    IndicatorPattern("GoTo actions (/GoTo)", "/GoTo"),
    IndicatorPattern("Launch actions (/Launch)", "/Launch"),
    IndicatorPattern("Named actions (/Named)", "/Named"),
    IndicatorPattern("Rich media (/RichMedia)", "/RichMedia"),
    IndicatorPattern("Sound objects (/Sound)", "/Sound"),
    IndicatorPattern("Movie objects (/Movie)", "/Movie"),
)


def detect_all(
    buffer: bytes, patterns: tuple[IndicatorPattern, ...] = INDICATOR_PATTERNS
) -> list[Finding]:
    """Run every pattern over ``buffer`` in table order.

    Each pattern reports at most its first occurrence. An empty list means no
    indicator was found.
    """
    data = bytes(buffer)
    text = as_text(data)
    findings: list[Finding] = []
    for pattern in patterns:
        finding = pattern.match(text, data)
        if finding is not None:
            findings.append(finding)
    return findings


def detected_names(buffer: bytes) -> list[str]:
    text = as_text(buffer)
    return [p.name for p in INDICATOR_PATTERNS if find_token(text, p.literal, p.bounded) != -1]


def analyze_pdf(buffer: bytes) -> DetectionSummary:
    names = detected_names(buffer)
    return DetectionSummary(
        names=names,
        total_size=len(buffer),
        size_kb=round(len(buffer) / 1024),
        has_javascript=any("JavaScript" in name for name in names),
        has_embedded_files=any("Embedded files" in name for name in names),
        has_digital_signatures=any(
            name.startswith(("Digital signatures", "Signature fields")) for name in names
        ),
        has_xfa_forms=any("XFA" in name for name in names),
        has_embedded_fonts=any("fonts (/" in name for name in names),
    )
