from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real


class RiskTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EncodingKind(str, Enum):
    HEX = "hex"
    NONE = "none"


class ObfuscationLevel(str, Enum):
    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


@dataclass(frozen=True)
class Highlight:
    start: int
    length: int


@dataclass(frozen=True)
class EvidenceLine:
    text: str
    hex_highlight: Highlight | None = None
    ascii_highlight: Highlight | None = None

    def to_json(self) -> str:
        payload: dict[str, object] = {"line": self.text}
        if self.hex_highlight is not None and self.ascii_highlight is not None:
            payload["hexHighlight"] = {
                "start": self.hex_highlight.start,
                "length": self.hex_highlight.length,
            }
            payload["asciiHighlight"] = {
                "start": self.ascii_highlight.start,
                "length": self.ascii_highlight.length,
            }
        return json.dumps(payload, separators=(",", ":"))


@dataclass(frozen=True)
class EvidenceBlock:
    """Hex/ASCII dump around a match.

    ``header`` holds the three summary lines, ``lines`` one entry per 16-byte
    chunk. ``to_text`` produces the interchange format: header, a rule of
    ``=`` characters, then one JSON object per dump line.
    """

    match_offset: int
    match_length: int
    window_start: int
    window_end: int
    header: tuple[str, ...]
    lines: tuple[EvidenceLine, ...]

    def to_text(self) -> str:
        body = [line.to_json() for line in self.lines]
        return "\n".join([*self.header, "=" * 120, *body])


@dataclass(frozen=True)
class Finding:
    """One located indicator.

    The orchestrator's synthetic clean-document marker has no offset and no
    evidence; every registry finding has both.
    """

    name: str
    byte_offset: int | None = None
    match_length: int = 0
    evidence: EvidenceBlock | None = None

    @property
    def evidence_text(self) -> str | None:
        if self.evidence is None:
            return None
        return self.evidence.to_text()


@dataclass(frozen=True)
class DetectionSummary:
    names: list[str]
    total_size: int
    size_kb: int
    has_javascript: bool
    has_embedded_files: bool
    has_digital_signatures: bool
    has_xfa_forms: bool
    has_embedded_fonts: bool


@dataclass(frozen=True)
class ObfuscationFinding:
    original_token: str
    decoded_token: str
    encoding_kind: EncodingKind
    confidence: float


@dataclass
class ObfuscationSummary:
    has_obfuscation: bool
    names: list[ObfuscationFinding]
    deobfuscated_text: str
    level: ObfuscationLevel
    analysis: list[str] = field(default_factory=list)


@dataclass
class RiskAssessment:
    structural_counts: dict[str, int]
    suspicious_counts: dict[str, int]
    score: int
    tier: RiskTier
    rationale: list[str]

    def count(self, token: str) -> int:
        if token in self.suspicious_counts:
            return self.suspicious_counts[token]
        return self.structural_counts.get(token, 0)


@dataclass(frozen=True)
class StructureInfo:
    pdf_version: str
    header_position: int
    is_linearized: bool
    has_incremental_updates: bool
    object_count_mismatch: bool
    total_object_count: int
    stream_object_count: int
    object_stream_count: int
    encrypted_object_count: int


@dataclass(frozen=True)
class PageRaster:
    page_index: int
    width_pts: float
    height_pts: float
    image: bytes | None


@dataclass(frozen=True)
class ProcessingOptions:
    render_quality: float = 2.0
    compression_level: int = 2
    timeout_ms: int | None = 30000

    def __post_init__(self) -> None:
        if isinstance(self.render_quality, bool) or not isinstance(self.render_quality, Real):
            raise ValueError(f"render_quality must be a number, got {self.render_quality!r}")
        if self.render_quality <= 0:
            raise ValueError(f"render_quality must be positive, got {self.render_quality!r}")
        if isinstance(self.compression_level, bool) or not isinstance(self.compression_level, int):
            raise ValueError(
                f"compression_level must be an integer, got {self.compression_level!r}"
            )
        if self.compression_level < 0:
            raise ValueError(
                f"compression_level must not be negative, got {self.compression_level!r}"
            )
        if self.timeout_ms is not None and (
            isinstance(self.timeout_ms, bool)
            or not isinstance(self.timeout_ms, int)
            or self.timeout_ms <= 0
        ):
            raise ValueError(f"timeout_ms must be a positive integer, got {self.timeout_ms!r}")

    @property
    def use_object_streams(self) -> bool:
        return self.compression_level > 1


@dataclass
class ProcessingResult:
    rebuilt_document: bytes
    findings: list[Finding]
    original_size: int
    rebuilt_size: int
    elapsed_ms: int
    page_count: int = 0


@dataclass
class DocumentAssessment:
    findings: list[Finding]
    risk: RiskAssessment
    structure: StructureInfo
    fingerprint: str
    obfuscation: ObfuscationSummary
