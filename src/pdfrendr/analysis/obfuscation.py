from __future__ import annotations

import re

from pdfrendr.models import EncodingKind, ObfuscationFinding, ObfuscationLevel, ObfuscationSummary

_NAME_TOKEN = re.compile(r"/[A-Za-z0-9#]+")
_PLAIN_NAME = re.compile(r"/[A-Za-z][A-Za-z0-9]*")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

SENSITIVE_NAMES = frozenset(
    {
        "/JavaScript",
        "/JS",
        "/AA",
        "/OpenAction",
        "/Launch",
        "/URI",
        "/SubmitForm",
        "/GoTo",
        "/GoToR",
        "/Named",
        "/JBIG2Decode",
        "/RichMedia",
        "/XFA",
        "/EmbeddedFile",
        "/Filespec",
    }
)
SUSPICIOUS_KEYWORDS = ("java", "script", "action", "launch", "form", "embed")


def decode_name(token: str) -> tuple[str, bool]:
    """Decode ``#XX`` escapes in a name token.

    Returns the decoded token and whether any escape was substituted. A ``#``
    not followed by two hex digits is kept literally.
    """
    out: list[str] = []
    substituted = False
    i = 0
    while i < len(token):
        char = token[i]
        digits = token[i + 1 : i + 3]
        if char == "#" and len(digits) == 2 and set(digits) <= _HEX_DIGITS:
            out.append(chr(int(digits, 16)))
            substituted = True
            i += 3
            continue
        out.append(char)
        i += 1
    return "".join(out), substituted


def confidence_for(decoded: str) -> float:
    if decoded in SENSITIVE_NAMES:
        return 0.95
    lowered = decoded.lower()
    if any(keyword in lowered for keyword in SUSPICIOUS_KEYWORDS):
        return 0.75
    return 0.4


def detect_obfuscation(text: str) -> list[ObfuscationFinding]:
    findings: list[ObfuscationFinding] = []
    for token in _NAME_TOKEN.findall(text):
        if "#" not in token:
            continue
        decoded, substituted = decode_name(token)
        if not substituted:
            continue
        findings.append(
            ObfuscationFinding(
                original_token=token,
                decoded_token=decoded,
                encoding_kind=EncodingKind.HEX,
                confidence=confidence_for(decoded),
            )
        )
    return findings


def obfuscation_aware_pattern(literal: str) -> re.Pattern[str]:
    """Build a pattern matching ``literal`` with any character optionally ``#XX``-escaped.

    The leading ``/`` of a name is always literal. Matching is case-insensitive
    and requires the same terminator as the detection registry.
    """
    parts = []
    for char in literal:
        if char == "/":
            parts.append("/")
            continue
        parts.append(f"(?:{re.escape(char)}|#{ord(char):02X})")
    return re.compile("".join(parts) + r"(?=[ \t\n\r\x0b\x0c\xa0>]|\Z)", re.IGNORECASE)


def _level_for(ratio: float) -> ObfuscationLevel:
    if ratio == 0:
        return ObfuscationLevel.NONE
    if ratio < 0.1:
        return ObfuscationLevel.LIGHT
    if ratio < 0.3:
        return ObfuscationLevel.MODERATE
    return ObfuscationLevel.HEAVY


def analyze_obfuscation(text: str) -> ObfuscationSummary:
    names = detect_obfuscation(text)
    total_names = len(_PLAIN_NAME.findall(text))
    ratio = len(names) / total_names if total_names else 0.0
    level = _level_for(ratio)

    analysis: list[str] = []
    if level is not ObfuscationLevel.NONE:
        analysis.append(
            f"{level.value.capitalize()} obfuscation detected: "
            f"{len(names)} of {total_names} names encoded"
        )

    suspicious = [name for name in names if name.confidence > 0.7]
    if suspicious:
        pairs = ", ".join(f"{n.original_token} -> {n.decoded_token}" for n in suspicious)
        analysis.append(f"Suspicious obfuscated names detected: {pairs}")

    deobfuscated = text
    for name in names:
        deobfuscated = deobfuscated.replace(name.original_token, name.decoded_token)

    return ObfuscationSummary(
        has_obfuscation=bool(names),
        names=names,
        deobfuscated_text=deobfuscated,
        level=level,
        analysis=analysis,
    )
