import pytest

from pdfrendr.analysis import analyze_obfuscation, detect_obfuscation, obfuscation_aware_pattern
from pdfrendr.analysis.obfuscation import decode_name
from pdfrendr.models import EncodingKind, ObfuscationLevel


def test_decode_sensitive_name():
    findings = detect_obfuscation("<< /S /J#61vaScript /JS (x) >>")

    assert len(findings) == 1
    finding = findings[0]
    assert finding.original_token == "/J#61vaScript"
    assert finding.decoded_token == "/JavaScript"
    assert finding.encoding_kind is EncodingKind.HEX
    assert finding.confidence == 0.95


def test_fully_encoded_name():
    findings = detect_obfuscation("/#4F#70#65#6E#41#63#74#69#6F#6E 5 0 R")
    assert findings[0].decoded_token == "/OpenAction"
    assert findings[0].confidence == 0.95


@pytest.mark.parametrize(
    "token,decoded,confidence",
    [
        ("/My#4Aavascript", "/MyJavascript", 0.75),
        ("/Emb#65dded", "/Embedded", 0.75),
        ("/Some#20Name", "/Some Name", 0.4),
    ],
)
def test_confidence_tiers(token, decoded, confidence):
    finding = detect_obfuscation(token)[0]
    assert finding.decoded_token == decoded
    assert finding.confidence == confidence


def test_malformed_escapes_are_not_reported():
    assert detect_obfuscation("/Bad#ZZName /Trail# /Short#4") == []


def test_malformed_escape_kept_literal_beside_valid_one():
    decoded, substituted = decode_name("/A#ZZ#42")
    assert decoded == "/A#ZZB"
    assert substituted


def test_plain_names_are_ignored():
    assert detect_obfuscation("/Type /Page /JavaScript") == []


def test_obfuscation_aware_pattern():
    pattern = obfuscation_aware_pattern("/JavaScript")

    assert pattern.search("/JavaScript ")
    assert pattern.search("/J#61vaScript>")
    assert pattern.search("/#4A#61#76#61Script")
    assert not pattern.search("/JavaScriptX ")
    assert not pattern.search("/J#62vaScript ")


def test_summary_levels():
    clean = analyze_obfuscation("/Type /Page /Parent 2 0 R")
    assert clean.level is ObfuscationLevel.NONE
    assert not clean.has_obfuscation
    assert clean.analysis == []

    heavy = analyze_obfuscation("/S /J#61vaScript")
    assert heavy.level is ObfuscationLevel.HEAVY
    assert heavy.analysis[0] == "Heavy obfuscation detected: 1 of 2 names encoded"
    assert heavy.analysis[1] == "Suspicious obfuscated names detected: /J#61vaScript -> /JavaScript"
    assert heavy.deobfuscated_text == "/S /JavaScript"


def test_summary_light_level():
    text = " ".join(f"/Name{i}" for i in range(20)) + " /Odd#20Name"
    summary = analyze_obfuscation(text)
    assert summary.level is ObfuscationLevel.LIGHT
    assert len(summary.analysis) == 1
