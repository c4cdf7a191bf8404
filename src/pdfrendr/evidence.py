from __future__ import annotations

from pdfrendr.models import EvidenceBlock, EvidenceLine, Highlight

BYTES_BEFORE = 32
BYTES_AFTER = 1024
BYTES_PER_LINE = 16
MAX_LINES = 640

# 16 bytes as "XX " minus the trailing space
_HEX_COLUMN_WIDTH = BYTES_PER_LINE * 3 - 1
# 8 offset digits + 2 spaces
_HEX_COLUMN_START = 10
# hex column + " |"
_ASCII_COLUMN_START = _HEX_COLUMN_START + _HEX_COLUMN_WIDTH + 2


def _ascii(chunk: bytes) -> str:
    return "".join(chr(b) if 0x20 <= b <= 0x7E else "." for b in chunk)


def _render_line(line_offset: int, chunk: bytes) -> str:
    hex_bytes = " ".join(f"{b:02X}" for b in chunk)
    return f"{line_offset:08X}  {hex_bytes.ljust(_HEX_COLUMN_WIDTH)} |{_ascii(chunk)}|"


def format_evidence(buffer: bytes, offset: int, match_length: int) -> EvidenceBlock:
    """Render the bytes around ``offset`` as an annotated hex dump.

    The window runs from 32 bytes before the match to 1024 bytes after its
    start, clamped to the buffer. Lines overlapping the match carry highlight
    spans for both the hex and the ASCII columns.
    """
    start = max(0, offset - BYTES_BEFORE)
    end = min(len(buffer), offset + BYTES_AFTER)
    window = bytes(buffer[start:end]) if end > start else b""
    match_end = offset + match_length

    lines: list[EvidenceLine] = []
    for i in range(0, len(window), BYTES_PER_LINE):
        chunk = window[i : i + BYTES_PER_LINE]
        line_start = start + i
        line_end = line_start + len(chunk)
        text = _render_line(line_start, chunk)

        if offset < line_end and match_end > line_start:
            first = max(0, offset - line_start)
            last = min(len(chunk), match_end - line_start)
            count = last - first
            lines.append(
                EvidenceLine(
                    text=text,
                    hex_highlight=Highlight(
                        start=_HEX_COLUMN_START + first * 3,
                        length=max(0, count * 3 - 1),
                    ),
                    ascii_highlight=Highlight(start=_ASCII_COLUMN_START + first, length=count),
                )
            )
        else:
            lines.append(EvidenceLine(text=text))

        # The window spans at most 1056 bytes (66 lines), so this is a fixed
        # upper bound rather than a limit reached in practice.
        if len(lines) >= MAX_LINES:
            break

    relative = offset - start
    header = (
        f"MATCH_OFFSET: 0x{offset:08X} | CHUNK_SIZE: {len(window)} bytes"
        f" | RANGE: 0x{start:X}-0x{start + len(window):X}",
        f"CONTEXT: {min(relative, BYTES_BEFORE)}B before"
        f" + {min(len(window) - relative, BYTES_AFTER)}B after | RELATIVE_POS: +{relative}",
        f"HEX_LINES: {len(lines)} | BYTES_SHOWN: {len(lines) * BYTES_PER_LINE}"
        " | ANALYSIS: PDF_OBJECT_STRUCTURE",
    )
    return EvidenceBlock(
        match_offset=offset,
        match_length=match_length,
        window_start=start,
        window_end=start + len(window),
        header=header,
        lines=tuple(lines),
    )
