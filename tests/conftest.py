from __future__ import annotations

import pytest


def build_pdf(catalog_extra: str = "", page_count: int = 1, extra_objects: list[str] | None = None) -> bytes:
    """Assemble a small PDF with a correct xref table."""
    first_page = 3
    extras = extra_objects or []
    kids = " ".join(f"{first_page + i} 0 R" for i in range(page_count))
    objects = [
        f"<< /Type /Catalog /Pages 2 0 R {catalog_extra} >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {page_count} >>",
    ]
    objects += ["<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>"] * page_count
    objects += extras

    out = b"%PDF-1.4\n"
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n{body}\nendobj\n".encode("latin-1")

    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n".encode()
    out += f"startxref\n{xref_offset}\n%%EOF\n".encode()
    return out


@pytest.fixture
def make_pdf():
    return build_pdf
