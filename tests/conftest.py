"""
Pytest configuration and shared fixtures.

Provides a builder for small single-page text PDFs and a factory for the
portal's invoice template laid out line by line.
"""

import pytest


def build_pdf(lines):
    """Build a one-page PDF with each entry of `lines` on its own text row"""
    ops = ["BT", "/F1 12 Tf", "16 TL", "40 800 Td"]
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        ops.append(f"({escaped}) Tj T*")
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 595 842] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    pdf = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(pdf))
        pdf += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(pdf)
    pdf += b"xref\n0 %d\n" % (len(objects) + 1)
    pdf += b"0000000000 65535 f \n"
    for offset in offsets:
        pdf += b"%010d 00000 n \n" % offset
    pdf += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    pdf += b"startxref\n%d\n%%%%EOF\n" % xref_offset
    return bytes(pdf)


def build_template_lines(
    date="12/03/24",
    invoice_number="INV-2024-001",
    jobsite="12 Smith Street, Parramatta",
    amount_block=("Subtotal $100.00", "GST $10.00", "Total $110.00"),
    total_lines=40,
):
    """
    Lines of a portal invoice: date on line 0, invoice number on line 1,
    jobsite address on line 8, amount block starting at line 24, and
    employee rows from line 36.
    """
    lines = [f"Header line {chr(ord('A') + i)}" for i in range(total_lines)]
    lines[0] = date
    lines[1] = invoice_number
    lines[8] = jobsite
    for offset, text in enumerate(amount_block):
        lines[24 + offset] = text
    for index in range(36, total_lines):
        lines[index] = f"Worker {chr(ord('A') + index - 36)} - Labourer - Week"
    return lines


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def template_lines():
    return build_template_lines
