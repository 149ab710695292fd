"""
Line-by-line view of a decoded invoice.

Used when an invoice template changes and the positional rules in
text_extractor stop lining up: shows what sits on each template line and
which amount the total block would pick.
"""

from typing import Sequence
from .invoice_types import LineInspection
from .text_extractor import (
    AMOUNT_WINDOW,
    DATE_LINE,
    INVOICE_NUMBER_LINE,
    JOBSITE_LINE,
    amount_candidates,
    normalize_line,
    select_best_amount,
)

SUBTOTAL_LINE = 29
GST_LINE = 30
TOTAL_LINE = 31
EMPLOYEE_SECTION_START = 36
HEADER_PREVIEW_LINES = 50


def _line(lines: Sequence[str], index: int) -> str:
    return normalize_line(lines[index]) if index < len(lines) else ""


def inspect_lines(lines: Sequence[str]) -> LineInspection:
    lines = [line for line in lines if line and line.strip()]

    window = [index for index in AMOUNT_WINDOW if index < len(lines)]
    candidates = amount_candidates(lines, window)
    best = select_best_amount(candidates)

    source = ""
    if best is not None:
        source = f"line {best.line_index + 1}" + (" (marked as total)" if best.is_total_keyword else "")

    return LineInspection(
        date=_line(lines, DATE_LINE),
        invoice_number=_line(lines, INVOICE_NUMBER_LINE),
        jobsite=_line(lines, JOBSITE_LINE),
        subtotal=_line(lines, SUBTOTAL_LINE),
        gst=_line(lines, GST_LINE),
        total=_line(lines, TOTAL_LINE),
        # Employee rows look like "Name - Position - Hours"
        employee_data=[normalize_line(line) for line in lines[EMPLOYEE_SECTION_START:] if "-" in line],
        total_lines=len(lines),
        possible_amounts=[
            {
                "line": c.line_index + 1,
                "text": normalize_line(lines[c.line_index]),
                "amount": c.value,
                "is_total": c.is_total_keyword,
            }
            for c in candidates
        ],
        highest_amount=best.value if best else 0.0,
        highest_amount_source=source,
        header_lines=[f"{i + 1}: {line}" for i, line in enumerate(lines[:HEADER_PREVIEW_LINES])],
    )
