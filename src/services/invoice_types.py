from typing import NamedTuple
from pydantic import BaseModel


class InvoiceExtractionError(Exception):
    """Base class for invoice extraction failures"""


class ParseFailure(InvoiceExtractionError):
    """The PDF could not be decoded into text at all (corrupt or unreadable file)"""


class AmountCandidate(NamedTuple):
    value: float
    is_total_keyword: bool
    line_index: int


class ExtractedInvoiceRecord(BaseModel):
    invoice_number: str | None = None
    date: str | None = None  # YYYY-MM-DD
    amount: float | None = None
    jobsite_name: str | None = None
    client_name: str | None = None

    def missing_fields(self) -> list[str]:
        """Names of fields extraction could not populate, in declaration order"""
        return [name for name, value in self.model_dump().items() if value is None]


class FilenameHints(BaseModel):
    client_name: str | None = None
    jobsite_name: str | None = None


class LineInspection(BaseModel):
    """Diagnostic view of a decoded invoice, used to tune the positional rules"""
    date: str = ""
    invoice_number: str = ""
    jobsite: str = ""
    subtotal: str = ""
    gst: str = ""
    total: str = ""
    employee_data: list[str] = []
    total_lines: int = 0
    possible_amounts: list[dict] = []
    highest_amount: float = 0.0
    highest_amount_source: str = ""
    header_lines: list[str] = []
