from pydantic import BaseModel

class ExtractResponse(BaseModel):
    invoice_number: str | None = None
    date: str | None = None
    amount: float | None = None
    jobsite_name: str | None = None
    client_name: str | None = None
    source_filename: str | None = None
    line_count: int = 0
    missing_fields: list[str] = []  # Fields the user must fill in manually

class BatchItem(BaseModel):
    source_filename: str | None = None
    record: ExtractResponse | None = None
    error: str | None = None  # Set when the file could not be decoded

class BatchExtractResponse(BaseModel):
    total: int
    extracted: int
    failed: int
    items: list[BatchItem]
