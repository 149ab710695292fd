from pathlib import PurePath
from fastapi import APIRouter, UploadFile, File, Form, HTTPException, Request
from loguru import logger
from ..deps import BatchExtractResponse, BatchItem, ExtractResponse
from ...core.config import settings
from ...models.invoice import ExtractTextRequest
from ...services.invoice_types import LineInspection, ParseFailure
from ...services.line_inspector import inspect_lines
from ...services.pdf_text import decode_pdf_lines
from ...services.text_extractor import create_extractor

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _parse_name_list(raw: str | None) -> list[str] | None:
    if not raw:
        return None
    names = [name.strip() for name in raw.split(",") if name.strip()]
    return names or None


def _check_upload(content: bytes, filename: str | None):
    if not content:
        raise HTTPException(status_code=422, detail="No file provided (either multipart or raw body)")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.max_upload_bytes / (1024 * 1024):.0f}MB",
        )
    if filename and PurePath(filename).suffix.lower() != ".pdf":
        raise HTTPException(status_code=415, detail="Only PDF files are allowed")


def _build_response(
    lines: list[str],
    filename: str,
    known_jobsites: list[str] | None = None,
    known_clients: list[str] | None = None,
) -> ExtractResponse:
    record = create_extractor().extract(lines, filename, known_jobsites, known_clients)
    return ExtractResponse(
        **record.model_dump(),
        source_filename=filename or None,
        line_count=len(lines),
        missing_fields=record.missing_fields(),
    )


@router.post("/extract", response_model=ExtractResponse)
async def extract(
    request: Request,
    file: UploadFile = File(None),
    known_jobsites: str | None = Form(None),
    known_clients: str | None = Form(None),
    filename: str | None = None,
):
    """
    Decode an invoice PDF and extract its fields.

    Accepts either:
    - multipart/form-data (file upload via form, optional comma-separated known_jobsites and known_clients)
    - application/pdf or application/octet-stream (raw binary body, ?filename=... for client/jobsite hints)

    Fields that cannot be recovered are null and listed in missing_fields
    so the portal can prompt for them.
    """
    try:
        if file:
            # Multipart form-data upload
            content = await file.read()
            filename = file.filename
        else:
            # Raw binary body (e.g., from scripts)
            content = await request.body()

        _check_upload(content, filename)
        lines = decode_pdf_lines(content)
        return _build_response(
            lines,
            filename or "",
            _parse_name_list(known_jobsites),
            _parse_name_list(known_clients),
        )
    except HTTPException:
        raise
    except ParseFailure as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Extraction failed: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/extract-text", response_model=ExtractResponse)
async def extract_text(req: ExtractTextRequest):
    """
    Extract invoice fields from text the caller already decoded.

    Example request:
    {
        "lines": ["12/03/24", "INV-1042", "..."],
        "filename": "AcmeCorp_SiteA_INV1042.pdf",
        "known_jobsites": ["Site A", "Harbour Works"],
        "known_clients": ["Acme Corporation"]
    }
    """
    lines = [line for line in req.lines if line and line.strip()]
    return _build_response(lines, req.filename, req.known_jobsites, req.known_clients)


@router.post("/extract-batch", response_model=BatchExtractResponse)
async def extract_batch(
    files: list[UploadFile] = File(...),
    known_jobsites: str | None = Form(None),
    known_clients: str | None = Form(None),
):
    """
    Extract several invoices in one request.

    Each file is handled independently: one unreadable PDF is reported in its
    own entry and does not stop the rest.
    """
    jobsites = _parse_name_list(known_jobsites)
    clients = _parse_name_list(known_clients)
    items = []

    for upload in files:
        content = await upload.read()
        try:
            _check_upload(content, upload.filename)
            lines = decode_pdf_lines(content)
            items.append(BatchItem(
                source_filename=upload.filename,
                record=_build_response(lines, upload.filename or "", jobsites, clients),
            ))
        except HTTPException as e:
            items.append(BatchItem(source_filename=upload.filename, error=str(e.detail)))
        except ParseFailure as e:
            items.append(BatchItem(source_filename=upload.filename, error=str(e)))

    failed = sum(1 for item in items if item.error)
    logger.info("Batch extraction finished", total=len(items), failed=failed)

    return BatchExtractResponse(
        total=len(items),
        extracted=len(items) - failed,
        failed=failed,
        items=items,
    )


@router.post("/inspect-lines", response_model=LineInspection)
async def inspect_invoice_lines(file: UploadFile = File(...)):
    """Show the decoded lines and the total-block amount candidates (for debugging templates)"""
    content = await file.read()
    _check_upload(content, file.filename)
    try:
        lines = decode_pdf_lines(content)
    except ParseFailure as e:
        raise HTTPException(status_code=400, detail=str(e))
    return inspect_lines(lines)
