"""
Best-effort invoice field extraction from decoded PDF text.

Two strategies share one interface:
- PositionalStrategy: fields sit at fixed line positions of the portal's
  invoice template (date on line 0, invoice number on line 1, jobsite
  address on line 8, subtotal/GST/total block on lines 24-32)
- KeywordStrategy: whole-text regex hunting ("invoice no.", "week ending",
  "$amount", "site:"), used to fill gaps on documents too short for the
  positional layout

Client name (and a jobsite fallback) come from the uploaded filename, never
from the document body.

Extraction on already-decoded text never raises: a field that does not match
is logged and left unset.
"""

import math
import re
from abc import ABC, abstractmethod
from datetime import date as calendar_date
from functools import reduce
from pathlib import PurePath
from typing import Iterable, Sequence
from loguru import logger
from pydantic import BaseModel
from .invoice_types import AmountCandidate, ExtractedInvoiceRecord, FilenameHints
from .jobsites import match_known_client, match_known_jobsite


DATE_LINE = 0
INVOICE_NUMBER_LINE = 1
JOBSITE_LINE = 8
AMOUNT_WINDOW = range(24, 33)  # lines 25-33 in the template's 1-indexed numbering

TOTAL_KEYWORDS = re.compile(r"total|amount due|balance due|invoice total|gst|incl", re.IGNORECASE)
AMOUNT_PATTERN = re.compile(r"\$?\s*(\d[\d,]*(?:\.\d{1,2})?)")
ADDRESS_PATTERN = re.compile(r"\d+.*(?:road|rd|street|st|ave|avenue|lane|ln),?\s+\w+", re.IGNORECASE)
INV_PREFIX = re.compile(r"^INV", re.IGNORECASE)
DATE_SEPARATOR = re.compile(r"[-/]")

KEYWORD_INVOICE_NUMBER = re.compile(r"invoice\s*no\.?\s*:?\s*([A-Za-z0-9-]+)", re.IGNORECASE)
KEYWORD_WEEK_ENDING = re.compile(r"week\s*ending\s*[:|]?\s*(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})", re.IGNORECASE)
KEYWORD_AMOUNT = re.compile(r"\$\s*(\d[\d,]*(?:\.\d+)?)")
KEYWORD_SITE = re.compile(r"site\s*:\s*([^\n]+)", re.IGNORECASE)

FILENAME_SEPARATORS = re.compile(r"[_\-\s]+")
INTERIOR_UPPERCASE = re.compile(r"(?<=.)([A-Z])")


def normalize_line(text: str) -> str:
    """
    Repair extraction artifacts in a single line.

    Collapses whitespace runs, then removes whitespace sitting between two
    word characters ("I N V 1 0 1" -> "INV101"). This is lossy: it also merges
    legitimately separated words ("12 Main St" -> "12MainSt"). The positional
    rules below are tuned against this exact output, so keep both steps.
    """
    collapsed = re.sub(r"\s+", " ", text)
    return re.sub(r"(\w)\s+(?=\w)", r"\1", collapsed).strip()


def parse_day_month_year(text: str) -> str | None:
    """Convert D/M/YY, DD-MM-YYYY etc. to YYYY-MM-DD, or None if not a real date"""
    parts = [part.strip() for part in DATE_SEPARATOR.split(text)]
    if len(parts) != 3:
        return None

    day, month, year = parts
    if not (
        re.fullmatch(r"\d{1,2}", day)
        and re.fullmatch(r"\d{1,2}", month)
        and re.fullmatch(r"\d{2}|\d{4}", year)
    ):
        return None

    day = day.zfill(2)
    month = month.zfill(2)
    if len(year) == 2:
        year = "20" + year

    try:
        calendar_date(int(year), int(month), int(day))
    except ValueError:
        return None
    return f"{year}-{month}-{day}"


def split_camel_case(token: str) -> str:
    return INTERIOR_UPPERCASE.sub(r" \1", token).strip()


def parse_filename_hints(source_filename: str) -> FilenameHints:
    """
    Derive client and jobsite names from an upload filename.

    Portal uploads are named ClientName_JobsiteName_InvoiceNumber.pdf (or with
    '-' / spaces as separators). Fewer than two tokens yields no hints.
    """
    stem = PurePath(source_filename or "").stem
    tokens = [token for token in FILENAME_SEPARATORS.split(stem) if token]
    if len(tokens) < 2:
        return FilenameHints()
    return FilenameHints(
        client_name=split_camel_case(tokens[0]),
        jobsite_name=split_camel_case(tokens[1]),
    )


def parse_amount(token: str) -> float | None:
    """Dollar token to a 2-decimal float; None when it overflows (e.g. hundreds of digits)"""
    value = round(float(token.replace(",", "")), 2)
    if not math.isfinite(value):
        return None
    return value


def amount_candidates(lines: Sequence[str], indices: Iterable[int]) -> list[AmountCandidate]:
    """First amount-shaped token of each listed line, tagged with its total-keyword flag"""
    candidates = []
    for index in indices:
        text = normalize_line(lines[index])
        match = AMOUNT_PATTERN.search(text)
        if not match:
            continue
        value = parse_amount(match.group(1))
        if value is None:
            logger.debug("Amount token is too large to be a real amount", line=index + 1)
            continue
        candidates.append(AmountCandidate(
            value=value,
            is_total_keyword=bool(TOTAL_KEYWORDS.search(text)),
            line_index=index,
        ))
    return candidates


def _prefer_labelled(best: AmountCandidate | None, candidate: AmountCandidate) -> AmountCandidate:
    # A total-keyword line wins regardless of magnitude; otherwise larger wins
    if best is None or candidate.is_total_keyword or candidate.value > best.value:
        return candidate
    return best


def _prefer_larger(best: AmountCandidate | None, candidate: AmountCandidate) -> AmountCandidate:
    if best is None or candidate.value > best.value:
        return candidate
    return best


def select_best_amount(candidates: Iterable[AmountCandidate]) -> AmountCandidate | None:
    """Fold amount candidates in line order; later total-keyword lines override earlier picks"""
    return reduce(_prefer_labelled, candidates, None)


def select_largest_amount(candidates: Iterable[AmountCandidate]) -> AmountCandidate | None:
    return reduce(_prefer_larger, candidates, None)


class ExtractionStrategy(ABC):
    """A way of recovering invoice fields from decoded lines"""

    name = "base"

    @abstractmethod
    def extract(self, lines: Sequence[str]) -> ExtractedInvoiceRecord:
        pass


class PositionalStrategy(ExtractionStrategy):
    """Reads fields from fixed line positions of the portal's invoice template"""

    name = "positional"

    def extract(self, lines: Sequence[str]) -> ExtractedInvoiceRecord:
        return ExtractedInvoiceRecord(
            date=self._date(lines),
            invoice_number=self._invoice_number(lines),
            jobsite_name=self._jobsite(lines),
            amount=self._amount(lines),
        )

    def _date(self, lines: Sequence[str]) -> str | None:
        if len(lines) <= DATE_LINE:
            return None
        text = normalize_line(lines[DATE_LINE])
        parsed = parse_day_month_year(text)
        if parsed is None:
            logger.debug("Date line did not hold a valid day/month/year", line=text)
        return parsed

    def _invoice_number(self, lines: Sequence[str]) -> str | None:
        if len(lines) <= INVOICE_NUMBER_LINE:
            return None
        raw = normalize_line(lines[INVOICE_NUMBER_LINE])
        # Only the prefix goes; separators after it are kept as-is
        cleaned = INV_PREFIX.sub("", raw)
        if not cleaned:
            logger.debug("Invoice number line was empty after prefix strip", line=raw)
            return None
        return cleaned

    def _jobsite(self, lines: Sequence[str]) -> str | None:
        if len(lines) <= JOBSITE_LINE:
            return None
        text = normalize_line(lines[JOBSITE_LINE])
        if ADDRESS_PATTERN.search(text):
            return text
        logger.debug("Jobsite line does not look like an address", line=text)
        return None

    def _amount(self, lines: Sequence[str]) -> float | None:
        window = [index for index in AMOUNT_WINDOW if index < len(lines)]
        best = select_best_amount(amount_candidates(lines, window))

        if best is None or best.value == 0:
            # Nothing usable in the usual block; only trust keyword lines elsewhere
            outside = [index for index in range(len(lines)) if index not in AMOUNT_WINDOW]
            labelled = [c for c in amount_candidates(lines, outside) if c.is_total_keyword]
            best = select_largest_amount(labelled)
            source = "extended search"
        else:
            source = "marked as total" if best.is_total_keyword else "highest in total block"

        if best is None or best.value <= 0:
            logger.debug("No amount could be extracted", line_count=len(lines))
            return None

        logger.debug("Selected invoice amount", amount=best.value, line=best.line_index + 1, source=source)
        return best.value


class KeywordStrategy(ExtractionStrategy):
    """Hunts labelled values anywhere in the text; layout-independent but less precise"""

    name = "keyword"

    def extract(self, lines: Sequence[str]) -> ExtractedInvoiceRecord:
        text = "\n".join(lines)
        record = ExtractedInvoiceRecord()

        match = KEYWORD_INVOICE_NUMBER.search(text)
        if match:
            record.invoice_number = match.group(1).strip()

        match = KEYWORD_WEEK_ENDING.search(text)
        if match:
            record.date = parse_day_month_year(match.group(1))
            if record.date is None:
                logger.debug("Week ending date is not a valid calendar date", value=match.group(1))

        match = KEYWORD_AMOUNT.search(text)
        if match:
            value = parse_amount(match.group(1))
            record.amount = value if value else None

        match = KEYWORD_SITE.search(text)
        if match and match.group(1).strip():
            record.jobsite_name = match.group(1).strip()

        return record


class ExtractorConfig(BaseModel):
    """Configuration for the text extractor (loaded from environment)"""
    keyword_fallback_min_lines: int = 9


class InvoiceTextExtractor:
    """
    Combines the positional and keyword strategies with filename hints.

    Positional extraction always runs. Documents with fewer than
    keyword_fallback_min_lines lines cannot carry the template layout, so the
    keyword strategy fills whichever fields positional left unset. A jobsite
    found in the body beats the filename's; client name only ever comes from
    the filename. Optional known jobsite/client lists map the extracted names
    onto their canonical spelling.

    Stateless: one instance can serve any number of concurrent calls.
    """

    def __init__(self, config: ExtractorConfig = None):
        self.config = config or ExtractorConfig()
        self.positional = PositionalStrategy()
        self.keyword = KeywordStrategy()

    def extract(
        self,
        lines: Sequence[str],
        source_filename: str,
        known_jobsites: Sequence[str] | None = None,
        known_clients: Sequence[str] | None = None,
    ) -> ExtractedInvoiceRecord:
        lines = [line for line in lines if line and line.strip()]
        fields = self.positional.extract(lines).model_dump()
        strategies = [self.positional.name]

        if len(lines) < self.config.keyword_fallback_min_lines:
            strategies.append(self.keyword.name)
            for name, value in self.keyword.extract(lines).model_dump().items():
                if fields[name] is None and value is not None:
                    fields[name] = value

        hints = parse_filename_hints(source_filename)
        fields["client_name"] = hints.client_name
        if fields["jobsite_name"] is None:
            fields["jobsite_name"] = hints.jobsite_name

        if fields["jobsite_name"] and known_jobsites:
            matched = match_known_jobsite(fields["jobsite_name"], known_jobsites)
            if matched:
                fields["jobsite_name"] = matched

        if fields["client_name"] and known_clients:
            matched = match_known_client(fields["client_name"], known_clients)
            if matched:
                fields["client_name"] = matched

        record = ExtractedInvoiceRecord(**fields)
        logger.info(
            "Extracted invoice fields",
            source_filename=source_filename,
            line_count=len(lines),
            strategies=strategies,
            missing=record.missing_fields(),
        )
        return record


def create_extractor(keyword_fallback_min_lines: int = None) -> InvoiceTextExtractor:
    """
    Factory function to create an extractor with optional overrides.

    Uses environment variables as defaults.
    """
    from ..core.config import settings

    config = ExtractorConfig(
        keyword_fallback_min_lines=(
            keyword_fallback_min_lines
            if keyword_fallback_min_lines is not None
            else settings.keyword_fallback_min_lines
        )
    )
    return InvoiceTextExtractor(config)


def extract(
    lines: Sequence[str],
    source_filename: str,
    known_jobsites: Sequence[str] | None = None,
    known_clients: Sequence[str] | None = None,
) -> ExtractedInvoiceRecord:
    """Extract an invoice record using the configured extractor"""
    return create_extractor().extract(lines, source_filename, known_jobsites, known_clients)
