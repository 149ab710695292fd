"""
Matching extracted names against the portal's known clients and jobsites.

Extracted names are rough (camel-case split filenames, whitespace-merged
address lines), so matching is containment in either direction, ignoring
case and whitespace runs. Jobsites fall back to comparing suburbs.
"""

import re
from typing import Sequence

STATE_POSTCODE = re.compile(r"([A-Za-z\s]+)(?:,\s*)?(?:NSW|VIC|QLD|SA|WA|TAS|NT|ACT)\s*\d{4}", re.IGNORECASE)
STREET_PARTS = re.compile(r"\d+|\bst\b|\bstreet\b|\brd\b|\broad\b|\bave\b|\bavenue\b|\bplace\b|\bway\b|\blane\b|\bclose\b", re.IGNORECASE)


def _comparable(name: str) -> str:
    return re.sub(r"\s+", " ", name.lower()).strip()


def _match_by_containment(name: str, known_names: Sequence[str]) -> str | None:
    extracted = _comparable(name)
    if not extracted:
        return None

    for known in known_names:
        existing = _comparable(known)
        if not existing:
            continue
        if existing in extracted or extracted in existing:
            return known
    return None


def extract_suburb(address: str) -> str | None:
    """
    Best guess at the suburb of an address or jobsite name.

    Tried in order:
    1. a bare upper-case word is already a suburb ("PARRAMATTA")
    2. the words before a state and postcode ("Manly NSW 2095")
    3. the last word left after removing numbers and street types
    """
    if not address:
        return None

    cleaned = re.sub(r"\s+", " ", address).strip()
    if re.fullmatch(r"[A-Z]+", cleaned):
        return cleaned

    match = STATE_POSTCODE.search(cleaned)
    if match and match.group(1).strip():
        return match.group(1).strip()

    parts = [part for part in re.split(r"[,\s]+", STREET_PARTS.sub("", cleaned)) if part]
    if not parts:
        return None
    suburb = re.sub(r"[^A-Za-z\s]", "", parts[-1]).strip()
    return suburb or None


def match_known_jobsite(jobsite_name: str, known_jobsites: Sequence[str]) -> str | None:
    """
    Map an extracted jobsite onto a known jobsite name.

    First by name containment (first match in list order), then by suburb:
    a known name that is all upper case is taken as a suburb itself, others
    have their suburb extracted the same way as the extracted jobsite.
    Returns the known (canonical) name, or None.
    """
    matched = _match_by_containment(jobsite_name, known_jobsites)
    if matched:
        return matched

    suburb = extract_suburb(jobsite_name)
    if not suburb:
        return None

    for known in known_jobsites:
        if not known.strip():
            continue
        known_suburb = known if known.upper() == known else extract_suburb(known)
        if known_suburb and known_suburb.strip().upper() == suburb.upper():
            return known
    return None


def match_known_client(client_name: str, known_clients: Sequence[str]) -> str | None:
    """Map a filename-derived client name onto a known client company name"""
    return _match_by_containment(client_name, known_clients)
