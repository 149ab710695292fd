from src.services.jobsites import extract_suburb, match_known_client, match_known_jobsite

KNOWN = ["Central Depot", "Harbour Works Stage 2", "  "]


def test_extracted_name_inside_known_name():
    assert match_known_jobsite("harbour   works", KNOWN) == "Harbour Works Stage 2"


def test_known_name_inside_extracted_line():
    assert match_known_jobsite("Central Depot - Loading Bay", KNOWN) == "Central Depot"


def test_no_match():
    assert match_known_jobsite("Site A", KNOWN) is None


def test_blank_names_never_match():
    assert match_known_jobsite("   ", KNOWN) is None
    assert match_known_jobsite("Site A", ["", " "]) is None


def test_first_match_in_list_order():
    assert match_known_jobsite("Depot", ["North Depot", "South Depot"]) == "North Depot"


def test_suburb_fallback_when_names_differ():
    known = ["Central Depot", "88 Church St, Parramatta"]
    assert match_known_jobsite("12SmithStreet, Parramatta", known) == "88 Church St, Parramatta"


def test_known_suburb_name():
    assert match_known_jobsite("4OceanRd, ManlyNSW2095", ["PARRAMATTA", "MANLY"]) == "MANLY"


def test_suburb_fallback_needs_equal_suburbs():
    assert match_known_jobsite("12SmithStreet, Parramatta", ["9 Station Rd, Penrith"]) is None


class TestExtractSuburb:

    def test_bare_upper_case_word(self):
        assert extract_suburb("PARRAMATTA") == "PARRAMATTA"

    def test_state_and_postcode(self):
        assert extract_suburb("4 Ocean Rd, Manly NSW 2095") == "Manly"

    def test_state_and_postcode_after_normalization(self):
        assert extract_suburb("4OceanRd, ManlyNSW2095") == "Manly"

    def test_last_word_after_street_parts(self):
        assert extract_suburb("12SmithStreet, Parramatta") == "Parramatta"
        assert extract_suburb("88 Church St, Parramatta") == "Parramatta"

    def test_nothing_left(self):
        assert extract_suburb("") is None
        assert extract_suburb("12 St") is None


class TestMatchKnownClient:

    def test_filename_client_inside_company_name(self):
        assert match_known_client("Acme Corp", ["Coastal Plumbing", "ACME Corp Pty Ltd"]) == "ACME Corp Pty Ltd"

    def test_no_match(self):
        assert match_known_client("Acme Corp", ["Coastal Plumbing"]) is None

    def test_no_known_clients(self):
        assert match_known_client("Acme Corp", []) is None
