import pytest

from krishiai.errors import SchemeNotFound
from krishiai.services.schemes import get_government_schemes, get_scheme


def test_catalogue_order_is_stable():
    ids = [s.id for s in get_government_schemes()]
    assert ids == ["pm-kisan", "fasal-bima", "soil-health-card", "kcc"]


def test_every_scheme_links_out():
    for scheme in get_government_schemes():
        assert scheme.link.startswith("https://")
        assert scheme.benefits


def test_query_matches_title_description_and_benefits():
    assert [s.id for s in get_government_schemes("insurance")] == ["fasal-bima"]
    assert [s.id for s in get_government_schemes("FERTILIZER")] == ["soil-health-card"]
    assert [s.id for s in get_government_schemes("  ")] == [s.id for s in get_government_schemes()]


def test_query_without_match():
    assert get_government_schemes("tractor subsidy") == []


def test_lookup_by_id():
    assert get_scheme("kcc").title == "Kisan Credit Card (KCC)"
    with pytest.raises(SchemeNotFound):
        get_scheme("pm-nothing")
