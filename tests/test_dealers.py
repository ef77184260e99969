import pytest

from funnel_processor.cleaning.dealers import (
    DealerRegistry,
    dealer_keys,
    extract_dealers,
    is_plausible_dealer_name,
    normalize_dealer_name,
)


def test_normalize_strips_codes_accents_and_case():
    assert normalize_dealer_name("Concessionária ABC (462011)") == "concessionaria abc"
    assert normalize_dealer_name("CONCESSIONARIA ABC") == "concessionaria abc"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  São   Paulo\tVeículos  ", "sao paulo veiculos"),
        ("Loja (01) Centro (SP)", "loja centro"),
        ("", ""),
        (None, ""),
        ("(123456)", ""),
    ],
)
def test_normalize_edge_cases(raw, expected):
    assert normalize_dealer_name(raw) == expected


@pytest.mark.parametrize(
    "candidate, plausible",
    [
        ("Beta Motors", True),
        ("Loja 12", True),
        ("cliente@email.com", False),
        ("Lead 4620117", False),
        ("AB", False),
        ("  AB  ", False),
    ],
)
def test_plausibility_filter(candidate, plausible):
    assert is_plausible_dealer_name(candidate) is plausible


def test_registry_keeps_first_seen_display_name():
    registry = DealerRegistry()
    first = registry.add("  Concessionária ABC (462011) ")
    second = registry.add("CONCESSIONARIA ABC")
    assert first == second == "concessionaria abc"
    assert registry.display_name("concessionaria abc") == "Concessionária ABC (462011)"
    assert len(registry) == 1


def test_registry_ignores_blank_names():
    registry = DealerRegistry()
    assert registry.add("   ") is None
    assert registry.add("(000)") is None
    assert registry.add(None) is None
    assert len(registry) == 0


def test_extract_dealers_sorted_deduplicated_and_filtered():
    leads = [
        {"Dealer": "Zeta Motors"},
        {"Concessionária": "Ágil Veículos"},
        {"dealer": "ZETA MOTORS"},
        {"Dealer": 12},
    ]
    test_drives = [
        {"Dealer": "beta car"},
        {"Dealer": "cliente@email.com"},
        {"Dealer": "5511987654321"},
        {"Dealer": "ab"},
    ]
    journey = [{"Dealer": "AB"}]
    billed = [{"dealer": "Ágil  Veiculos"}]

    dealers = extract_dealers([leads, test_drives, journey, billed, []])

    # "12" and "AB" come from trusted dealer columns; sheet 2 noise is rejected
    assert dealers == ["12", "AB", "Ágil Veículos", "beta car", "Zeta Motors"]


def test_extract_dealers_tolerates_missing_sheets():
    assert extract_dealers([[{"Dealer": "Solo Auto"}]]) == ["Solo Auto"]


def test_dealer_keys_normalizes_selection():
    assert dealer_keys(["Concessionária ABC", "", "beta motors "]) == {"concessionaria abc", "beta motors"}
