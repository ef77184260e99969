import pytest

from funnel_processor.analysis import (
    DecidedLeadsComputation,
    create_default_metrics_engine,
    mean_or_none,
    store_visit_count,
)
from funnel_processor.models import FunnelMetricPair
from funnel_processor.sheets import SheetSet


def _lead(billed=0, test_drive=0, **extra):
    row = {"Dealer": "Beta Motors", "Flag_Faturado": billed, "Flag_TestDrive": test_drive}
    row.update(extra)
    return row


@pytest.fixture
def engine():
    return create_default_metrics_engine()


def test_leads_direct_counts_billed_without_test_drive(engine):
    leads = [_lead(billed=1)] * 3 + [_lead(billed=1, test_drive=1)] * 2 + [_lead()] * 5
    results = engine.compute(SheetSet.from_tables([leads]))

    funnel = results["funnel_metrics"]
    assert funnel.leads_direct == FunnelMetricPair(from_=10, to=3)
    assert funnel.leads_with_test_drive == FunnelMetricPair(from_=10, to=2)


def test_flag_synonyms_and_loose_truthiness(engine):
    leads = [
        {"flag_faturado": "1", "flag_test_drive": True},
        {"faturado": 1.0, "FlagTestDrive": "0"},
        {"Faturado": "yes"},
    ]
    results = engine.compute(SheetSet.from_tables([leads]))
    assert results["leads_billed"] == 2
    assert results["leads_with_test_drive"] == 1
    assert results["leads_direct"] == 1


def test_billed_sheet_wins_when_present(engine):
    leads = [_lead(billed=1)] * 4
    billed = [{"Dealer": "Beta"}] * 2
    results = engine.compute(SheetSet.from_tables([leads, [], [], billed]))
    assert results["billed"] == 2


def test_billed_falls_back_to_flags_when_sheet_is_empty(engine):
    leads = [_lead(billed=1)] * 4
    test_drives = [{"Flag_Faturado": 1}, {"Flag_Faturado": 0}, {"Flag_Faturado": "1"}]
    results = engine.compute(SheetSet.from_tables([leads, test_drives]))

    assert results["billed"] == 6
    funnel = results["funnel_metrics"]
    assert funnel.test_drive_to_sale == FunnelMetricPair(from_=3, to=2)


def test_store_visits_read_from_third_column_regardless_of_header(engine):
    visits = [
        {"Loja": "A", "Mes": "jan", "Qualquer": 10},
        {"Loja": "B", "Mes": "jan", "Qualquer": "5"},
        {"Loja": "C", "Mes": "jan", "Qualquer": "sem dado"},
        {"Loja": "D", "Mes": "jan"},
    ]
    results = engine.compute(SheetSet.from_tables([[], [], [], [], visits]))

    assert results["total_store_visits"] == 15
    funnel = results["funnel_metrics"]
    assert funnel.visits_to_test_drive == FunnelMetricPair(from_=15, to=0)
    assert funnel.visits_to_billing == FunnelMetricPair(from_=15, to=0)


@pytest.mark.parametrize("total, expected", [(2.5, 3), (3.5, 4), (2.4, 2)])
def test_store_visit_total_rounds_half_up_in_pairs(engine, total, expected):
    visits = [{"Loja": "A", "Mes": "jan", "Visitas": total}]
    funnel = engine.compute(SheetSet.from_tables([[], [], [], [], visits]))["funnel_metrics"]
    assert funnel.visits_to_billing.from_ == expected


def test_store_visit_count_short_row():
    assert store_visit_count({"Loja": "A", "Visitas": 3}) is None


def test_complete_journey_pair(engine):
    leads = [_lead()] * 5
    journey = [{"Dealer": "X"}] * 2
    funnel = engine.compute(SheetSet.from_tables([leads, [], journey]))["funnel_metrics"]
    assert funnel.complete_journey == FunnelMetricPair(from_=5, to=2)


def test_to_may_exceed_from(engine):
    test_drives = [{"Flag_Faturado": 1}] * 3
    funnel = engine.compute(SheetSet.from_tables([[], test_drives]))["funnel_metrics"]
    assert funnel.visits_to_billing == FunnelMetricPair(from_=0, to=3)
    assert funnel.visits_to_billing.conversion_rate == 0


def test_duration_averages_use_their_sheets(engine):
    leads = [
        _lead(Dias_Lead_TestDrive=2, Dias_Lead_Faturamento=10),
        _lead(dias_lead_testdrive="4", Dias_TestDrive_Faturamento=99),
    ]
    test_drives = [{"Dias_TestDrive_Faturamento": 6}, {"Dias_TestDrive_Faturamento": "n/a"}]
    journey = [
        {"Dias_Lead_TestDrive": 6, "Dias_TestDrive_Faturamento": 2, "Dias_Lead_Faturamento": 20},
    ]
    results = engine.compute(SheetSet.from_tables([leads, test_drives, journey]))

    assert results["avg_lead_to_test_drive"] == pytest.approx(4.0)
    # Sheet 1 carries no test-drive-to-billing durations
    assert results["avg_test_drive_to_billing"] == pytest.approx(4.0)
    assert results["avg_lead_to_billing"] == pytest.approx(15.0)
    assert results["avg_total_journey"] == pytest.approx(20.0)


def test_empty_duration_collections_average_to_none(engine):
    results = engine.compute(SheetSet.from_tables([[_lead()]]))
    for metric in ("avg_lead_to_test_drive", "avg_test_drive_to_billing", "avg_lead_to_billing", "avg_total_journey"):
        assert results[metric] is None


def test_mean_or_none():
    assert mean_or_none([]) is None
    assert mean_or_none([1.0, 2.0]) == pytest.approx(1.5)


def test_decided_leads(engine):
    leads = [
        _lead(billed=1, Dias_Lead_Faturamento=3),
        _lead(billed=1, Dias_Lead_Faturamento=10),
        _lead(billed=1, Dias_Lead_Faturamento=11),
        _lead(Dias_Lead_Faturamento="x"),
    ]
    journey = [{"Dias_Lead_Faturamento": 7}]
    results = engine.compute(SheetSet.from_tables([leads, [], journey]))

    assert results["decided_leads_count"] == 3
    assert results["billed_leads_count"] == 4
    assert results["decided_leads_percentage"] == pytest.approx(75.0)


def test_decided_leads_percentage_is_zero_without_billed_rows(engine):
    leads = [_lead(Dias_Lead_Faturamento=2)]
    results = engine.compute(SheetSet.from_tables([leads]))
    assert results["decided_leads_count"] == 1
    assert results["decided_leads_percentage"] == 0


def test_decided_leads_window_is_configurable():
    leads = [_lead(billed=1, Dias_Lead_Faturamento=5)]
    sheets = SheetSet.from_tables([leads])
    results = DecidedLeadsComputation(max_days=3).compute(
        sheets, {"leads_billed": 1, "complete_journey_rows": 0}
    )
    assert results["decided_leads_count"] == 0


def test_empty_input_yields_zeroes(engine):
    results = engine.compute(SheetSet())
    assert results["leads"] == 0
    assert results["billed"] == 0
    assert results["total_store_visits"] == 0
    assert results["decided_leads_percentage"] == 0
