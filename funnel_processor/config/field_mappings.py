"""Field mappings for the funnel sheets.

Every logical field is declared once as an ordered tuple of column-name
synonyms (first match wins), then bound to the sheets where it may appear
through a ``SheetSchema`` descriptor.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

# Sheet positions
LEADS = 1
TEST_DRIVES = 2
COMPLETE_JOURNEY = 3
BILLED = 4
STORE_VISITS = 5

SHEET_POSITIONS = (LEADS, TEST_DRIVES, COMPLETE_JOURNEY, BILLED, STORE_VISITS)

# Logical field synonyms
DEALER_FIELDS = (
    "Dealer",
    "dealer",
    "Concessionaria",
    "concessionaria",
    "Concessionária",
    "concessionária",
)
DATE_FIELDS = ("dateSales", "Date", "data", "Data")
TEST_DRIVE_FLAG_FIELDS = ("Flag_TestDrive", "flag_testdrive", "flag_test_drive", "FlagTestDrive")
BILLED_FLAG_FIELDS = ("Flag_Faturado", "flag_faturado", "faturado", "Faturado")
LEAD_TO_TEST_DRIVE_DAYS_FIELDS = ("Dias_Lead_TestDrive", "dias_lead_testdrive")
TEST_DRIVE_TO_BILLING_DAYS_FIELDS = ("Dias_TestDrive_Faturamento", "dias_testdrive_faturamento")
LEAD_TO_BILLING_DAYS_FIELDS = ("Dias_Lead_Faturamento", "dias_lead_faturamento", "DiasLeadFaturamento")

# Store visits are read by position: third column of the sheet
STORE_VISITS_COLUMN_INDEX = 2


@dataclass(frozen=True)
class SheetSchema:
    """Which logical fields a sheet carries, and how its dealer column is trusted."""

    position: int
    key: str
    label: str
    fields: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    # Sheets without an explicit dealer-labelled column must pass the plausibility filter
    dealer_plausibility_check: bool = False

    def synonyms(self, logical_field: str) -> Optional[Tuple[str, ...]]:
        return self.fields.get(logical_field)

    def has_field(self, logical_field: str) -> bool:
        return logical_field in self.fields


SHEET_SCHEMAS: Dict[int, SheetSchema] = {
    LEADS: SheetSchema(
        position=LEADS,
        key="leads",
        label="Leads",
        fields={
            "dealer": DEALER_FIELDS,
            "date": DATE_FIELDS,
            "test_drive_flag": TEST_DRIVE_FLAG_FIELDS,
            "billed_flag": BILLED_FLAG_FIELDS,
            "lead_to_test_drive_days": LEAD_TO_TEST_DRIVE_DAYS_FIELDS,
            "lead_to_billing_days": LEAD_TO_BILLING_DAYS_FIELDS,
        },
    ),
    TEST_DRIVES: SheetSchema(
        position=TEST_DRIVES,
        key="test_drives",
        label="Test Drives",
        fields={
            "dealer": DEALER_FIELDS,
            "billed_flag": BILLED_FLAG_FIELDS,
            "test_drive_to_billing_days": TEST_DRIVE_TO_BILLING_DAYS_FIELDS,
        },
        dealer_plausibility_check=True,
    ),
    COMPLETE_JOURNEY: SheetSchema(
        position=COMPLETE_JOURNEY,
        key="complete_journey",
        label="Jornada Completa",
        fields={
            "dealer": DEALER_FIELDS,
            "lead_to_test_drive_days": LEAD_TO_TEST_DRIVE_DAYS_FIELDS,
            "test_drive_to_billing_days": TEST_DRIVE_TO_BILLING_DAYS_FIELDS,
            "lead_to_billing_days": LEAD_TO_BILLING_DAYS_FIELDS,
            # A complete-journey row spans lead to billing, so its total is the same column
            "total_journey_days": LEAD_TO_BILLING_DAYS_FIELDS,
        },
    ),
    BILLED: SheetSchema(
        position=BILLED,
        key="billed",
        label="Faturamentos",
        fields={"dealer": DEALER_FIELDS},
        dealer_plausibility_check=True,
    ),
    STORE_VISITS: SheetSchema(
        position=STORE_VISITS,
        key="store_visits",
        label="Visitas nas Lojas",
    ),
}

# Duration metric -> logical field read from every sheet that declares it
DURATION_METRICS: Dict[str, str] = {
    "avg_lead_to_test_drive": "lead_to_test_drive_days",
    "avg_test_drive_to_billing": "test_drive_to_billing_days",
    "avg_lead_to_billing": "lead_to_billing_days",
    "avg_total_journey": "total_journey_days",
}

# Sheets scanned for dealer names, in order
DEALER_SOURCE_SHEETS = (LEADS, TEST_DRIVES, COMPLETE_JOURNEY, BILLED)


def get_schema(position: int) -> SheetSchema:
    """Return the schema for a sheet position (1-5)."""
    try:
        return SHEET_SCHEMAS[position]
    except KeyError:
        raise ValueError(f"Unknown sheet position: {position}") from None
