import io
from typing import List, Optional, Sequence, Tuple

import httpx
import openpyxl
import pytest

SheetSpec = Tuple[str, Sequence[str], Sequence[Sequence]]


def build_workbook(sheets: List[SheetSpec]) -> bytes:
    """Serialize (title, headers, rows) sheet definitions into xlsx bytes."""
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for title, headers, rows in sheets:
        sheet = workbook.create_sheet(title=title)
        sheet.append(list(headers))
        for row in rows:
            sheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


LEADS_SHEET: SheetSpec = (
    "Leads",
    ["Dealer", "dateSales", "Flag_TestDrive", "Flag_Faturado", "Dias_Lead_Faturamento", "Dias_Lead_TestDrive"],
    [
        ["Concessionária ABC (462011)", "2024-03-07", 1, 1, 12, 3],
        ["CONCESSIONARIA ABC", "05/03/2024", 0, 1, 5, None],
        ["Beta Motors", "2024-03-10", 1, 0, None, 4],
        ["Beta Motors", "not a date", 0, 0, None, None],
    ],
)
TEST_DRIVES_SHEET: SheetSpec = (
    "TestDrives",
    ["Dealer", "Flag_Faturado", "Dias_TestDrive_Faturamento"],
    [
        ["Beta Motors", 1, 6],
        ["cliente@email.com", 0, "n/a"],
        ["Concessionaria ABC", "1", 2],
    ],
)
JOURNEY_SHEET: SheetSpec = (
    "Jornada",
    ["Dealer", "Dias_Lead_TestDrive", "Dias_TestDrive_Faturamento", "Dias_Lead_Faturamento"],
    [["Gamma Autos", 2, 4, 8]],
)
BILLED_SHEET: SheetSpec = ("Faturados", ["Dealer"], [])
VISITS_SHEET: SheetSpec = (
    "Visitas",
    ["Loja", "Mes", "Visitas"],
    [["ABC", "2024-03", 100], ["Beta", "2024-03", 50]],
)


@pytest.fixture
def funnel_workbook() -> bytes:
    """A five-sheet workbook exercising synonyms, flags, durations and dealer noise."""
    return build_workbook([LEADS_SHEET, TEST_DRIVES_SHEET, JOURNEY_SHEET, BILLED_SHEET, VISITS_SHEET])


@pytest.fixture
def visits_workbook() -> bytes:
    return build_workbook([VISITS_SHEET])


def api_payload(rows: Optional[list]) -> dict:
    return {"resultSets": {"table1": rows}}


ENDPOINTS = {
    "leads": "https://funnel.test/leads",
    "test_drives": "https://funnel.test/test_drives",
    "complete_journey": "https://funnel.test/complete_journey",
    "billed": "https://funnel.test/billed",
}


def mock_client(payloads: dict, calls: Optional[list] = None, status: Optional[dict] = None) -> httpx.AsyncClient:
    """AsyncClient answering each endpoint path with the given JSON payload."""
    status = status or {}

    def handler(request: httpx.Request) -> httpx.Response:
        source = request.url.path.strip("/")
        if calls is not None:
            calls.append(source)
        code = status.get(source, 200)
        if source not in payloads:
            return httpx.Response(404, json={"error": "unknown"})
        return httpx.Response(code, json=payloads[source])

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
