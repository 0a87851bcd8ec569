"""
Parsers for the published Google Sheets ledgers

Two sheets are read:
- the expense ledger: one row per month, a free-text month label, a "Total"
  column and one column per expense category
- the booking ledger: one row per manually-recorded booking
"""

import csv
import io
import logging
import math
import re
from datetime import date, datetime
from typing import Optional

from ..finance.months import parse_sheet_month_to_key

logger = logging.getLogger(__name__)

_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_TEXT_DATE_FORMATS = ("%d %b %Y", "%d %B %Y", "%b %d, %Y", "%B %d, %Y", "%d-%b-%Y", "%d-%b-%y")


# ============================================================================
# CELL PARSING
# ============================================================================


def _to_number(value) -> Optional[float]:
    if value is None:
        return None
    text = str(value).replace("₹", "").replace(",", "").strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_price(value) -> float:
    """Price cell like "₹1,234"; invalid or empty → 0"""
    return _to_number(value) or 0.0


def parse_amount(value) -> float:
    """Numeric cell like "1,234.50"; invalid or empty → 0"""
    return _to_number(value) or 0.0


def parse_sheet_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a booking-sheet date.

    Slash dates are read as d/m/yyyy when the first part is greater than 12,
    otherwise as m/d/yyyy. ISO dates and a few textual forms are accepted too.
    """
    if not value:
        return None
    text = str(value).strip()
    if not text:
        return None

    m = _SLASH_DATE.match(text)
    if m:
        a, b, year = (int(part) for part in m.groups())
        day, month = (a, b) if a > 12 else (b, a)
        try:
            return date(year, month, day)
        except ValueError:
            return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _TEXT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


# ============================================================================
# CSV TABLES
# ============================================================================


class SheetTable:
    """Header row plus data rows, with blank lines dropped"""

    def __init__(self, fields: list[str], rows: list[list[str]]):
        self.fields = fields
        self.rows = rows

    @classmethod
    def from_csv(cls, csv_text: str) -> "SheetTable":
        reader = csv.reader(io.StringIO(csv_text or ""))
        lines = [row for row in reader if any(cell.strip() for cell in row)]
        if not lines:
            return cls([], [])
        return cls(lines[0], lines[1:])

    def find_column(self, *needles: str) -> Optional[int]:
        """Index of the first header containing every needle (case-insensitive)"""
        for idx, field in enumerate(self.fields):
            lowered = field.lower()
            if all(n in lowered for n in needles):
                return idx
        return None

    def column_named(self, name: str) -> Optional[int]:
        for idx, field in enumerate(self.fields):
            if field.strip().lower() == name.lower():
                return idx
        return None

    @staticmethod
    def cell(row: list[str], idx: Optional[int]) -> str:
        if idx is None or idx >= len(row):
            return ""
        return row[idx]

    def as_dicts(self) -> list[dict[str, str]]:
        """Rows keyed by header; the first column wins when a header repeats"""
        result = []
        for row in self.rows:
            record: dict[str, str] = {}
            for idx, field in enumerate(self.fields):
                record.setdefault(field, self.cell(row, idx))
            result.append(record)
        return result


# ============================================================================
# EXPENSE LEDGER
# ============================================================================


def parse_expense_ledger(csv_text: str, fallback_year: int) -> dict[str, float]:
    """
    Monthly expense totals keyed by "YYYY-MM".

    Rows without a month or total, with a total ≤ 0, or with an unparseable
    month label are skipped. Repeated month keys are summed.
    """
    table = SheetTable.from_csv(csv_text)
    month_idx = table.find_column("month")
    total_idx = table.find_column("total")
    if month_idx is None or total_idx is None:
        logger.warning("⚠️ Expense sheet has no Month/Total column")
        return {}

    expense_by_month: dict[str, float] = {}
    for row in table.rows:
        raw_month = table.cell(row, month_idx).strip()
        raw_total = table.cell(row, total_idx).strip()
        if not raw_month or not raw_total:
            continue
        total = parse_amount(raw_total)
        if total <= 0:
            continue
        key = parse_sheet_month_to_key(raw_month, fallback_year)
        if not key:
            logger.debug(f"Skipping expense row with unrecognised month label: {raw_month!r}")
            continue
        expense_by_month[key] = expense_by_month.get(key, 0.0) + total
    return expense_by_month


def latest_month_total(csv_text: str) -> float:
    """Total of the last expense row that has both a month and a total"""
    table = SheetTable.from_csv(csv_text)
    month_idx = table.find_column("month")
    total_idx = table.find_column("total")
    if month_idx is None or total_idx is None:
        return 0.0

    last_total = None
    for row in table.rows:
        if table.cell(row, month_idx).strip() and table.cell(row, total_idx).strip():
            last_total = table.cell(row, total_idx)
    return parse_amount(last_total) if last_total is not None else 0.0


def expense_breakdown(csv_text: str, month: Optional[str] = None) -> dict:
    """
    Per-category expenses for one month row (default: the last one).

    Returns the month labels in sheet order, the selected month, its total and
    one item per numeric category column with its share of the total.
    Raises KeyError when `month` is not a label in the sheet.
    """
    table = SheetTable.from_csv(csv_text)
    month_idx = table.find_column("month")
    total_idx = table.find_column("total")
    if month_idx is None or total_idx is None:
        return {"months": [], "selectedMonth": None, "total": 0.0, "items": []}

    labelled = [row for row in table.rows if table.cell(row, month_idx).strip()]
    months = [table.cell(row, month_idx).strip() for row in labelled]
    if not labelled:
        return {"months": [], "selectedMonth": None, "total": 0.0, "items": []}

    selected = month.strip() if month else months[-1]
    row = next((r for r in labelled if table.cell(r, month_idx).strip() == selected), None)
    if row is None:
        raise KeyError(selected)

    total = parse_amount(table.cell(row, total_idx))
    items = []
    for idx, field in enumerate(table.fields):
        if idx in (month_idx, total_idx):
            continue
        value = _to_number(table.cell(row, idx))
        if value is None:
            continue
        items.append(
            {
                "name": field,
                "value": value,
                "percentage": round(value / total * 100, 1) if total else 0.0,
            }
        )

    return {"months": months, "selectedMonth": selected, "total": total, "items": items}


# ============================================================================
# BOOKING LEDGER
# ============================================================================


def parse_booking_ledger(csv_text: str, start: date, end: date) -> list[dict]:
    """
    Sheet bookings whose Date falls within [start, end], in sheet order.

    The price comes from the first column whose header contains both
    "service" and "pric" (the sheet header is misspelt "Service Pric").
    """
    table = SheetTable.from_csv(csv_text)
    price_idx = table.find_column("service", "pric")
    source_idx = table.column_named("source")

    bookings = []
    for index, (row, record) in enumerate(zip(table.rows, table.as_dicts())):
        raw_date = record.get("Date", "")
        booking_date = parse_sheet_date(raw_date)
        if booking_date is None or booking_date < start or booking_date > end:
            continue

        bookings.append(
            {
                "id": f"{raw_date}-{index}",
                "bookingDate": booking_date.isoformat(),
                "customerName": record.get("Customer Name", ""),
                "service": record.get("Service", ""),
                "phone": record.get("Contact Info", ""),
                "address": record.get("Address", ""),
                "partnerName": record.get("Patner Name", ""),
                "source": table.cell(row, source_idx),
                "amount": parse_price(table.cell(row, price_idx)),
                "arriveTime": record.get("Arrive Time", ""),
                "status": record.get("Status", ""),
                "feedback": record.get("Feedback", ""),
            }
        )
    return bookings
