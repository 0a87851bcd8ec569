"""Streaming file responses for table exports"""

import csv
import io
from typing import Iterable, Sequence

from fastapi.responses import StreamingResponse
from openpyxl import Workbook

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(filename: str) -> dict:
    return {
        "Content-Disposition": f"attachment; filename={filename}",
        "Cache-Control": "no-cache",
    }


def csv_response(
    header: Sequence[str],
    rows: Iterable[Sequence],
    filename: str,
    quoting: int = csv.QUOTE_MINIMAL,
) -> StreamingResponse:
    output = io.StringIO()
    writer = csv.writer(output, quoting=quoting)
    writer.writerow(header)
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])

    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers=_attachment(filename),
    )


def xlsx_response(
    sheet_title: str,
    header: Sequence[str],
    rows: Iterable[Sequence],
    filename: str,
) -> StreamingResponse:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title
    sheet.append(list(header))
    for row in rows:
        sheet.append(["" if value is None else value for value in row])

    output = io.BytesIO()
    workbook.save(output)
    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type=XLSX_MEDIA_TYPE,
        headers=_attachment(filename),
    )
