from __future__ import annotations

import csv
import io

from .service import ReportData

CSV_FIELDS = ["date", "teacher_id", "name", "employee_id", "status", "check_in", "check_out", "notes"]


def report_csv_bytes(data: ReportData) -> bytes:
    """Report rows as CSV with a BOM so spreadsheet apps detect UTF-8."""

    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
    writer.writeheader()
    for row in data.rows:
        writer.writerow(row)
    return out.getvalue().encode("utf-8-sig")
