#!/usr/bin/env python
"""EduFlow report entry point.

Renders a report from a JSON data file without contacting the backend.
The JSON has the same shape as the report data endpoints return.
"""

import json
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

from eduflow.app import configure_logging
from eduflow.domain.models import (
    AssociationSummaryData,
    DataShapeError,
    TeacherFinancialReportData,
    TeacherStatementData,
)
from eduflow.services.association_summary import AssociationSummaryPDF
from eduflow.services.balance import BalanceService
from eduflow.services.teacher_financial import TeacherFinancialReportPDF
from eduflow.services.teacher_statement import TeacherStatementPDF
from eduflow.state.persistence import SettingsStore


USAGE = "Usage: python main.py <teacher|association|financial> <data.json> <output.pdf> [theme]"


def render(kind: str, data_file: Path, output: Path, theme_name: str | None = None) -> int:
    """Render one report file. Returns the number of bytes written."""
    settings = SettingsStore().load()
    configure_logging(settings.logging)

    payload = json.loads(data_file.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise DataShapeError("Expected a JSON object", f"Got {type(payload).__name__}")

    if kind == "teacher":
        payload.setdefault("generated_date", date.today().isoformat())
        payload.setdefault("generated_by", "EduFlow")
        data = TeacherStatementData.from_dict(payload)
        balance = BalanceService()
        data = replace(data, transactions=tuple(balance.compute_running_balances(data.transactions)))
        content = TeacherStatementPDF.generate(data, theme_name=theme_name, branding=settings.branding)
    elif kind == "association":
        payload.setdefault("generated_date", date.today().isoformat())
        payload.setdefault("generated_by", "EduFlow")
        data = AssociationSummaryData.from_dict(payload)
        content = AssociationSummaryPDF.generate(data, theme_name=theme_name, branding=settings.branding)
    elif kind == "financial":
        payload.setdefault("current_date", date.today().isoformat())
        data = TeacherFinancialReportData.from_dict(payload)
        content = TeacherFinancialReportPDF.generate(data, theme_name=theme_name, branding=settings.branding)
    else:
        raise ValueError(f"Unknown report kind: {kind}")

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(content)
    return len(content)


def main() -> int:
    if len(sys.argv) < 4:
        print(USAGE)
        print("Example: python main.py teacher statement.json statement.pdf classic_blue")
        return 1

    kind, data_file, output = sys.argv[1], Path(sys.argv[2]), Path(sys.argv[3])
    theme_name = sys.argv[4] if len(sys.argv) > 4 else None

    if not data_file.exists():
        print(f"Error: data file not found: {data_file}")
        return 1

    try:
        size = render(kind, data_file, output, theme_name)
    except DataShapeError as e:
        print(f"Error: invalid report data: {e}")
        if e.details:
            print(f"  {e.details}")
        return 1
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print(f"Wrote {output} ({size} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
