from __future__ import annotations

import pandas as pd
import pytest

from src.hr_backoffice.hr_backoffice.core.exceptions import AuthorizationError
from src.hr_backoffice.hr_backoffice.pto.report import COLUMNS
from src.hr_backoffice.hr_backoffice.pto.workflow import NewPtoRequest


def test_report_frame_has_one_row_per_user(container, users):
    data = NewPtoRequest.from_payload(
        {"type": "Vacation", "startDate": "2026-03-02", "endDate": "2026-03-03", "status": "Submitted"}
    )
    container.pto_workflow.create_request(actor=users["staff"], data=data)

    df = container.balance_report.build_frame(actor=users["admin"], year=2026)

    assert list(df.columns) == COLUMNS
    assert len(df) == len(users)
    staff = df[df["User ID"] == "staff"].iloc[0]
    assert staff["Pending Days"] == 2.0
    assert staff["Available Days"] == 13.0


def test_report_is_admin_only(container, users):
    with pytest.raises(AuthorizationError):
        container.balance_report.build_frame(actor=users["manager"], year=2026)


def test_report_excel_round_trips_through_openpyxl(container, users):
    output = container.balance_report.to_excel(actor=users["admin"], year=2026)

    df = pd.read_excel(output, sheet_name="PtoBalances", engine="openpyxl")
    assert list(df.columns) == COLUMNS
    assert sorted(df["User ID"]) == sorted(users)
