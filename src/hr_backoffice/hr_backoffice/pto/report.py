from __future__ import annotations

import io

import pandas as pd

from ..core.exceptions import AuthorizationError
from ..users.model import User
from .balance import PtoBalanceEngine, parse_year

COLUMNS = [
    "User ID",
    "Name",
    "Email",
    "Employment Type",
    "Year",
    "Total Days",
    "Used Days",
    "Pending Days",
    "Available Days",
]


class PtoBalanceReport:
    """Admin export of every user's balance for one year."""

    def __init__(self, balances: PtoBalanceEngine):
        self._balances = balances

    def build_frame(self, *, actor: User, year=None) -> pd.DataFrame:
        if not actor.is_admin:
            raise AuthorizationError("Unauthorized: Admin access required")

        resolved_year = parse_year(year)
        data = []
        for user, balance in self._balances.list_balances(resolved_year):
            data.append({
                "User ID": user.user_id,
                "Name": user.name,
                "Email": user.email,
                "Employment Type": user.employment_type.value,
                "Year": balance.year,
                "Total Days": balance.total_days,
                "Used Days": balance.used_days,
                "Pending Days": balance.pending_days,
                "Available Days": balance.available_days,
            })
        return pd.DataFrame(data, columns=COLUMNS)

    def to_excel(self, *, actor: User, year=None) -> io.BytesIO:
        df = self.build_frame(actor=actor, year=year)

        # Written in memory, never to disk.
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="PtoBalances")
        output.seek(0)
        return output
