# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for SMB FinProfile.

This module defines a Period value object and helpers to split a
transaction set into calendar months. Monthly revenue / expense summaries
are the historical input of the forecast prompt.
"""

from calendar import monthrange
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from .models import ZERO, Transaction


@dataclass(frozen=True)
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str


@dataclass(frozen=True)
class PeriodSummary:
    """Revenue and expense totals of one period."""

    period: Period
    revenue: Decimal
    expenses: Decimal

    @property
    def net(self) -> Decimal:
        return self.revenue - self.expenses


def month_period(year: int, month: int) -> Period:
    """Full calendar month as a Period labelled 'YYYY-MM'."""
    last_day = monthrange(year, month)[1]
    return Period(
        start=date(year, month, 1),
        end=date(year, month, last_day),
        label=f"{year:04d}-{month:02d}",
    )


def filter_transactions_by_period(
    transactions: Iterable[Transaction], period: Period
) -> list[Transaction]:
    """Keep transactions dated within [period.start, period.end] (inclusive)."""
    return [t for t in transactions if period.start <= t.date <= period.end]


def monthly_summaries(transactions: Iterable[Transaction]) -> list[PeriodSummary]:
    """
    Summarize transactions per calendar month.

    Months are returned in chronological order. Months without any
    transaction between the first and last month are included with zero
    totals so that the series has no gaps.
    """
    txns = list(transactions)
    if not txns:
        return []

    totals: dict[tuple[int, int], list[Decimal]] = {}
    for t in txns:
        bucket = totals.setdefault((t.date.year, t.date.month), [ZERO, ZERO])
        if t.kind == "income":
            bucket[0] += t.amount
        else:
            bucket[1] += t.amount

    first = min(totals)
    last = max(totals)

    out: list[PeriodSummary] = []
    year, month = first
    while (year, month) <= last:
        revenue, expenses = totals.get((year, month), [ZERO, ZERO])
        out.append(
            PeriodSummary(
                period=month_period(year, month),
                revenue=revenue,
                expenses=expenses,
            )
        )
        if month == 12:
            year, month = year + 1, 1
        else:
            month += 1
    return out
