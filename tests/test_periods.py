from datetime import date
from decimal import Decimal

import smb_finprofile.periods as periods
from smb_finprofile.models import Transaction


def _txn(day: date, kind: str, amount: str) -> Transaction:
    return Transaction(day, "x", Decimal(amount), kind, "Other")  # type: ignore[arg-type]


def test_filter_transactions_by_period_inclusive_bounds() -> None:
    """filter_transactions_by_period should keep transactions in [start, end]."""
    txns = [
        _txn(date(2025, 1, 1), "income", "10"),
        _txn(date(2025, 2, 15), "income", "20"),
        _txn(date(2025, 3, 10), "expense", "5"),
        _txn(date(2025, 4, 1), "expense", "15"),
        _txn(date(2025, 5, 1), "income", "30"),
    ]

    p = periods.Period(
        start=date(2025, 2, 1),
        end=date(2025, 4, 1),
        label="Test period",
    )

    filtered = periods.filter_transactions_by_period(txns, p)

    assert [t.date for t in filtered] == [
        date(2025, 2, 15),
        date(2025, 3, 10),
        date(2025, 4, 1),
    ]


def test_month_period_handles_month_lengths() -> None:
    feb = periods.month_period(2024, 2)

    assert feb.start == date(2024, 2, 1)
    assert feb.end == date(2024, 2, 29)
    assert feb.label == "2024-02"
    assert periods.month_period(2023, 2).end == date(2023, 2, 28)


def test_monthly_summaries_are_chronological_and_gap_filled() -> None:
    txns = [
        _txn(date(2025, 1, 20), "expense", "40"),
        _txn(date(2024, 11, 3), "income", "100"),
        _txn(date(2025, 1, 2), "income", "250"),
        _txn(date(2024, 11, 30), "income", "50"),
    ]

    summaries = periods.monthly_summaries(txns)

    assert [s.period.label for s in summaries] == ["2024-11", "2024-12", "2025-01"]
    assert summaries[0].revenue == Decimal("150")
    assert summaries[1].revenue == 0
    assert summaries[1].expenses == 0
    assert summaries[2].net == Decimal("210")


def test_monthly_summaries_empty() -> None:
    assert periods.monthly_summaries([]) == []
