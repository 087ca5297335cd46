from datetime import date
from decimal import Decimal

from smb_finprofile.engine import (
    DEFAULT_EXPENSE_LABEL,
    DEFAULT_REVENUE_LABEL,
    aggregate_expenses,
    aggregate_revenue,
    build_extracted_data,
    extract_all,
)
from smb_finprofile.models import BalanceSheetInputs, Loan, Transaction


def _txn(kind: str, amount: str, category: str, day: int = 1) -> Transaction:
    return Transaction(
        date=date(2024, 1, day),
        description=category or "x",
        amount=Decimal(amount),
        kind=kind,  # type: ignore[arg-type]
        category=category,
    )


def test_aggregates_sum_exactly_to_totals() -> None:
    txns = [
        _txn("income", "0.10", "Sales"),
        _txn("income", "0.20", "Services"),
        _txn("income", "0.30", "Sales"),
        _txn("expense", "100.05", "Rent"),
        _txn("expense", "0.01", "Fees"),
    ]

    revenue = aggregate_revenue(txns)
    expenses = aggregate_expenses(txns)

    assert revenue.total == Decimal("0.60")
    assert sum(s.amount for s in revenue.streams) == revenue.total
    assert expenses.total == Decimal("100.06")
    assert sum(c.amount for c in expenses.categories) == expenses.total


def test_breakdown_keeps_first_seen_order() -> None:
    txns = [
        _txn("expense", "10", "Utilities"),
        _txn("expense", "500", "Rent"),
        _txn("expense", "5", "Utilities"),
        _txn("expense", "1", "Bank fees"),
    ]

    expenses = aggregate_expenses(txns)

    assert [c.name for c in expenses.categories] == ["Utilities", "Rent", "Bank fees"]
    assert expenses.categories[0].amount == Decimal("15")


def test_empty_category_uses_default_labels() -> None:
    txns = [_txn("income", "100", ""), _txn("expense", "40", "")]

    assert [s.name for s in aggregate_revenue(txns).streams] == [DEFAULT_REVENUE_LABEL]
    assert [c.name for c in aggregate_expenses(txns).categories] == [
        DEFAULT_EXPENSE_LABEL
    ]


def test_cash_flow_is_operating_only() -> None:
    data = build_extracted_data(
        [_txn("income", "1000", "Sales"), _txn("expense", "1250", "Rent")]
    )
    cf = data.cash_flow

    assert cf.operating == Decimal("-250")
    assert cf.investing == 0
    assert cf.financing == 0
    assert cf.net == cf.operating + cf.investing + cf.financing
    assert data.net_profit == Decimal("-250")


def test_extract_all_from_rows() -> None:
    rows = [
        {"Date": "2024-01-01", "Description": "Product sale", "Amount": "100000"},
        {"Date": "2024-01-03", "Description": "Office rent", "Amount": "-40000"},
        {"Date": "2024-01-10", "Description": "Staff salary", "Amount": "-30000"},
        {"Date": "", "Description": "Broken row", "Amount": "10"},
    ]
    bs = BalanceSheetInputs(
        accounts_receivable=Decimal("20000"),
        accounts_payable=Decimal("10000"),
        loans=(Loan(amount=Decimal("50000"), interest_rate=0.1, type="term"),),
    )

    data = extract_all(rows, balance_sheet=bs)

    assert data.revenue.total == Decimal("100000")
    assert data.expenses.total == Decimal("70000")
    assert [c.name for c in data.expenses.categories] == ["Rent", "Salaries & Wages"]
    assert data.cash_flow.net == Decimal("30000")
    assert data.rows_seen == 4
    assert data.rows_skipped == 1
    assert data.balance_sheet is bs


def test_extract_all_with_no_usable_rows_is_empty_not_error() -> None:
    data = extract_all([{"foo": "bar"}])

    assert data.transactions == ()
    assert data.revenue.total == 0
    assert data.revenue.streams == ()
    assert data.expenses.total == 0
    assert data.cash_flow.net == 0
    assert data.rows_skipped == 1


def test_extracted_data_to_dict_uses_camel_case_and_optional_inputs() -> None:
    data = build_extracted_data([_txn("income", "10", "Sales")])
    out = data.to_dict()

    assert out["cashFlow"]["net"] == 10.0
    assert out["transactions"][0]["type"] == "income"
    assert "loans" not in out
    assert "accountsReceivable" not in out

    data = build_extracted_data(
        [], balance_sheet=BalanceSheetInputs(accounts_payable=Decimal("5"))
    )
    assert data.to_dict()["accountsPayable"] == 5.0
