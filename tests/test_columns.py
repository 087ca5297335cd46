import pytest

from smb_finprofile.columns import (
    DEFAULT_COLUMN_ALIASES,
    ColumnMap,
    build_column_aliases,
    resolve_columns,
)


def test_resolve_columns_bank_statement_headers() -> None:
    """Typical bank export headers resolve through their aliases."""
    cols = resolve_columns(
        ["Txn Date", "Narration", "Withdrawal", "Deposit", "Closing Balance"]
    )

    assert cols.date == "Txn Date"
    assert cols.description == "Narration"
    assert cols.debit == "Withdrawal"
    assert cols.credit == "Deposit"
    assert cols.balance == "Closing Balance"
    assert cols.amount is None
    assert cols.category is None


def test_resolve_columns_is_case_and_whitespace_insensitive() -> None:
    cols = resolve_columns(["  DATE ", "Description", "AMOUNT"])

    # The original header string is returned, untouched.
    assert cols.date == "  DATE "
    assert cols.description == "Description"
    assert cols.amount == "AMOUNT"


def test_alias_order_wins_over_header_order() -> None:
    """'date' is a higher-priority alias than 'value date'."""
    a = resolve_columns(["Value Date", "Date", "Amount"])
    b = resolve_columns(["Date", "Value Date", "Amount"])

    assert a.date == "Date"
    assert a == b


def test_resolution_is_independent_of_header_order() -> None:
    headers = ["Particulars", "Posting Date", "Dr", "Cr", "Type", "Balance"]
    expected = resolve_columns(headers)

    assert resolve_columns(list(reversed(headers))) == expected
    assert resolve_columns(sorted(headers)) == expected


def test_header_is_claimed_by_one_field_only() -> None:
    """'value' is an amount alias; 'value date' must still go to date only."""
    aliases = build_column_aliases({"amount": ["value date", "amount"]})
    cols = resolve_columns(["Value Date", "Amount"], aliases)

    assert cols.date == "Value Date"
    assert cols.amount == "Amount"


def test_missing_fields_resolve_to_none() -> None:
    cols = resolve_columns(["foo", "bar"])

    assert cols == ColumnMap()
    assert cols.resolved() == {}


def test_resolved_lists_only_present_fields() -> None:
    cols = resolve_columns(["Date", "Amount", "Category"])

    assert cols.resolved() == {"date": "Date", "amount": "Amount", "category": "Category"}


def test_build_column_aliases_overrides_single_field() -> None:
    aliases = build_column_aliases({"date": ["Booking Date"]})
    table = dict(aliases)

    assert table["date"] == ("Booking Date",)
    assert table["amount"] == dict(DEFAULT_COLUMN_ALIASES)["amount"]
    # Field order is preserved.
    assert [name for name, _ in aliases] == [name for name, _ in DEFAULT_COLUMN_ALIASES]


@pytest.mark.parametrize(
    "overrides",
    [
        {"unknown_field": ["x"]},
        {"date": []},
        {"date": ["   "]},
    ],
)
def test_build_column_aliases_rejects_invalid_overrides(overrides) -> None:
    with pytest.raises(ValueError):
        build_column_aliases(overrides)
