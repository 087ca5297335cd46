import pandas as pd
import pytest

from smb_finprofile.engine import extract_all
from smb_finprofile.io import read_rows, rows_from_pdf_text


def test_read_rows_csv_keeps_text_and_blank_cells(tmp_path) -> None:
    path = tmp_path / "statement.csv"
    path.write_text(
        " Txn Date ,Narration,Withdrawal,Deposit\n"
        "2024-01-05,Office rent,40000,\n"
        "2024-01-07,Client invoice,,\"1,20,000\"\n",
        encoding="utf-8",
    )

    rows = read_rows(path)

    assert rows == [
        {"Txn Date": "2024-01-05", "Narration": "Office rent", "Withdrawal": "40000", "Deposit": ""},
        {"Txn Date": "2024-01-07", "Narration": "Client invoice", "Withdrawal": "", "Deposit": "1,20,000"},
    ]

    data = extract_all(rows)
    assert data.revenue.total == 120000
    assert data.expenses.total == 40000


def test_read_rows_excel(tmp_path) -> None:
    path = tmp_path / "ledger.xlsx"
    pd.DataFrame(
        {"Date": ["2024-02-01"], "Description": ["Sale"], "Amount": ["2500"]}
    ).to_excel(path, index=False)

    rows = read_rows(path)

    assert rows == [{"Date": "2024-02-01", "Description": "Sale", "Amount": "2500"}]


def test_read_rows_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        read_rows(tmp_path / "missing.csv")


def test_read_rows_unsupported_suffix(tmp_path) -> None:
    path = tmp_path / "statement.json"
    path.write_text("{}", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported file type"):
        read_rows(path)


def test_read_rows_empty_csv_is_a_value_error(tmp_path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ValueError):
        read_rows(path)


def test_rows_from_pdf_text() -> None:
    text = """
    HDFC BANK STATEMENT
    05/01/2024  NEFT Client payment            1,25,000.00   3,40,000.00
    06-01-2024  ATM withdrawal Dr             2,000.00
    07/01/2024  Card refund -450.00
    31/02/2024  Impossible date                100.00
    08/01/2024  No amount here 42
    """

    rows = rows_from_pdf_text(text)

    assert [r["date"] for r in rows] == ["2024-01-05", "2024-01-06", "2024-01-07"]
    # The trailing running balance is skipped.
    assert rows[0]["amount"] == "125000.00"
    assert rows[0]["description"] == "NEFT Client payment"
    assert rows[1]["amount"] == "-2000.00"
    assert rows[2]["amount"] == "-450.00"


def test_pdf_rows_feed_extraction() -> None:
    rows = rows_from_pdf_text(
        "01/03/2024 Consulting fees received 50,000.00\n"
        "02/03/2024 Electricity bill debit 4,000.00\n"
    )

    data = extract_all(rows)

    assert data.revenue.total == 50000
    assert data.expenses.total == 4000
    assert [c.name for c in data.expenses.categories] == ["Utilities"]
