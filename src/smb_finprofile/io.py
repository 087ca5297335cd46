# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for SMB FinProfile.

This module turns source files into the plain row records consumed by the
extraction pipeline. It does not interpret columns: resolving headers onto
the canonical schema is the job of ``columns.py``.

Supported sources
-----------------

1) CSV files (``.csv``, ``.txt``)
   Read with ``pandas.read_csv``.

2) Excel workbooks (``.xlsx``, ``.xlsm``, ``.xls``)
   First sheet, read with ``pandas.read_excel``.

In both cases every cell is read as text and missing cells become empty
strings, so that amount and date parsing happen in one place
(``classifier.normalize_row``).

3) PDF text
   ``rows_from_pdf_text()`` scans text already extracted from a PDF
   statement. Each line holding a ``DD/MM/YYYY`` or ``DD-MM-YYYY`` date and
   at least one amount becomes a row:

       {"date": "YYYY-MM-DD", "description": <line without date/amounts>,
        "amount": <transaction amount>}

   Statement lines usually end with the running balance, so when a line
   holds two or more amounts the second-to-last one is the transaction
   amount. A single amount is used as is.

   An amount is either grouped with separators ("1,250" or "1,25,000") or has
   two decimals ("1250.00"); bare integers are left in the description.
   The amount is negative when written with a leading minus or when the
   line carries a "Dr" / "Debit" / "Withdrawal" marker, so debits classify
   as expenses. Lines whose date is not a valid calendar date are ignored.
"""

import os
import re
from datetime import date
from pathlib import Path
from typing import Union

import pandas as pd

CSV_SUFFIXES = {".csv", ".txt"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}

_PDF_DATE = re.compile(r"(\d{2})[/-](\d{2})[/-](\d{4})")
_PDF_AMOUNT = re.compile(r"-?(?:\d{1,3}(?:,\d{2,3})+(?:\.\d{2})?|\d+\.\d{2})")
_PDF_DEBIT_MARKER = re.compile(r"\b(?:dr|debit|withdrawal)\b", re.IGNORECASE)


def read_rows(path: Union[str, "os.PathLike[str]"]) -> list[dict[str, str]]:
    """
    Read a CSV or Excel file into a list of row dictionaries.

    Parameters
    ----------
    path:
        Path to the source file.

    Returns
    -------
    list[dict[str, str]]
        One dictionary per data row, keyed by the original header names.
        All values are strings; empty cells are ``""``.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file type is not supported or the file cannot be parsed.
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Input file not found: {p}")

    suffix = p.suffix.lower()
    try:
        if suffix in CSV_SUFFIXES:
            df = pd.read_csv(p, dtype=str, keep_default_na=False)
        elif suffix in EXCEL_SUFFIXES:
            df = pd.read_excel(p, dtype=str, keep_default_na=False)
        else:
            raise ValueError(
                f"Unsupported file type {suffix!r}. Expected one of: "
                f"{', '.join(sorted(CSV_SUFFIXES | EXCEL_SUFFIXES))}."
            )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise ValueError(f"Could not parse {p}: {exc}") from exc

    # Normalize column names: strip surrounding spaces.
    df.columns = [str(c).strip() for c in df.columns]
    df = df.fillna("")
    return df.to_dict(orient="records")


def rows_from_pdf_text(text: str) -> list[dict[str, str]]:
    """Extract transaction-like rows from text extracted from a PDF."""
    rows: list[dict[str, str]] = []
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue

        date_match = _PDF_DATE.search(line)
        if date_match is None:
            continue
        day, month, year = (int(g) for g in date_match.groups())
        try:
            parsed = date(year, month, day)
        except ValueError:
            continue

        rest = line[: date_match.start()] + " " + line[date_match.end() :]
        amounts = _PDF_AMOUNT.findall(rest)
        if not amounts:
            continue

        # Last amount is the running balance when there is more than one.
        amount = amounts[-2] if len(amounts) >= 2 else amounts[-1]
        amount = amount.replace(",", "")
        if not amount.startswith("-") and _PDF_DEBIT_MARKER.search(rest):
            amount = f"-{amount}"

        description = _PDF_AMOUNT.sub(" ", rest)
        description = " ".join(description.split())
        rows.append(
            {
                "date": parsed.isoformat(),
                "description": description,
                "amount": amount,
            }
        )
    return rows
