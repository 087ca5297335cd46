# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for SMB FinProfile.

This module contains helpers that transform pipeline records into pandas
DataFrames (for console tables and CSV export) and plain text (for the
parsed analysis). They do no computation of their own beyond rounding and
share percentages.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal

import pandas as pd

from .models import AnalysisResult, Stream, Transaction
from .ratios import RatioResult


def transactions_to_dataframe(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Return one row per transaction: date, description, type, category, amount."""
    columns = ["date", "description", "type", "category", "amount"]
    rows = [
        {
            "date": t.date.isoformat(),
            "description": t.description,
            "type": t.kind,
            "category": t.category,
            "amount": float(t.amount),
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=columns)


def breakdown_to_dataframe(
    streams: Sequence[Stream], total: Decimal, decimals: int = 2
) -> pd.DataFrame:
    """Return a breakdown table (name, amount, share_pct) keeping input order.

    ``share_pct`` is empty when the total is zero.
    """
    rows = []
    for s in streams:
        share = float(s.amount / total * 100) if total else None
        rows.append(
            {
                "name": s.name,
                "amount": round(float(s.amount), 2),
                "share_pct": None if share is None else round(share, decimals),
            }
        )
    return pd.DataFrame(rows, columns=["name", "amount", "share_pct"])


def ratios_to_dataframe(ratios: list[RatioResult], decimals: int) -> pd.DataFrame:
    """Convert ratio results into a display DataFrame.

    Percent ratios are shown multiplied by 100. Ratios that are not
    computable are kept with an empty value so that the table layout is
    stable across datasets.
    """
    rows = []
    for r in ratios:
        value = r.value
        if value is not None:
            if r.unit == "percent":
                value = value * 100
            value = round(value, decimals)
        rows.append(
            {
                "key": r.key,
                "label": r.label,
                "value": value,
                "unit": r.unit,
                "notes": r.notes,
            }
        )
    return pd.DataFrame(rows, columns=["key", "label", "value", "unit", "notes"])


def _bullets(title: str, items: Sequence[str]) -> list[str]:
    lines = [f"{title}:"]
    if not items:
        lines.append("  (none)")
    lines.extend(f"  - {item}" for item in items)
    return lines


def analysis_to_text(result: AnalysisResult) -> str:
    """Render a parsed analysis as plain text for the console."""
    lines = ["Summary:", f"  {result.summary or '(none)'}", ""]
    lines += _bullets("Strengths", result.strengths) + [""]
    lines += _bullets("Weaknesses", result.weaknesses) + [""]
    lines += _bullets("Opportunities", result.opportunities) + [""]
    lines += _bullets("Threats", result.threats) + [""]

    lines.append("Recommendations:")
    if not result.recommendations:
        lines.append("  (none)")
    for i, rec in enumerate(result.recommendations, start=1):
        lines.append(f"  {i}. [{rec.priority}] {rec.title}")

    cw = result.creditworthiness
    lines += ["", f"Creditworthiness: {cw.score}/850 ({cw.rating})"]
    lines.extend(f"  - {factor}" for factor in cw.factors)
    return "\n".join(lines)
