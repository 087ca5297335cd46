# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Data model for SMB FinProfile.

All records produced by the pipeline are immutable (frozen dataclasses).
Monetary amounts are carried as ``decimal.Decimal`` so that aggregate
totals are exact sums of their parts; ratios and scores are plain floats
and ints.

Records
-------
- Transaction:          one categorized income/expense line.
- Stream:               a named amount (revenue stream or expense category).
- RevenueData / ExpenseData / CashFlowData: aggregates of a transaction set.
- Loan / BalanceSheetInputs: optional enrichments supplied by the caller.
- ExtractedData:        everything derived from one set of rows.
- Ratios / Trends / FinancialFeatures: output of the scoring engine.
- Recommendation / Creditworthiness / AnalysisResult: output of the
  response parser.

Every public record exposes ``to_dict()`` returning plain Python values with
the camelCase keys used by the downstream persistence and presentation
layers. Ratios and trends that could not be computed are *omitted* from
these dictionaries rather than reported as zero.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Literal, Optional

TransactionKind = Literal["income", "expense"]
Priority = Literal["high", "medium", "low"]

ZERO = Decimal("0")


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class Transaction:
    """A single classified transaction.

    Attributes:
        date: Calendar date of the transaction.
        description: Free text label ("Unknown" when the source has none).
        amount: Non-negative magnitude.
        kind: 'income' or 'expense'.
        category: Category label. May be empty when an explicit category
            column was present but blank for this row.
    """

    date: date
    description: str
    amount: Decimal
    kind: TransactionKind
    category: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": float(self.amount),
            "type": self.kind,
            "category": self.category,
        }


@dataclass(frozen=True)
class Stream:
    """A named amount inside a revenue or expense breakdown."""

    name: str
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "amount": float(self.amount)}


@dataclass(frozen=True)
class RevenueData:
    total: Decimal
    streams: tuple[Stream, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": float(self.total),
            "streams": [s.to_dict() for s in self.streams],
        }


@dataclass(frozen=True)
class ExpenseData:
    total: Decimal
    categories: tuple[Stream, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": float(self.total),
            "categories": [c.to_dict() for c in self.categories],
        }


@dataclass(frozen=True)
class CashFlowData:
    """Simplified cash-flow breakdown.

    Only ``operating`` is derived from transactions; ``investing`` and
    ``financing`` are always zero. ``net`` is the sum of the three.
    """

    operating: Decimal
    investing: Decimal
    financing: Decimal
    net: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "operating": float(self.operating),
            "investing": float(self.investing),
            "financing": float(self.financing),
            "net": float(self.net),
        }


@dataclass(frozen=True)
class Loan:
    """Outstanding loan supplied as a balance-sheet enrichment."""

    amount: Decimal
    interest_rate: float = 0.0
    emi: Decimal = ZERO
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "amount": float(self.amount),
            "interestRate": self.interest_rate,
            "emi": float(self.emi),
        }


@dataclass(frozen=True)
class BalanceSheetInputs:
    """Optional balance-sheet figures supplied alongside the rows.

    The engine never fetches these itself. A ``None`` value means the figure
    is unknown, which disables the ratios depending on it.
    """

    accounts_receivable: Optional[Decimal] = None
    accounts_payable: Optional[Decimal] = None
    loans: tuple[Loan, ...] = ()
    total_assets: Optional[Decimal] = None


@dataclass(frozen=True)
class ExtractedData:
    """Everything derived from one extraction run.

    ``rows_seen`` and ``rows_skipped`` report how many input rows were read
    and how many were dropped because no date or amount could be resolved.
    """

    transactions: tuple[Transaction, ...]
    revenue: RevenueData
    expenses: ExpenseData
    cash_flow: CashFlowData
    balance_sheet: BalanceSheetInputs = field(default_factory=BalanceSheetInputs)
    rows_seen: int = 0
    rows_skipped: int = 0

    @property
    def net_profit(self) -> Decimal:
        return self.revenue.total - self.expenses.total

    def to_dict(self) -> dict[str, Any]:
        bs = self.balance_sheet
        out: dict[str, Any] = {
            "transactions": [t.to_dict() for t in self.transactions],
            "revenue": self.revenue.to_dict(),
            "expenses": self.expenses.to_dict(),
            "cashFlow": self.cash_flow.to_dict(),
            "rowsSeen": self.rows_seen,
            "rowsSkipped": self.rows_skipped,
        }
        if bs.loans:
            out["loans"] = [loan.to_dict() for loan in bs.loans]
        if bs.accounts_receivable is not None:
            out["accountsReceivable"] = float(bs.accounts_receivable)
        if bs.accounts_payable is not None:
            out["accountsPayable"] = float(bs.accounts_payable)
        return out


@dataclass(frozen=True)
class Ratios:
    """Financial ratios. ``None`` means "not computable", never zero."""

    profit_margin: float
    expense_ratio: float
    current_ratio: Optional[float] = None
    quick_ratio: Optional[float] = None
    debt_to_equity: Optional[float] = None
    return_on_assets: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "currentRatio": self.current_ratio,
                "quickRatio": self.quick_ratio,
                "debtToEquity": self.debt_to_equity,
                "profitMargin": self.profit_margin,
                "expenseRatio": self.expense_ratio,
                "returnOnAssets": self.return_on_assets,
            }
        )


@dataclass(frozen=True)
class Trends:
    """Period-over-period growth rates (fractions, 0.1 == +10%)."""

    revenue_growth: Optional[float] = None
    expense_growth: Optional[float] = None
    profit_growth: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "revenueGrowth": self.revenue_growth,
                "expenseGrowth": self.expense_growth,
                "profitGrowth": self.profit_growth,
            }
        )


@dataclass(frozen=True)
class FinancialFeatures:
    ratios: Ratios
    health_score: int
    risk_score: int
    trends: Trends = field(default_factory=Trends)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ratios": self.ratios.to_dict(),
            "healthScore": self.health_score,
            "riskScore": self.risk_score,
            "trends": self.trends.to_dict(),
        }


@dataclass(frozen=True)
class Recommendation:
    category: str
    priority: Priority
    title: str
    description: str
    expected_impact: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "expectedImpact": self.expected_impact,
        }


@dataclass(frozen=True)
class Creditworthiness:
    """Proxy credit score (0-850) with its rating band and contributing factors."""

    score: int
    rating: str
    factors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "rating": self.rating, "factors": list(self.factors)}


@dataclass(frozen=True)
class AnalysisResult:
    """Structured analysis parsed from one generated reply."""

    summary: str
    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...]
    opportunities: tuple[str, ...]
    threats: tuple[str, ...]
    recommendations: tuple[Recommendation, ...]
    creditworthiness: Creditworthiness

    @property
    def is_empty(self) -> bool:
        """True when the reply contained no recognizable section content."""
        return not (
            self.summary
            or self.strengths
            or self.weaknesses
            or self.opportunities
            or self.threats
            or self.recommendations
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "insights": {
                "summary": self.summary,
                "strengths": list(self.strengths),
                "weaknesses": list(self.weaknesses),
                "opportunities": list(self.opportunities),
                "threats": list(self.threats),
            },
            "recommendations": [r.to_dict() for r in self.recommendations],
            "creditworthiness": self.creditworthiness.to_dict(),
        }
