# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Parsing of generated analysis text into structured records.

The generative model answers the analysis prompt with free text. This
module segments that text into sections with a small line-based state
machine:

    NONE -> SUMMARY | STRENGTHS | WEAKNESSES | OPPORTUNITIES | THREATS
            | RECOMMENDATIONS

- A line whose lowercase text contains a section keyword switches to that
  section. Keywords are checked in this order: "summary", "strength",
  "weakness", "opportunit", "threat" or "risk", "recommendation". The
  header line itself is not kept.
- Any other non-empty line is added to the current section (and ignored
  while no section has started):
    * summary lines are joined with spaces,
    * recommendation lines become Recommendation records,
    * the four SWOT lists keep the line without its leading bullet.
- Lists are capped (4 items per SWOT list, 5 recommendations) only when
  the result is assembled.

The parser is best effort and never fails: a reply without any section
keyword gives an empty result. The creditworthiness block does not depend
on the reply at all; it is computed from the financial features.
"""

import math
import re
from enum import Enum
from typing import Optional

from .models import (
    AnalysisResult,
    Creditworthiness,
    ExtractedData,
    FinancialFeatures,
    Recommendation,
)

MAX_LIST_ITEMS = 4
MAX_RECOMMENDATIONS = 5
MAX_TITLE_LENGTH = 100

RECOMMENDATION_CATEGORY = "Financial Management"
RECOMMENDATION_PRIORITY = "high"
RECOMMENDATION_IMPACT = "Positive impact on financial health"


class Section(Enum):
    NONE = "none"
    SUMMARY = "summary"
    STRENGTHS = "strengths"
    WEAKNESSES = "weaknesses"
    OPPORTUNITIES = "opportunities"
    THREATS = "threats"
    RECOMMENDATIONS = "recommendations"


# Checked in order; the first keyword found in the line wins.
SECTION_KEYWORDS: tuple[tuple[Section, tuple[str, ...]], ...] = (
    (Section.SUMMARY, ("summary",)),
    (Section.STRENGTHS, ("strength",)),
    (Section.WEAKNESSES, ("weakness",)),
    (Section.OPPORTUNITIES, ("opportunit",)),
    (Section.THREATS, ("threat", "risk")),
    (Section.RECOMMENDATIONS, ("recommendation",)),
)

# Lower bound of each rating band, best first.
RATING_BANDS: tuple[tuple[int, str], ...] = (
    (750, "Excellent"),
    (700, "Good"),
    (650, "Fair"),
    (600, "Below Average"),
)
LOWEST_RATING = "Poor"

_ORDINAL = re.compile(r"^\d+\.\s*")
_BULLET = re.compile(r"^[-•*]\s*")


def detect_section(line: str) -> Optional[Section]:
    """Return the section announced by ``line``, or None for a content line."""
    lower = line.lower()
    for section, keywords in SECTION_KEYWORDS:
        if any(k in lower for k in keywords):
            return section
    return None


def _recommendation_from_line(line: str) -> Recommendation:
    return Recommendation(
        category=RECOMMENDATION_CATEGORY,
        priority=RECOMMENDATION_PRIORITY,
        title=_ORDINAL.sub("", line)[:MAX_TITLE_LENGTH],
        description=line,
        expected_impact=RECOMMENDATION_IMPACT,
    )


def calculate_creditworthiness(
    data: ExtractedData, features: FinancialFeatures
) -> Creditworthiness:
    """
    Derive a 0-850 proxy credit score from the health and risk scores.

    score = clamp(300 + health * 5.5 - risk * 2, 0, 850), rounded half up.

    The factors list contains, in this order and independently of each
    other: strong margins (> 15%), good liquidity (current ratio >= 1.5),
    positive cash flow, negative profitability and high risk (> 60).
    """
    raw = 300 + features.health_score * 5.5 - features.risk_score * 2
    clamped = max(0.0, min(850.0, raw))
    score = int(math.floor(clamped + 0.5))

    # Bands apply to the unrounded score.
    rating = LOWEST_RATING
    for threshold, label in RATING_BANDS:
        if clamped >= threshold:
            rating = label
            break

    ratios = features.ratios
    factors: list[str] = []
    if ratios.profit_margin > 0.15:
        factors.append("Strong profit margins")
    if ratios.current_ratio is not None and ratios.current_ratio >= 1.5:
        factors.append("Good liquidity position")
    if data.cash_flow.net > 0:
        factors.append("Positive cash flow")
    if ratios.profit_margin < 0:
        factors.append("Negative profitability")
    if features.risk_score > 60:
        factors.append("High financial risk")

    return Creditworthiness(score=score, rating=rating, factors=tuple(factors))


def parse_analysis_response(
    response: str, data: ExtractedData, features: FinancialFeatures
) -> AnalysisResult:
    """
    Segment a generated reply into an AnalysisResult.

    Args:
        response: Raw text returned by the text generator.
        data: Aggregates the prompt was built from.
        features: Ratios and scores the prompt was built from.

    Returns:
        The parsed AnalysisResult. Never raises on unexpected text.
    """
    summary_parts: list[str] = []
    lists: dict[Section, list[str]] = {
        Section.STRENGTHS: [],
        Section.WEAKNESSES: [],
        Section.OPPORTUNITIES: [],
        Section.THREATS: [],
    }
    recommendations: list[Recommendation] = []

    state = Section.NONE
    for raw_line in (response or "").split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        header = detect_section(line)
        if header is not None:
            state = header
            continue

        if state is Section.NONE:
            continue
        if state is Section.SUMMARY:
            summary_parts.append(line)
        elif state is Section.RECOMMENDATIONS:
            recommendations.append(_recommendation_from_line(line))
        else:
            lists[state].append(_BULLET.sub("", line))

    return AnalysisResult(
        summary=" ".join(summary_parts).strip(),
        strengths=tuple(lists[Section.STRENGTHS][:MAX_LIST_ITEMS]),
        weaknesses=tuple(lists[Section.WEAKNESSES][:MAX_LIST_ITEMS]),
        opportunities=tuple(lists[Section.OPPORTUNITIES][:MAX_LIST_ITEMS]),
        threats=tuple(lists[Section.THREATS][:MAX_LIST_ITEMS]),
        recommendations=tuple(recommendations[:MAX_RECOMMENDATIONS]),
        creditworthiness=calculate_creditworthiness(data, features),
    )
