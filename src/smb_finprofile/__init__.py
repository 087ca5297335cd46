# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
SMB FinProfile
--------------

A Python-based financial profiling application for Small and Medium-sized
Businesses (SMBs). It turns raw transaction exports (bank statements,
ledgers, spreadsheets) into a structured financial profile and uses that
profile to drive AI-assisted analysis.

Main capabilities:
- tolerant column resolution for heterogeneous CSV / Excel exports,
- transaction classification (income / expense, keyword categories),
- revenue, expense and cash-flow aggregation with Decimal amounts,
- financial ratios, period-over-period trends, health and risk scores,
- prompt builders for analysis, forecasting, cost optimization,
  working capital and industry benchmarking,
- parsing of free-text model replies into structured insights,
  recommendations and a creditworthiness estimate.

SMB FinProfile separates computation (extraction, ratios), configuration
(TOML) and presentation (CLI), making it suitable for scripting and
automation.


Version: 0.1.0

Usage:
    python -m smb_finprofile.cli --help
"""

__all__ = ["engine", "ratios", "prompts", "analysis", "views", "io"]

__version__ = "0.1.0"
