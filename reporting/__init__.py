"""
Reports on top of the stockfolio ledger.

Account metrics (value, return on deposits, allocation) and the printed
summary / history / profit-loss reports.
"""

from reporting.metrics import AccountMetrics, allocation_weights, compute_account_metrics
from reporting.portfolio_report import format_transaction, print_history, print_profit_loss, print_summary

__all__ = [
    "AccountMetrics",
    "allocation_weights",
    "compute_account_metrics",
    "format_transaction",
    "print_history",
    "print_profit_loss",
    "print_summary",
]
