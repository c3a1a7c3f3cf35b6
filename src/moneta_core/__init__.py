"""Moneta Core - Financial projection and spending pattern analysis."""

__version__ = "0.1.0"

from .amortization import LoanAmortizationCalculator
from .bulk_recurring import BulkRecurrenceOrchestrator
from .config import MonetaConfig, configure_logging
from .net_worth import NetWorthCalculator
from .patterns import PatternDetector
from .projection import TrendProjector

__all__ = [
    "BulkRecurrenceOrchestrator",
    "LoanAmortizationCalculator",
    "MonetaConfig",
    "NetWorthCalculator",
    "PatternDetector",
    "TrendProjector",
    "configure_logging",
]
