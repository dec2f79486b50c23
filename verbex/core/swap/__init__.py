"""Swap subsystem: DLN quotes, conditional approval and swap submission."""

from .models import SwapOutcome, SwapQuote, SwapQuoteRequest, SwapRequest, SwapStage
from .orchestrator import QuoteProvider, SwapOrchestrator

__all__ = [
    "SwapOutcome",
    "SwapQuote",
    "SwapQuoteRequest",
    "SwapRequest",
    "SwapStage",
    "QuoteProvider",
    "SwapOrchestrator",
]
