"""
Forecast ingestion pipeline.

Fetches a forecast batch per grid coordinate and fans each hourly entry out
to a bounded worker pool for validation and storage.
"""

from core.ingestion.orchestrator import IngestionOrchestrator, IngestionSummary

__all__ = [
    "IngestionOrchestrator",
    "IngestionSummary",
]
