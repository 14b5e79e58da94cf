"""Automation services for drop-folder statute ingestion."""

from lovcite.automation.ingestion_service import StatutePipelineResult, run_statute_pipeline
from lovcite.automation.watcher import DebouncedStatuteHandler, StatuteFolderWatcher

__all__ = [
    "DebouncedStatuteHandler",
    "StatuteFolderWatcher",
    "StatutePipelineResult",
    "run_statute_pipeline",
]
