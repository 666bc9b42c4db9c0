"""Orchestrator package - coordinates batch uploads."""
from .coordinator import UploadCoordinator
from .core import UtApi
from .models import BatchUploadResult, FileOutcome, OutcomeStatus

__all__ = ["UtApi", "UploadCoordinator", "BatchUploadResult", "FileOutcome", "OutcomeStatus"]
