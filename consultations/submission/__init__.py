from .base import BaseConsultationStore, BaseNotifier
from .factory import get_consultation_store, get_notifier
from .orchestrator import SubmissionOrchestrator
from .results import AbortReason, Err, Ok, SubmissionResult, SubmissionState

__all__ = [
    "AbortReason",
    "BaseConsultationStore",
    "BaseNotifier",
    "Err",
    "Ok",
    "SubmissionOrchestrator",
    "SubmissionResult",
    "SubmissionState",
    "get_consultation_store",
    "get_notifier",
]
