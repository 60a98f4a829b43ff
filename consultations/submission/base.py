"""
Collaborator contracts the orchestrator talks to.

Every persistence backend implements BaseConsultationStore, every delivery
backend implements BaseNotifier, and both are registered in factory.py.
The orchestrator only sees these types; it never imports Django models.

Collaborator methods raise on failure. What a failure means for the
submission is decided by the orchestrator, not by the collaborator.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from ..draft import ConsultationDraft


@dataclass(frozen=True)
class ConsultationRecord:
    id: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class InvoiceItem:
    description: str
    amount: Decimal
    quantity: int = 1

    def to_dict(self) -> dict:
        return {'description': self.description, 'amount': str(self.amount), 'quantity': self.quantity}


@dataclass(frozen=True)
class InvoiceRequest:
    patient_id: str
    consultation_id: str
    items: tuple[InvoiceItem, ...]
    status: str
    due_date: datetime

    @property
    def total(self) -> Decimal:
        return sum((item.amount * item.quantity for item in self.items), Decimal('0'))


@dataclass(frozen=True)
class InvoiceRecord:
    id: str
    total: Decimal | None = None


@dataclass(frozen=True)
class FollowUpRequest:
    patient_id: str | None
    consultation_id: str
    template_id: str
    period: str | None
    payment_status: str
    invoice_id: str | None


@dataclass(frozen=True)
class FollowUpRecord:
    id: str
    scheduled_date: datetime | None = None


@dataclass(frozen=True)
class NotificationRequest:
    patient_id: str | None
    note_id: str
    template_id: str


@dataclass
class NotificationResult:
    success: bool
    channels: dict[str, dict[str, Any]] = field(default_factory=dict)
    notification_id: str | None = None
    error: str | None = None

    def delivered_channels(self) -> list[str]:
        return [name for name, outcome in self.channels.items() if outcome.get('success')]


class BaseConsultationStore(ABC):

    @abstractmethod
    async def create_consultation(self, draft: ConsultationDraft) -> ConsultationRecord:
        """Persist the consultation. Raises on failure."""

    @abstractmethod
    async def create_invoice(self, request: InvoiceRequest) -> InvoiceRecord:
        """Persist an invoice referencing an existing consultation. Raises on failure."""

    @abstractmethod
    async def schedule_follow_up(self, request: FollowUpRequest) -> FollowUpRecord:
        """Persist a follow-up schedule. Raises on failure."""


class BaseNotifier(ABC):

    @abstractmethod
    async def notify_patient(self, request: NotificationRequest) -> NotificationResult:
        """
        Tell the patient a new consultation note is available.

        Returns per-channel outcomes. May raise or return success=False;
        the orchestrator treats both as a logged, non-fatal failure.
        """
