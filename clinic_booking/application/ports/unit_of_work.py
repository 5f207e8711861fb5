from typing import ContextManager, Protocol

from .appointments_repo import AppointmentsRepository
from .audit_logger import AuditSink
from .directory import DirectoryRepository
from .notifications import NotificationRepository
from .slot_repo import SlotRepository


class UnitOfWork(Protocol):
    slots: SlotRepository
    appointments: AppointmentsRepository
    directory: DirectoryRepository
    audit: AuditSink
    notifications: NotificationRepository


class TransactionCoordinator(Protocol):
    def transaction(self) -> ContextManager[UnitOfWork]:
        """Open an all-or-nothing unit of work: committed on clean exit, rolled back on any error."""
        ...
