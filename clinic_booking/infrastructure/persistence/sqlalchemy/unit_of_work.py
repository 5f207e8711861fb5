import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import Session

from ....application.ports.unit_of_work import TransactionCoordinator, UnitOfWork
from ....exceptions import ConflictError
from ...audit.sql_audit_sink import SqlAuditSink
from .repositories.appointments_repository_sql import SqlAppointmentsRepository
from .repositories.directory_repository_sql import SqlDirectoryRepository
from .repositories.notification_repository_sql import SqlNotificationRepository
from .repositories.slot_repository_sql import SqlSlotRepository

logger = logging.getLogger(__name__)

# SQLSTATE codes Postgres uses for serialization failures and deadlocks
_CONFLICT_SQLSTATES = {"40001", "40P01"}


def is_write_conflict(exc: BaseException) -> bool:
    if isinstance(exc, StaleDataError):
        return True
    if not isinstance(exc, DBAPIError):
        return False
    sqlstate = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if sqlstate in _CONFLICT_SQLSTATES:
        return True
    return isinstance(exc, OperationalError) and "database is locked" in str(exc.orig)


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session: Session):
        self.session = session
        self.slots = SqlSlotRepository(session)
        self.appointments = SqlAppointmentsRepository(session)
        self.directory = SqlDirectoryRepository(session)
        self.audit = SqlAuditSink(session)
        self.notifications = SqlNotificationRepository(session)


class SqlTransactionCoordinator(TransactionCoordinator):
    def __init__(self, engine: Engine, session_factory: Callable[[Engine], Session] = Session):
        self.engine = engine
        self.session_factory = session_factory

    @contextmanager
    def transaction(self) -> Iterator[SqlUnitOfWork]:
        session = self.session_factory(self.engine)
        try:
            yield SqlUnitOfWork(session)
            session.commit()
        except Exception as e:
            session.rollback()
            if is_write_conflict(e):
                logger.warning(f"Transaction aborted on write conflict: {e}")
                raise ConflictError("The time slot was modified concurrently, please retry") from e
            raise
        finally:
            session.close()
