"""
Unit of Work - transaction boundary for service operations.

One session per transaction. Work staged inside ``transaction()`` is
flushed, then every registered pre-commit hook runs in registration
order; the commit happens only if all of them return normally. Any
exception rolls the whole transaction back and propagates.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from hospital.core.exceptions import PersistenceFailed
from hospital.db.session import SessionLocal

logger = logging.getLogger(__name__)

PreCommitHook = Callable[[], None]


class TransactionContext:
    """Handle given to the code running inside one transaction."""

    def __init__(self, session) -> None:
        self.session = session
        self._hooks: List[PreCommitHook] = []

    def add_pre_commit_hook(self, hook: PreCommitHook) -> None:
        """Register ``hook`` to run after all mutations are staged. A hook
        vetoes the commit by raising."""
        self._hooks.append(hook)

    def run_pre_commit_hooks(self) -> None:
        for hook in self._hooks:
            hook()


class UnitOfWork:
    """Opens sessions and owns commit/rollback for the services."""

    def __init__(
        self,
        session_factory: Callable = SessionLocal,
        isolation_level: Optional[str] = None,
    ) -> None:
        self.session_factory = session_factory
        self.isolation_level = isolation_level

    @contextmanager
    def transaction(self) -> Iterator[TransactionContext]:
        session = self.session_factory()
        ctx = TransactionContext(session)
        try:
            if self.isolation_level:
                # Must be set before the first statement of the transaction
                session.connection(
                    execution_options={"isolation_level": self.isolation_level}
                )
            yield ctx
            session.flush()
            ctx.run_pre_commit_hooks()
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(
                "Transaction rolled back after persistence error",
                extra={"context": {"error": str(e)}},
            )
            raise PersistenceFailed(str(e)) from e
        except Exception as e:
            session.rollback()
            logger.warning(
                "Transaction rolled back",
                extra={"context": {"error_type": type(e).__name__}},
            )
            raise
        finally:
            session.close()
