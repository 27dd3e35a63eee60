"""
Custom exceptions for the application.

Every error a service raises derives from ``ServiceError`` and carries a
list of human-readable messages. Low-level SQLAlchemy errors never leave
the service layer untranslated.
"""

import functools
import logging
from typing import Iterable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for service-level failures."""

    def __init__(self, messages: Union[str, Iterable[str], None] = None):
        if messages is None:
            messages = []
        elif isinstance(messages, str):
            messages = [messages]
        self.messages: List[str] = list(messages)
        super().__init__("; ".join(self.messages) or self.__class__.__name__)


class ValidationFailed(ServiceError):
    """Preconditions violated before any mutation took place."""

    pass


class PersistenceFailed(ServiceError):
    """A storage operation failed; the surrounding transaction was rolled back."""

    pass


class NotificationFailed(ServiceError):
    """A merge listener raised; the merge transaction was rolled back."""

    pass


class NotFound(ServiceError):
    """Requested entity does not exist."""

    def __init__(self, entity: str, key: object, message: Optional[str] = None):
        self.entity = entity
        self.key = key
        super().__init__(message or f"{entity} {key!r} not found")


class AlreadySoftDeleted(ServiceError):
    """Operation rejected because the target is already soft deleted."""

    pass


def translate_persistence_errors(func):
    """Convert SQLAlchemy errors raised by ``func`` into ``PersistenceFailed``."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(
                "Persistence error",
                extra={"context": {"operation": func.__qualname__, "error": str(e)}},
            )
            raise PersistenceFailed(str(e)) from e

    return wrapper
