"""
Durable key/value storage.

Provides a tiny get/set interface used to persist the saved-place list.
Currently backed by SQLite through SQLAlchemy; every `set` is committed
before it returns.
"""
import logging
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from db import get_session_factory
from domain.errors import StorageReadFailed, StorageWriteFailed
from repositories import KeyValueRepository

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class SqlKeyValueStorage:
    """
    KeyValueStorage over the `key_values` table.

    Database errors are re-raised as StorageReadFailed / StorageWriteFailed
    so callers never see driver exceptions.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory or get_session_factory()
        self._repo = KeyValueRepository()

    def get(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as session:
                return self._repo.get_value(session, key)
        except SQLAlchemyError as exc:
            logger.warning("Storage read failed for key=%s: %s", key, exc)
            raise StorageReadFailed(str(exc)) from exc

    def set(self, key: str, value: str) -> None:
        try:
            with self._session_factory() as session:
                self._repo.set_value(session, key, value)
        except SQLAlchemyError as exc:
            logger.warning("Storage write failed for key=%s: %s", key, exc)
            raise StorageWriteFailed(str(exc)) from exc
