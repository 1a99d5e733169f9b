import logging
from typing import Protocol

import redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from src.models.entry import KeyValueEntry

log = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the backing key-value store cannot be read or written."""


class KeyValueBackend(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...


class MemoryBackend:
    """In-process backend, mostly for tests."""

    def __init__(self, data: dict[str, bytes] | None = None):
        self.data = dict(data or {})

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.data[key] = value


class SQLBackend:
    """
    Stores each key as one row of the ``kv_entries`` table.

    :param session_factory: Callable returning a new SQLAlchemy session.
    :type session_factory: sessionmaker
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, key: str) -> bytes | None:
        """
        Reads the value stored under a key.

        :param key: The storage key.
        :type key: str
        :raises StorageError: If the database cannot be queried.
        :return: The stored bytes, or None if the key was never written.
        :rtype: bytes | None
        """
        db: Session = self.session_factory()
        try:
            entry = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            return entry.value if entry else None
        except SQLAlchemyError as err:
            raise StorageError(f"could not read {key!r}") from err
        finally:
            db.close()

    def set(self, key: str, value: bytes) -> None:
        """
        Writes a value under a key, replacing any previous one.

        :param key: The storage key.
        :type key: str
        :param value: The bytes to store.
        :type value: bytes
        :raises StorageError: If the write cannot be committed.
        """
        db: Session = self.session_factory()
        try:
            entry = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            if entry:
                entry.value = value
            else:
                db.add(KeyValueEntry(key=key, value=value))
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            raise StorageError(f"could not write {key!r}") from err
        finally:
            db.close()


class RedisBackend:
    def __init__(self, client: redis.Redis):
        self.client = client

    def get(self, key: str) -> bytes | None:
        try:
            return self.client.get(key)
        except redis.RedisError as err:
            raise StorageError(f"could not read {key!r}") from err

    def set(self, key: str, value: bytes) -> None:
        try:
            self.client.set(key, value)
        except redis.RedisError as err:
            raise StorageError(f"could not write {key!r}") from err


def build_backend(kind: str, **options) -> KeyValueBackend:
    """
    Creates the backend named in the settings.

    :param kind: One of ``sql``, ``redis`` or ``memory``.
    :type kind: str
    :param options: ``session_factory`` for sql, ``host``/``port`` for redis.
    :raises ValueError: If the backend kind is unknown.
    :return: A ready-to-use backend.
    :rtype: KeyValueBackend
    """
    log.info("Using %s storage backend", kind)
    if kind == "sql":
        return SQLBackend(options["session_factory"])
    if kind == "redis":
        return RedisBackend(redis.Redis(host=options.get("host", "localhost"), port=options.get("port", 6379), db=0))
    if kind == "memory":
        return MemoryBackend()
    raise ValueError(f"Unknown storage backend: {kind}")
