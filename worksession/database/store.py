"""Key-value access on top of the ``kv_store`` table."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Callable

from sqlalchemy.orm import Session as OrmSession

from .db import get_session
from .models import KeyValue


class KeyValueStore:
    """Durable ``str -> str`` mapping.

    Database errors are not caught here; callers decide whether a failed
    read or write matters.
    """

    def __init__(
        self,
        session_scope: Callable[[], AbstractContextManager[OrmSession]] = get_session,
    ) -> None:
        self._session_scope = session_scope

    def get(self, key: str) -> str | None:
        with self._session_scope() as db:
            row = db.get(KeyValue, key)
            return None if row is None else row.value

    def put(self, key: str, value: str) -> None:
        with self._session_scope() as db:
            row = db.get(KeyValue, key)
            if row is None:
                db.add(KeyValue(key=key, value=value))
            else:
                row.value = value

    def delete(self, key: str) -> None:
        with self._session_scope() as db:
            row = db.get(KeyValue, key)
            if row is not None:
                db.delete(row)
