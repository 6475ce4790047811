"""SQLAlchemy-backed implementation of the persistent store."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hexconquest.database import check_database_health, create_db_engine, init_db, is_memory_url
from hexconquest.domain.errors import StoreFailure
from hexconquest.interfaces.store import Payload
from hexconquest.models import StoredRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlStore:
    """Persist collections as rows of the ``records`` table.

    The store owns its engine: ``open()`` builds it and creates the schema,
    ``close()`` disposes it.  Blocking SQLAlchemy work runs in a worker
    thread so the event loop never stalls on disk I/O.  An in-memory
    database has a single shared connection, so its calls run one at a time.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self._echo = echo
        self._engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None
        self._serial = threading.Lock() if is_memory_url(url) else contextlib.nullcontext()

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        if self._engine is not None:
            return
        try:
            engine = create_db_engine(self.url, echo=self._echo)
            await asyncio.to_thread(init_db, engine)
        except SQLAlchemyError as exc:
            raise StoreFailure(f"cannot open store at {self.url}") from exc
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        logger.info("store opened at %s", self.url)

    async def close(self) -> None:
        engine = self._engine
        if engine is None:
            return
        self._engine = None
        self._sessions = None
        await asyncio.to_thread(engine.dispose)
        logger.info("store closed")

    async def healthy(self) -> bool:
        if self._engine is None:
            return False
        engine = self._engine

        def _check() -> bool:
            with self._serial:
                return check_database_health(engine)

        return await asyncio.to_thread(_check)

    # ------------------------------------------------------------------
    # IStore

    async def get(self, collection: str, key: str) -> Payload | None:
        def _get(session: Session) -> Payload | None:
            row = session.execute(
                select(StoredRecord).where(
                    StoredRecord.collection == collection, StoredRecord.key == key
                )
            ).scalar_one_or_none()
            return dict(row.payload) if row is not None else None

        return await self._run(_get)

    async def put(self, collection: str, key: str, value: Payload) -> None:
        def _put(session: Session) -> None:
            row = session.execute(
                select(StoredRecord).where(
                    StoredRecord.collection == collection, StoredRecord.key == key
                )
            ).scalar_one_or_none()
            if row is None:
                session.add(StoredRecord(collection=collection, key=key, payload=value))
            else:
                row.payload = value

        await self._run(_put)

    async def delete(self, collection: str, key: str) -> None:
        def _delete(session: Session) -> None:
            session.execute(
                delete(StoredRecord).where(
                    StoredRecord.collection == collection, StoredRecord.key == key
                )
            )

        await self._run(_delete)

    async def get_all(self, collection: str) -> dict[str, Payload]:
        def _get_all(session: Session) -> dict[str, Payload]:
            rows = session.execute(
                select(StoredRecord)
                .where(StoredRecord.collection == collection)
                .order_by(StoredRecord.key)
            ).scalars()
            return {row.key: dict(row.payload) for row in rows}

        return await self._run(_get_all)

    async def get_all_where(self, collection: str, field: str, value: Any) -> dict[str, Payload]:
        rows = await self.get_all(collection)
        return {key: payload for key, payload in rows.items() if payload.get(field) == value}

    async def count(self, collection: str) -> int:
        def _count(session: Session) -> int:
            result = session.execute(
                select(func.count())
                .select_from(StoredRecord)
                .where(StoredRecord.collection == collection)
            ).scalar()
            return result or 0

        return await self._run(_count)

    async def clear(self, collection: str) -> None:
        def _clear(session: Session) -> None:
            session.execute(delete(StoredRecord).where(StoredRecord.collection == collection))

        await self._run(_clear)

    # ------------------------------------------------------------------

    async def _run(self, work: Callable[[Session], T]) -> T:
        sessions = self._sessions
        if sessions is None:
            raise StoreFailure("store is not open")

        def _in_transaction() -> T:
            with self._serial, sessions() as session, session.begin():
                return work(session)

        try:
            return await asyncio.to_thread(_in_transaction)
        except SQLAlchemyError as exc:
            raise StoreFailure(str(exc)) from exc
