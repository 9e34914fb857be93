"""Tenant resolution and the process-wide cache of open tenant databases.

Each tenant maps to its own SQLite file. Open handles live in a bounded LRU
cache; the least recently used one is disposed when the cache is full. Every
tenant also gets a re-entrant lock that serializes its store operations. Locks
outlive eviction so a reopened tenant keeps the same lock.
"""

from __future__ import annotations

import re
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from .config import BaseConfig
from .domain.repositories import HabitRepository
from .errors import StorageFailure, ValidationError
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelHabitRepository
from .logging_config import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from .services.store import HabitStore

logger = get_logger(__name__)

_DISALLOWED = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_tenant(raw: Optional[str]) -> str:
    """Return the tenant identifier, rejecting anything outside ``[A-Za-z0-9_-]``."""

    if raw is None or not str(raw):
        raise ValidationError("Invalid tenant name")
    tenant = str(raw)
    if _DISALLOWED.sub("", tenant) != tenant:
        raise ValidationError(
            "Tenant name can only contain letters, numbers, hyphens, and underscores"
        )
    return tenant


@dataclass
class TenantHandle:
    """An open tenant database with its repository and lock."""

    name: str
    path: Path
    engine: Engine
    session_factory: Callable[[], Session]
    repository: HabitRepository
    lock: threading.RLock
    migrations: list[str] = field(default_factory=list)

    def dispose(self) -> None:
        self.engine.dispose()


class TenantRegistry:
    """Bounded cache of tenant handles keyed by sanitized tenant name."""

    def __init__(self, config: BaseConfig, capacity: Optional[int] = None) -> None:
        self.config = config
        self.capacity = max(1, capacity if capacity is not None else config.TENANT_CACHE_SIZE)
        self._handles: "OrderedDict[str, TenantHandle]" = OrderedDict()
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._handles)

    def __contains__(self, tenant: object) -> bool:
        with self._guard:
            return tenant in self._handles

    def open_tenants(self) -> list[str]:
        """Tenant names currently held open, least recently used first."""

        with self._guard:
            return list(self._handles)

    def lock_for(self, tenant: str) -> threading.RLock:
        with self._guard:
            return self._lock_for_unlocked(tenant)

    def _lock_for_unlocked(self, tenant: str) -> threading.RLock:
        lock = self._locks.get(tenant)
        if lock is None:
            lock = threading.RLock()
            self._locks[tenant] = lock
        return lock

    def resolve(self, raw: Optional[str]) -> TenantHandle:
        """Return the open handle for ``raw``, creating the database on first use."""

        tenant = sanitize_tenant(raw)
        with self._guard:
            handle = self._handles.get(tenant)
            if handle is not None:
                self._handles.move_to_end(tenant)
                return handle

            handle = self._open(tenant)
            self._handles[tenant] = handle
            evicted = []
            while len(self._handles) > self.capacity:
                evicted.append(self._handles.popitem(last=False)[1])

        for old in evicted:
            # Wait for in-flight operations on the evicted tenant.
            with old.lock:
                old.dispose()
            logger.info(
                f"Evicted tenant database {old.name}",
                extra={"tenant": old.name, "open_tenants": self.open_tenants()},
            )
        return handle

    def _open(self, tenant: str) -> TenantHandle:
        path = self.config.tenant_database_path(tenant)
        created = not path.exists()
        lock = self._lock_for_unlocked(tenant)
        with lock:
            engine = create_db_engine(path, self.config)
            try:
                migrations = init_database(engine)
            except SQLAlchemyError as exc:
                engine.dispose()
                logger.error(f"Could not open database for tenant {tenant}", exc_info=True)
                raise StorageFailure(f"Could not open storage for tenant {tenant}") from exc

        session_factory = create_session_factory(engine)
        logger.info(
            f"{'Created' if created else 'Opened'} tenant database {tenant}",
            extra={"tenant": tenant, "path": str(path), "migrations": migrations},
        )
        return TenantHandle(
            name=tenant,
            path=path,
            engine=engine,
            session_factory=session_factory,
            repository=SQLModelHabitRepository(session_factory),
            lock=lock,
            migrations=migrations,
        )

    def store_for(self, raw: Optional[str]) -> "HabitStore":
        """Resolve ``raw`` and wrap its handle in a :class:`HabitStore`."""

        from .services.store import HabitStore

        return HabitStore(self.resolve(raw))

    def close(self) -> None:
        """Dispose every open handle."""

        with self._guard:
            handles = list(self._handles.values())
            self._handles.clear()
        for handle in handles:
            with handle.lock:
                handle.dispose()


__all__ = ["TenantHandle", "TenantRegistry", "sanitize_tenant"]
