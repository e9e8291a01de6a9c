"""In-memory table registry for Gavel.

Tables live only as long as the process. Each table is owned by a
``GameRunner`` so its timers are cancelled when the table goes away.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from gavel.config import Settings, get_settings
from gavel.engine.engine import GameEngine
from gavel.engine.runner import GameRunner
from gavel.lib.exceptions import TableExpiredError, TableNotFoundError
from gavel.lib.models import GameTable

logger = logging.getLogger(__name__)


class TableStore:
    """
    Registry of live tables.

    Features:
    - One shared engine (and random source) for every table
    - TTL expiry measured from table creation
    - Shutdown cancels every table's timers
    """

    def __init__(
        self,
        settings: Settings | None = None,
        engine: GameEngine | None = None,
    ):
        self.settings = settings or get_settings()
        self.engine = engine or GameEngine(settings=self.settings)
        self._runners: dict[UUID, GameRunner] = {}
        self._lock = asyncio.Lock()

    def _is_expired(self, table: GameTable) -> bool:
        age = datetime.utcnow() - table.created_at
        return age > timedelta(hours=self.settings.table_ttl_hours)

    async def create(self) -> GameRunner:
        """Create a new table at the menu screen."""
        runner = GameRunner(engine=self.engine)
        async with self._lock:
            self._runners[runner.table.table_id] = runner
        logger.info(f"Created table {runner.table_id}")
        return runner

    async def get(self, table_id: UUID) -> GameRunner:
        """
        Get a table's runner by ID.

        Raises:
            TableNotFoundError: If the table doesn't exist
            TableExpiredError: If the table has outlived its TTL
        """
        async with self._lock:
            runner = self._runners.get(table_id)
            if runner is None:
                raise TableNotFoundError(str(table_id))
            expired = self._is_expired(runner.table)
            if expired:
                # Removed while still holding the lock
                del self._runners[table_id]

        if expired:
            await runner.close()
            logger.info(f"Expired table {table_id}")
            raise TableExpiredError(str(table_id))
        return runner

    async def delete(self, table_id: UUID) -> None:
        """Discard a table and cancel its timers."""
        async with self._lock:
            runner = self._runners.pop(table_id, None)
        if runner is None:
            raise TableNotFoundError(str(table_id))
        await runner.close()
        logger.info(f"Deleted table {table_id}")

    async def exists(self, table_id: UUID) -> bool:
        async with self._lock:
            return table_id in self._runners

    async def cleanup_expired(self) -> int:
        """
        Discard expired tables.

        Returns:
            Number of tables cleaned up
        """
        async with self._lock:
            expired = [
                tid for tid, runner in self._runners.items()
                if self._is_expired(runner.table)
            ]
            runners = [self._runners.pop(tid) for tid in expired]

        for runner in runners:
            await runner.close()

        if runners:
            logger.info(f"Cleaned up {len(runners)} expired tables")
        return len(runners)

    async def list_tables(self) -> list[UUID]:
        async with self._lock:
            return list(self._runners.keys())

    async def shutdown(self) -> None:
        """Close every runner."""
        async with self._lock:
            runners = list(self._runners.values())
            self._runners.clear()
        for runner in runners:
            await runner.close()
        logger.info("Table store shut down")

    def get_stats(self) -> dict[str, Any]:
        """Get registry statistics."""
        return {
            "tables": len(self._runners),
            "table_ttl_hours": self.settings.table_ttl_hours,
        }


# =============================================================================
# Module-level store instance
# =============================================================================


_default_store: TableStore | None = None


async def get_table_store() -> TableStore:
    """Get the default table store instance."""
    global _default_store
    if _default_store is None:
        _default_store = TableStore()
    return _default_store


async def close_table_store() -> None:
    """Close the default table store."""
    global _default_store
    if _default_store:
        await _default_store.shutdown()
        _default_store = None
