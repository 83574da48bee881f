import asyncio
import logging
from collections.abc import Sequence

from ..domain.exceptions import NotFoundError, VersionConflictError
from .base import History, Record, Store, in_range

LOGGER = logging.getLogger(__name__)


class InMemoryStore(Store):
    """Dictionary-based in-memory store for tests and development.

    Keeps one History per aggregate id behind a single asyncio lock. Saves
    append then sort, loads filter and copy out, so callers never share the
    store's internal lists.

    The asyncio lock is bound to one event loop and is not thread-safe: use
    an instance from a single event loop only.

    Versions are unique per aggregate: a save containing a version that is
    already stored, or the same version twice, raises VersionConflictError
    and stores nothing.

    **NOT suitable for production**: nothing survives a restart and memory
    grows without bound.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._histories: dict[str, History] = {}

    async def save(self, aggregate_id: str, records: Sequence[Record]) -> None:
        if not records:
            return

        async with self._lock:
            history = self._histories.get(aggregate_id, History())

            seen = set(history.versions)
            conflicts = []
            for record in records:
                if record.version in seen:
                    conflicts.append(record.version)
                seen.add(record.version)
            if conflicts:
                raise VersionConflictError(aggregate_id, conflicts)

            updated = History([*history, *records])
            updated.sort_by_version()
            self._histories[aggregate_id] = updated

        LOGGER.debug(
            "Saved %d record(s)",
            len(records),
            extra={"aggregate_id": aggregate_id},
        )

    async def load(
        self,
        aggregate_id: str,
        from_version: int = 0,
        to_version: int = 0,
    ) -> History:
        async with self._lock:
            history = self._histories.get(aggregate_id)
            if history is None:
                raise NotFoundError(aggregate_id)

            return History(
                record for record in history if in_range(record.version, from_version, to_version)
            )

    def aggregate_ids(self) -> list[str]:
        """IDs of every aggregate with a stored history."""
        return list(self._histories)
