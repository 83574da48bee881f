"""Store interface and the record types it persists."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class Record:
    """A serialized event suitable for storage.

    ``version`` duplicates the event's version so stores can index and sort
    records without deserializing ``data``. Serializers accept any bytes-like
    ``data`` (``bytes``, ``bytearray``, ``memoryview``) as storage drivers
    return it.
    """

    version: int
    data: bytes


class History(list[Record]):
    """A chain of records for one aggregate.

    Left-folding over the deserialized records, in version order, produces
    the aggregate.
    """

    def sort_by_version(self) -> None:
        """Sort in place by version, ascending. The sort is stable."""
        self.sort(key=lambda record: record.version)

    def sorted(self) -> "History":
        return History(sorted(self, key=lambda record: record.version))

    @property
    def versions(self) -> list[int]:
        return [record.version for record in self]

    @property
    def latest_version(self) -> int:
        """Highest version in the history, 0 when empty."""
        return max(self.versions, default=0)


def in_range(version: int, from_version: int, to_version: int) -> bool:
    """Whether ``version`` passes a store load filter.

    ``from_version`` 0 means from the beginning and ``to_version`` 0 means to
    the end.
    """
    return version >= from_version and (to_version == 0 or version <= to_version)


class Store(ABC):
    """Abstract interface for the ordered log of records per aggregate.

    Key responsibilities:
    - **Ordering**: Histories are returned sorted by version, ascending
    - **Atomicity**: A save appends all of its records or none of them
    - **Concurrency Control**: Implementations should reject records whose
      versions are already stored by raising VersionConflictError
    - **Cancellation**: Calls are coroutines and must stop promptly when the
      calling task is cancelled
    """

    @abstractmethod
    async def save(self, aggregate_id: str, records: Sequence[Record]) -> None:
        """Append records to the aggregate's history.

        Appending an empty sequence is a no-op. The resulting history must be
        sorted by version.

        Args:
            aggregate_id: The aggregate the records belong to.
            records: Records to append, in emission order.

        Raises:
            VersionConflictError: If a version is already stored (recommended).
        """
        ...

    @abstractmethod
    async def load(
        self,
        aggregate_id: str,
        from_version: int = 0,
        to_version: int = 0,
    ) -> History:
        """Load the records of an aggregate within a version range.

        Args:
            aggregate_id: The aggregate whose history should be loaded.
            from_version: Minimum version (inclusive); 0 loads from the start.
            to_version: Maximum version (inclusive); 0 loads to the end.

        Returns:
            Matching records in version order. Empty when the aggregate
            exists but nothing matches the range.

        Raises:
            NotFoundError: If the store has no history for the aggregate.
        """
        ...
