"""Record sources: the storage capability the search executor needs."""
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol, Sequence

from catalog_core.query_planner import RecordFilter


@dataclass(frozen=True)
class Ordering:
    """Sort key for a page request. Ties always fall back to ascending id."""

    field: str
    descending: bool = True


class RecordSource(Protocol):
    """Anything the executor can search: SQL-backed locations, in-memory reviews."""

    def find_matching(
        self,
        record_filter: RecordFilter,
        ordering: Ordering | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> Iterable[Any]:
        """Records matching record_filter; creation order when ordering is None."""
        ...

    def count(self, record_filter: RecordFilter) -> int:
        ...


class SequenceSource:
    """RecordSource over an in-memory sequence (e.g. the reviews owned by one location)."""

    def __init__(
        self,
        records: Sequence[Any],
        sort_keys: dict[str, Callable[[Any], Any]],
        name_of: Callable[[Any], str] | None = None,
        created_of: Callable[[Any], Any] | None = None,
        id_of: Callable[[Any], Any] = lambda r: r.id,
    ):
        self._records = list(records)
        self._sort_keys = sort_keys
        self._name_of = name_of
        self._created_of = created_of
        self._id_of = id_of

    def _matches(self, record, record_filter: RecordFilter) -> bool:
        if record_filter.name_contains is not None:
            if self._name_of is None:
                return False
            if record_filter.name_contains.lower() not in (self._name_of(record) or "").lower():
                return False
        if record_filter.created_since is not None:
            if self._created_of is None or self._created_of(record) < record_filter.created_since:
                return False
        return True

    def find_matching(
        self,
        record_filter: RecordFilter,
        ordering: Ordering | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Any]:
        matched = [r for r in self._records if self._matches(r, record_filter)]
        if ordering is not None:
            key = self._sort_keys.get(ordering.field)
            if key is None:
                raise KeyError(f"unsupported sort field: {ordering.field}")
            # Two stable passes: id ascending, then the requested key.
            matched.sort(key=self._id_of)
            matched.sort(key=key, reverse=ordering.descending)
        end = None if limit is None else offset + limit
        return matched[offset:end]

    def count(self, record_filter: RecordFilter) -> int:
        return sum(1 for r in self._records if self._matches(r, record_filter))
