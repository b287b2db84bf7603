"""Storage backend interface shared by the embedded and networked stores.

One StorageBackend is selected at startup and held by the Database for the
whole process lifetime. Each backend hands out one CollectionStore per
logical collection; CollectionStores only know native keys. Numeric public
ids are layered on top by persistence.identity.

STRICT CONTRACT:
- Records crossing this boundary are plain dicts with `_id` as a str.
- Missing records are None / 0, never exceptions.
- Backend failures (I/O, network, serialization, malformed filter) raise StorageError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from easel.helpers.exceptions import StorageError

SortSpec = list[tuple[str, int]]
Filter = Mapping[str, Any]

# Logical collection name -> (embedded file name, networked collection name)
COLLECTIONS: dict[str, tuple[str, str]] = {
    "artworks": ("artworks.db", "artworks"),
    "artist": ("artist.db", "artistinfos"),
    "faqs": ("faqs.db", "faqs"),
    "users": ("users.db", "users"),
    "settings": ("settings.db", "sitesettings"),
}

_COMPARISON_OPS = frozenset({"$gt", "$gte", "$lt", "$lte"})
_SUPPORTED_OPS = frozenset({"$ne", "$in", "$nin", "$exists"}) | _COMPARISON_OPS


class CollectionStore(ABC):
    """Native-key operations for one collection of one backend."""

    name: str

    @abstractmethod
    def new_key(self) -> str:
        """Generate a fresh native key (not yet stored)."""

    @abstractmethod
    def fetch(self, filter: Filter, sort: SortSpec | None = None, limit: int | None = None) -> list[dict[str, Any]]:
        """Return matching records, sorted then limited, before any id resolution."""

    @abstractmethod
    def find_one(self, filter: Filter) -> dict[str, Any] | None: ...

    @abstractmethod
    def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        """Insert a record whose `_id` is already set; returns the stored record."""

    @abstractmethod
    def replace(self, key: str, doc: dict[str, Any]) -> int:
        """Replace the whole record stored under `key`. Returns affected count."""

    @abstractmethod
    def remove(self, key: str) -> int: ...

    @abstractmethod
    def count(self, filter: Filter) -> int: ...

    @abstractmethod
    def set_field(self, key: str, field: str, value: Any) -> None:
        """Persist a single field alongside the native key (no timestamps touched)."""


class StorageBackend(ABC):
    """A document store holding the five fixed collections."""

    name: str
    persists_numeric_id: bool
    """True when the public id is stored with the record and queryable directly."""

    @abstractmethod
    def collection(self, name: str) -> CollectionStore: ...

    @abstractmethod
    def ping(self) -> None:
        """Trivial round-trip; raises StorageError when the backend is unusable."""

    @abstractmethod
    def close(self) -> None: ...


class Query:
    """Deferred find: chain sort()/limit(), then materialize with all() or iteration."""

    def __init__(
        self,
        store: CollectionStore,
        filter: Filter | None,
        resolve: Callable[[dict[str, Any]], dict[str, Any]],
    ) -> None:
        self._store = store
        self._filter: Filter = filter or {}
        self._resolve = resolve
        self._sort: SortSpec | None = None
        self._limit: int | None = None

    def sort(self, spec: Mapping[str, int] | SortSpec) -> Query:
        self._sort = normalize_sort(spec)
        return self

    def limit(self, n: int) -> Query:
        if n < 0:
            raise StorageError(f"Invalid limit: {n}")
        self._limit = n
        return self

    def all(self) -> list[dict[str, Any]]:
        docs = self._store.fetch(self._filter, self._sort, self._limit)
        return [self._resolve(doc) for doc in docs]

    def first(self) -> dict[str, Any] | None:
        self._limit = 1
        docs = self.all()
        return docs[0] if docs else None

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.all())


def normalize_sort(spec: Mapping[str, int] | SortSpec) -> SortSpec:
    """Accept {"field": 1|-1} or [("field", 1|-1)] and return the list form."""
    items = list(spec.items()) if isinstance(spec, Mapping) else list(spec)
    normalized: SortSpec = []
    for field, direction in items:
        if direction not in (1, -1):
            raise StorageError(f"Invalid sort direction for '{field}': {direction!r}")
        normalized.append((str(field), int(direction)))
    return normalized


# ----------------------------------------------------------------------
#  In-process filter evaluation (embedded backend)
# ----------------------------------------------------------------------
_MISSING = object()


def get_path(doc: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted field path; returns a sentinel when absent."""
    node: Any = doc
    for part in path.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return _MISSING
        node = node[part]
    return node


def validate_filter(filter: Any) -> None:
    """Reject filters the embedded evaluator cannot run, before touching any record."""
    if not isinstance(filter, Mapping):
        raise StorageError(f"Filter must be a mapping, got {type(filter).__name__}")
    for path, condition in filter.items():
        if not isinstance(path, str) or path.startswith("$"):
            raise StorageError(f"Unsupported top-level filter key: {path!r}")
        if isinstance(condition, Mapping) and any(str(k).startswith("$") for k in condition):
            for op, operand in condition.items():
                if op not in _SUPPORTED_OPS:
                    raise StorageError(f"Unsupported filter operator: {op}")
                if op in ("$in", "$nin") and not isinstance(operand, list | tuple | set):
                    raise StorageError(f"{op} requires a list")


def matches(doc: Mapping[str, Any], filter: Filter) -> bool:
    """Evaluate a Mongo-style filter subset against a record.

    Supported: field equality (dotted paths, array membership), $ne, $in,
    $nin, $exists, $gt, $gte, $lt, $lte. Call validate_filter() first.
    """
    for path, condition in filter.items():
        value = get_path(doc, path)
        if isinstance(condition, Mapping) and any(str(k).startswith("$") for k in condition):
            if not _match_operators(value, condition):
                return False
        elif not _equals(value, condition):
            return False
    return True


def _equals(value: Any, expected: Any) -> bool:
    if value is _MISSING:
        return expected is None
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return bool(value == expected)


def _match_operators(value: Any, condition: Mapping[str, Any]) -> bool:
    for op, operand in condition.items():
        if op == "$ne":
            if _equals(value, operand):
                return False
        elif op in ("$in", "$nin"):
            hit = any(_equals(value, candidate) for candidate in operand)
            if hit != (op == "$in"):
                return False
        elif op == "$exists":
            if (value is not _MISSING) != bool(operand):
                return False
        else:
            if value is _MISSING or value is None or not _comparable(value, operand):
                return False
            if op == "$gt" and not value > operand:
                return False
            if op == "$gte" and not value >= operand:
                return False
            if op == "$lt" and not value < operand:
                return False
            if op == "$lte" and not value <= operand:
                return False
    return True


def _comparable(a: Any, b: Any) -> bool:
    numeric = (int, float)
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool)
    if isinstance(a, numeric) and isinstance(b, numeric):
        return True
    return type(a) is type(b)


def sort_key(value: Any) -> tuple[int, Any]:
    """Total order across types: missing < null < numbers < strings < bools < lists < dicts."""
    if value is _MISSING:
        return (0, 0)
    if value is None:
        return (1, 0)
    if isinstance(value, bool):
        return (4, value)
    if isinstance(value, int | float):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    if isinstance(value, list):
        return (5, len(value))
    return (6, 0)


def sort_records(docs: list[dict[str, Any]], spec: SortSpec) -> list[dict[str, Any]]:
    """Stable multi-key sort; records with equal keys keep insertion order."""
    ordered = list(docs)
    for field, direction in reversed(spec):
        ordered.sort(key=lambda d, f=field: sort_key(get_path(d, f)), reverse=direction < 0)
    return ordered
