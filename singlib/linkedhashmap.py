"""A map that remembers insertion order, backed by a linked list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Generic, Iterable, Iterator, List, Mapping, Optional, Tuple, TypeVar, Union

from singlib.linkedlist import Element, LinkedList

K = TypeVar("K")
V = TypeVar("V")

__all__ = ["MapEntry", "LinkedHashMap"]


@dataclass
class MapEntry(Generic[K, V]):
    """A key and its value."""

    key: K
    value: V


class LinkedHashMap(Generic[K, V]):
    """A hash map whose keys, values and entries follow insertion order.

    Updating an existing key keeps its position.
    """

    def __init__(self) -> None:
        self._raw: LinkedList[MapEntry[K, V]] = LinkedList()
        self._index: Dict[K, Element[MapEntry[K, V]]] = {}

    def __len__(self) -> int:
        return len(self._raw)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    def __repr__(self) -> str:
        body = ", ".join(f"{e.key!r}: {e.value!r}" for e in self._raw)
        return f"LinkedHashMap({{{body}}})"

    def is_empty(self) -> bool:
        return len(self._raw) == 0

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Return the value for ``key``, or ``default`` if it is absent."""
        element = self._index.get(key)
        if element is None:
            return default
        return element.value.value

    def put(self, key: K, value: V) -> Optional[V]:
        """Set ``key`` to ``value``; return the previous value or ``None``."""
        element = self._index.get(key)
        if element is not None:
            old = element.value.value
            element.value.value = value
            return old
        self._index[key] = self._raw.push_back(MapEntry(key, value))
        return None

    def remove(self, key: K) -> bool:
        """Remove ``key``; return whether it was present."""
        element = self._index.pop(key, None)
        if element is None:
            return False
        self._raw.remove(element)
        return True

    def put_all(self, other: Union["LinkedHashMap[K, V]", Mapping[K, V]]) -> None:
        """Copy every entry of ``other`` into this map, in ``other``'s order."""
        pairs: Iterable[Tuple[K, V]]
        if isinstance(other, LinkedHashMap):
            pairs = [(entry.key, entry.value) for entry in other.entries()]
        else:
            pairs = list(other.items())
        for key, value in pairs:
            self.put(key, value)

    def clear(self) -> None:
        self._raw.clear()
        self._index.clear()

    def keys(self) -> List[K]:
        return [entry.key for entry in self._raw]

    def values(self) -> List[V]:
        return [entry.value for entry in self._raw]

    def entries(self) -> List[MapEntry[K, V]]:
        """Copies of the entries, in order."""
        return [MapEntry(entry.key, entry.value) for entry in self._raw]