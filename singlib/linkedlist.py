"""A doubly linked list with stable element handles."""

from __future__ import annotations

from typing import Generic, Iterable, Iterator, List, Optional, TypeVar

T = TypeVar("T")

__all__ = ["Element", "LinkedList"]


class Element(Generic[T]):
    """A node of a :class:`LinkedList` carrying ``value``."""

    __slots__ = ("value", "_next", "_prev", "_list")

    def __init__(self, value: Optional[T] = None) -> None:
        self.value = value
        self._next: Optional[Element[T]] = None
        self._prev: Optional[Element[T]] = None
        self._list: Optional[LinkedList[T]] = None

    def next(self) -> Optional["Element[T]"]:
        """The following element, or ``None`` at the end."""
        p = self._next
        if self._list is not None and p is not self._list._root:
            return p
        return None

    def prev(self) -> Optional["Element[T]"]:
        """The preceding element, or ``None`` at the start."""
        p = self._prev
        if self._list is not None and p is not self._list._root:
            return p
        return None

    def list(self) -> Optional["LinkedList[T]"]:
        """The list this element belongs to, if any."""
        return self._list

    def __repr__(self) -> str:
        return f"Element({self.value!r})"


class LinkedList(Generic[T]):
    """A doubly linked list built as a ring around a sentinel node."""

    def __init__(self, values: Iterable[T] = ()) -> None:
        self._root: Element[T] = Element()
        self._root._next = self._root
        self._root._prev = self._root
        self._len = 0
        for value in values:
            self.push_back(value)

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> Iterator[T]:
        element = self.front()
        while element is not None:
            following = element.next()
            yield element.value
            element = following

    def __repr__(self) -> str:
        return f"LinkedList({self.to_list()!r})"

    def clear(self) -> None:
        """Remove every element."""
        element = self._root._next
        while element is not None and element is not self._root:
            following = element._next
            element._next = element._prev = None
            element._list = None
            element = following
        self._root._next = self._root
        self._root._prev = self._root
        self._len = 0

    def is_empty(self) -> bool:
        return self._len == 0

    def front(self) -> Optional[Element[T]]:
        """The first element, or ``None`` if the list is empty."""
        return self._root._next if self._len else None

    def back(self) -> Optional[Element[T]]:
        """The last element, or ``None`` if the list is empty."""
        return self._root._prev if self._len else None

    def _insert(self, element: Element[T], at: Element[T]) -> Element[T]:
        element._prev = at
        element._next = at._next
        element._prev._next = element
        element._next._prev = element
        element._list = self
        self._len += 1
        return element

    def _insert_value(self, value: T, at: Element[T]) -> Element[T]:
        return self._insert(Element(value), at)

    def _remove(self, element: Element[T]) -> None:
        element._prev._next = element._next
        element._next._prev = element._prev
        element._next = None
        element._prev = None
        element._list = None
        self._len -= 1

    def _move(self, element: Element[T], at: Element[T]) -> None:
        if element is at:
            return
        element._prev._next = element._next
        element._next._prev = element._prev
        element._prev = at
        element._next = at._next
        element._prev._next = element
        element._next._prev = element

    def remove(self, element: Element[T]) -> T:
        """Remove ``element`` if it belongs to this list; return its value."""
        if element._list is self:
            self._remove(element)
        return element.value

    def push_front(self, value: T) -> Element[T]:
        return self._insert_value(value, self._root)

    def push_back(self, value: T) -> Element[T]:
        return self._insert_value(value, self._root._prev)

    def insert_before(self, value: T, mark: Element[T]) -> Optional[Element[T]]:
        """Insert ``value`` before ``mark``; ``None`` if ``mark`` is foreign."""
        if mark._list is not self:
            return None
        return self._insert_value(value, mark._prev)

    def insert_after(self, value: T, mark: Element[T]) -> Optional[Element[T]]:
        """Insert ``value`` after ``mark``; ``None`` if ``mark`` is foreign."""
        if mark._list is not self:
            return None
        return self._insert_value(value, mark)

    def move_to_front(self, element: Element[T]) -> None:
        if element._list is not self or self._root._next is element:
            return
        self._move(element, self._root)

    def move_to_back(self, element: Element[T]) -> None:
        if element._list is not self or self._root._prev is element:
            return
        self._move(element, self._root._prev)

    def move_before(self, element: Element[T], mark: Element[T]) -> None:
        if element._list is not self or element is mark or mark._list is not self:
            return
        self._move(element, mark._prev)

    def move_after(self, element: Element[T], mark: Element[T]) -> None:
        if element._list is not self or element is mark or mark._list is not self:
            return
        self._move(element, mark)

    def push_back_list(self, other: "LinkedList[T]") -> None:
        """Append a copy of ``other``'s values; ``other`` may be this list."""
        for value in other.to_list():
            self._insert_value(value, self._root._prev)

    def push_front_list(self, other: "LinkedList[T]") -> None:
        """Prepend a copy of ``other``'s values; ``other`` may be this list."""
        for value in reversed(other.to_list()):
            self._insert_value(value, self._root)

    def pop_back(self) -> T:
        """Remove and return the last value; ``IndexError`` if empty."""
        if not self._len:
            raise IndexError("pop from empty list")
        element = self._root._prev
        self._remove(element)
        return element.value

    def pop_front(self) -> T:
        """Remove and return the first value; ``IndexError`` if empty."""
        if not self._len:
            raise IndexError("pop from empty list")
        element = self._root._next
        self._remove(element)
        return element.value

    def to_list(self) -> List[T]:
        return [value for value in self]