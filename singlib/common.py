"""String helpers and upstream-aware casting."""

from __future__ import annotations

from typing import Any, Optional, Protocol, Type, TypeVar, runtime_checkable

T = TypeVar("T")

__all__ = [
    "WithUpstream",
    "substring_after",
    "substring_after_last",
    "substring_before",
    "substring_before_last",
    "substring_between",
    "cast",
    "must_cast",
]


@runtime_checkable
class WithUpstream(Protocol):
    """An object that wraps another one and exposes it."""

    def upstream(self) -> Any: ...


def substring_after(s: str, substr: str) -> str:
    """Return the part of ``s`` after the first ``substr``, or ``s`` if absent."""
    index = s.find(substr)
    if index == -1:
        return s
    return s[index + len(substr):]


def substring_after_last(s: str, substr: str) -> str:
    """Return the part of ``s`` after the last ``substr``, or ``s`` if absent."""
    index = s.rfind(substr)
    if index == -1:
        return s
    return s[index + len(substr):]


def substring_before(s: str, substr: str) -> str:
    """Return the part of ``s`` before the first ``substr``, or ``s`` if absent."""
    index = s.find(substr)
    if index == -1:
        return s
    return s[:index]


def substring_before_last(s: str, substr: str) -> str:
    """Return the part of ``s`` before the last ``substr``, or ``s`` if absent."""
    index = s.rfind(substr)
    if index == -1:
        return s
    return s[:index]


def substring_between(s: str, after: str, before: str) -> str:
    """Return the text following ``after`` and preceding ``before``."""
    return substring_before(substring_after(s, after), before)


def cast(obj: Any, cls: Type[T]) -> Optional[T]:
    """Find the first object of type ``cls`` along the upstream chain of ``obj``.

    Returns ``None`` when no object in the chain matches.
    """
    current = obj
    while True:
        if isinstance(current, cls):
            return current
        if isinstance(current, WithUpstream):
            current = current.upstream()
            continue
        return None


def must_cast(obj: Any, cls: Type[T]) -> T:
    """Like :func:`cast`, but raise ``TypeError`` when nothing matches."""
    value = cast(obj, cls)
    if value is None:
        raise TypeError(f"{type(obj).__name__} cannot be cast to {cls.__name__}")
    return value