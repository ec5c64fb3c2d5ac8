"""Run groups of tasks concurrently and gather their failures."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

__all__ = ["TaskGroupError", "TaskGroup", "run_all", "run_any"]


class TaskGroupError(Exception):
    """One or more tasks of a group failed."""

    def __init__(self, failures: Sequence[Tuple[str, BaseException]]) -> None:
        self.failures: List[Tuple[str, BaseException]] = list(failures)
        super().__init__("; ".join(_describe(name, exc) for name, exc in self.failures))

    @property
    def errors(self) -> List[BaseException]:
        return [exc for _, exc in self.failures]


def _describe(name: str, exc: BaseException) -> str:
    return f"{name}: {exc}" if name else str(exc)


async def _invoke(func: Callable[[], Any]) -> None:
    if inspect.iscoroutinefunction(func):
        await func()
        return
    result = await asyncio.to_thread(func)
    if inspect.isawaitable(result):
        await result


@dataclass
class _TaskItem:
    name: str
    func: Callable[[], Any]


class TaskGroup:
    """Tasks run together; plain functions run in worker threads."""

    def __init__(self) -> None:
        self._tasks: List[_TaskItem] = []
        self._cleanup: Optional[Callable[[], Any]] = None
        self._fast_fail = False

    def append(self, name: str, func: Callable[[], Any]) -> None:
        self._tasks.append(_TaskItem(name, func))

    def append0(self, func: Callable[[], Any]) -> None:
        self._tasks.append(_TaskItem("", func))

    def cleanup(self, func: Callable[[], Any]) -> None:
        """Call ``func`` once the group finishes, fails fast or is cancelled."""
        self._cleanup = func

    def fast_fail(self) -> None:
        """Cancel the remaining tasks as soon as one fails."""
        self._fast_fail = True

    async def _run_cleanup(self) -> None:
        if self._cleanup is not None:
            result = self._cleanup()
            if inspect.isawaitable(result):
                await result

    async def run(self) -> None:
        """Run every task; raise ``TaskGroupError`` if any of them failed."""
        failures: List[Tuple[str, BaseException]] = []
        failed = asyncio.Event()

        async def run_item(item: _TaskItem) -> None:
            try:
                await _invoke(item.func)
            except Exception as exc:
                failures.append((item.name, exc))
                if self._fast_fail:
                    failed.set()

        tasks = [asyncio.ensure_future(run_item(item)) for item in self._tasks]
        if tasks:
            everything = asyncio.gather(*tasks, return_exceptions=True)
            fail_waiter = asyncio.ensure_future(failed.wait())
            try:
                await asyncio.wait({everything, fail_waiter}, return_when=asyncio.FIRST_COMPLETED)
            except asyncio.CancelledError:
                for task in tasks:
                    task.cancel()
                await self._run_cleanup()
                await asyncio.wait(tasks)
                raise
            finally:
                fail_waiter.cancel()
            if failed.is_set():
                for task in tasks:
                    task.cancel()
        await self._run_cleanup()
        if tasks:
            await asyncio.wait(tasks)
        if failures:
            raise TaskGroupError(failures)


async def run_all(*args: Callable[[], Any]) -> None:
    """Run every callable to completion and report all failures."""
    group = TaskGroup()
    for func in args:
        group.append0(func)
    await group.run()


async def run_any(*args: Callable[[], Any]) -> None:
    """Run the callables, cancelling the rest as soon as one fails."""
    group = TaskGroup()
    for func in args:
        group.append0(func)
    group.fast_fail()
    await group.run()