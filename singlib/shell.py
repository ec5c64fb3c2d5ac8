"""Run external commands with chained configuration."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from typing import Any, Iterable, List, Optional

__all__ = ["ShellError", "Shell", "exec_command"]


class ShellError(Exception):
    """A command could not be started or finished unsuccessfully."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


def _resolve(name: str) -> str:
    if os.sep in name or (os.altsep and os.altsep in name):
        return name
    return shutil.which(name) or name


class Shell:
    """A configured command; standard streams default to the null device."""

    def __init__(self, name: str, args: Iterable[str] = ()) -> None:
        self.args: List[str] = [name, *args]
        self.path = _resolve(name)
        self.dir: Optional[str] = None
        self.env = dict(os.environ)
        self.stdin: Any = None
        self.stdout: Any = None
        self.stderr: Any = None
        self._process: Optional[subprocess.Popen] = None

    def set_dir(self, path: "os.PathLike[str] | str") -> "Shell":
        self.dir = os.fspath(path)
        return self

    def attach(self) -> "Shell":
        """Connect stdin to ours and both outputs to our stderr."""
        self.stdin = sys.stdin
        self.stdout = sys.stderr
        self.stderr = sys.stderr
        return self

    def set_env(self, env: Iterable[str]) -> "Shell":
        """Use our environment plus ``KEY=VALUE`` entries from ``env``."""
        merged = dict(os.environ)
        for entry in env:
            key, _, value = entry.partition("=")
            merged[key] = value
        self.env = merged
        return self

    def _error(self, cause: str, output: str = "") -> ShellError:
        return ShellError(f"execute ({self.path}) {' '.join(self.args)}: {cause}", output)

    @staticmethod
    def _stream(stream: Any) -> Any:
        return subprocess.DEVNULL if stream is None else stream

    def _popen(self, stdout: Any, stderr: Any) -> subprocess.Popen:
        if self._process is not None:
            raise self._error("already started")
        try:
            self._process = subprocess.Popen(
                self.args,
                executable=self.path,
                cwd=self.dir,
                env=self.env,
                stdin=self._stream(self.stdin),
                stdout=stdout,
                stderr=stderr,
            )
        except OSError as exc:
            raise self._error(str(exc)) from exc
        return self._process

    def _check(self, returncode: int, output: str = "") -> None:
        if returncode > 0:
            raise self._error(f"exit status {returncode}", output)
        if returncode < 0:
            raise self._error(f"signal: {-returncode}", output)

    def start(self) -> None:
        self._popen(self._stream(self.stdout), self._stream(self.stderr))

    def wait(self) -> None:
        if self._process is None:
            raise self._error("not started")
        self._check(self._process.wait())

    def run(self) -> None:
        self.start()
        self.wait()

    def read(self) -> str:
        """Run and return stdout and stderr combined."""
        process = self._popen(subprocess.PIPE, subprocess.STDOUT)
        output, _ = process.communicate()
        text = output.decode("utf-8", errors="replace")
        self._check(process.returncode, text)
        return text

    def read_output(self) -> str:
        """Run and return stdout with surrounding whitespace removed."""
        process = self._popen(subprocess.PIPE, self._stream(self.stderr))
        output, _ = process.communicate()
        text = output.decode("utf-8", errors="replace").strip()
        self._check(process.returncode, text)
        return text


def exec_command(name: str, *args: str) -> Shell:
    return Shell(name, args)