"""Networking building blocks: SOCKS and SNTP codecs, containers, stream and task helpers."""

__version__ = "0.1.0"

__all__ = [
    "common",
    "linkedhashmap",
    "linkedlist",
    "network",
    "ntp",
    "observable",
    "ranges",
    "replay",
    "rng",
    "rw",
    "shell",
    "socks",
    "task",
]