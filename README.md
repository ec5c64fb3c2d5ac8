# singlib

Small building blocks for network software:

- `singlib.socks.socks4`, `singlib.socks.socks5`: SOCKS4/4a and SOCKS5 message
  codecs over any binary stream, and the `Socksaddr` address type.
- `singlib.socks.handshake`: client-side SOCKS4 and SOCKS5 handshakes and
  protocol version names.
- `singlib.ntp`: an SNTP packet codec, timestamp conversion, response
  validation and a one-shot UDP query (`exchange`).
- `singlib.ranges`: inclusive integer ranges with merge, complement and exclusion.
- `singlib.linkedlist`, `singlib.linkedhashmap`: a doubly linked list with
  element handles and an insertion-ordered hash map.
- `singlib.rw`: exact reads, zero padding, unsigned varints, length-prefixed
  strings, file and JSON helpers, a counting reader, half-close helpers.
- `singlib.task`: an asyncio task group with fast-fail and cleanup.
- `singlib.observable`: a bounded, thread-based publish/subscribe fan-out.
- `singlib.replay`: a time-windowed replay filter.
- `singlib.rng`: 64-bit integers drawn from a byte stream or `os.urandom`.
- `singlib.shell`: a chained wrapper for running external commands.
- `singlib.network`: network name normalisation, unwrapping of wrapper
  chains, headroom and MTU calculation, local interface addresses.
- `singlib.common`: substring helpers and upstream-aware `cast`.

Python 3.10 or later is required. The only runtime dependency is `psutil`,
used by `singlib.network.local_addrs` to list interface addresses.

## Ranges

Ranges are inclusive on both ends.

```python
from singlib.ranges import Range, merge, revert, exclude

merge([Range(1, 3), Range(2, 6), Range(8, 10), Range(15, 18)])
# [Range(start=1, end=6), Range(start=8, end=10), Range(start=15, end=18)]

revert(0, 10, [Range(2, 4), Range(6, 8)])
# [Range(start=0, end=1), Range(start=5, end=5), Range(start=9, end=10)]

exclude([Range(0, 100)], [Range(0, 10), Range(20, 30), Range(55, 55)])
# [Range(start=11, end=19), Range(start=31, end=54), Range(start=56, end=100)]

Range.single(7)   # Range(start=7, end=7)
```

`revert` of an empty list of ranges returns an empty list.

## Ordered containers

```python
from singlib.linkedlist import LinkedList
from singlib.linkedhashmap import LinkedHashMap

items = LinkedList()
first = items.push_back("a")
items.push_back("c")
items.insert_after("b", first)
items.to_list()          # ['a', 'b', 'c']
items.pop_front()        # 'a'  (IndexError on an empty list)

table = LinkedHashMap()
table.put("one", 1)
table.put("two", 2)
table.put("one", 10)     # returns 1 and keeps the key's position
table.keys()             # ['one', 'two']
table.values()           # [10, 2]
"two" in table           # True
table.remove("two")      # True
```

## Stream helpers

Readers and writers are binary file-like objects.

```python
import io
from singlib import rw

out = io.BytesIO()
rw.write_vstring(out, "hello")
rw.write_zero_n(out, 3)

data = io.BytesIO(out.getvalue())
rw.read_vstring(data)    # 'hello'
rw.read_bytes(data, 3)   # b'\x00\x00\x00'

rw.uvarint_len(300)      # 2
```

Short reads raise `EOFError`. `write_json` writes compact JSON with `<`, `>`
and `&` escaped; `write_file` and `copy_file` create missing parent directories.

## SOCKS

```python
import io
from singlib.socks import socks5
from singlib.socks.socks4 import Socksaddr

buffer = io.BytesIO()
socks5.write_request(
    buffer,
    socks5.Request(socks5.COMMAND_CONNECT, Socksaddr.from_host_port("example.com", 443)),
)
buffer.seek(0)
socks5.read_request(buffer).destination.fqdn   # 'example.com'
```

Malformed messages or wrong version bytes raise `SocksProtocolError`.

`client_handshake4(conn, command, destination, username)` and
`client_handshake5(conn, command, destination, username, password)` drive a
client handshake over a connected stream (for a socket, `sock.makefile("rwb")`
with writes flushed) and raise `HandshakeError` when the server refuses.
`parse_version` turns `"4"`, `"4a"` or `"5"` into a `Version`.

## NTP

```python
from singlib.ntp import exchange, NtpError

response = exchange("ntp.example.com", 123, 5.0)
try:
    response.validate()
except NtpError as error:
    print("unusable response:", error)
else:
    print("clock offset (ns):", response.clock_offset)
```

All durations in a `Response` are integer nanoseconds.

## Task groups

`TaskGroup.run` is a coroutine. Tasks take no arguments; coroutine functions
are awaited and plain functions run in worker threads.

```python
import asyncio
from singlib.task import TaskGroup, TaskGroupError

async def fetch():
    ...

def store():
    ...

async def main():
    group = TaskGroup()
    group.append("fetch", fetch)
    group.append("store", store)
    group.fast_fail()
    try:
        await group.run()
    except TaskGroupError as error:
        print(error)   # each failure prefixed with its task's name

asyncio.run(main())
```

With `fast_fail()` the first failure cancels the remaining tasks. `run_all`
and `run_any` are shortcuts for unnamed tasks without and with fast-fail.

## What is not included

The package provides codecs and client handshakes only. It has no SOCKS or
HTTP proxy server, no connection dialers, no UDP association or
UDP-over-TCP transport, and no command-line program.

## Running the tests

Install the `test` extra and run `pytest` from the project root.