# oxidemc

A small Minecraft (Java Edition) protocol toy server with a logging proxy
beside it. Both are built on `asyncio` and need no third-party packages.

## What it does

- **Server** (`oxidemc.server`, default `127.0.0.1:25565`): it reads the
  handshake and then either
  - answers the status request with a JSON description (version "1.21",
    protocol 770, 0 of 100 players, text "Hello from OxideMC") and echoes the
    last eight bytes of the following ping back as the pong, or
  - reads Login Start, prints the identifier bytes in hex, replies with Login
    Success, sends a simplified join packet and a spawn position packet, and
    then keeps the connection open.
- **Proxy** (`oxidemc.proxy`, default `127.0.0.1:8080`): it forwards each
  client to the server and relays traffic both ways. Every chunk read is
  parsed as a packet and printed before it is forwarded: client-to-server
  chunks as the packet id, length and each data byte on its own line,
  server-to-client chunks as the `Packet` value. A chunk that cannot be
  parsed, a read or write error, or either side closing ends the connection.

## Installation

```
pip install .
```

## Running

```
oxidemc
```

This starts the server and the proxy together and runs until interrupted.
Options:

- `--host` — address both listen on (default `127.0.0.1`); the proxy
  connects to the server on this address too.
- `--port` — server port (default `25565`).
- `--proxy-port` — proxy port (default `8080`).

To watch packets go by, point a Minecraft client at the proxy port.

## Using the protocol helpers

```python
from oxidemc.protocol import write_varint, read_varint, parse_packet, frame

assert write_varint(300) == b"\xac\x02"
value, size = read_varint(b"\xac\x02")        # (300, 2)

packet, offset = parse_packet(frame(b"\x00hello"))
print(packet.length, packet.packet_id, packet.data)   # 6 0 b'hello'
```

- `write_varint` accepts signed 32-bit values and raises `ValueError`
  outside that range.
- `read_varint` is lenient: it stops at the end of the data, and empty input
  gives `(0, 0)`.
- `read_varint_strict` and `parse_packet` raise `PacketError` (a
  `ValueError`) for an incomplete VarInt or one longer than five bytes.
- `frame` prefixes a payload with its length as a VarInt.

The server's packet builders and parsers (`status_response_packet`,
`pong_packet`, `login_success_packet`, `parse_handshake_next_state`,
`parse_login_start`) are usable on their own as well.

## What it does not do

The server stops after login: it sends no world, chunks, time or player
position, so a real client will not get into a playable game. It does no
encryption, compression or account authentication. Each read is treated as
one whole packet; the server and proxy do not reassemble packets split across
reads or separate several packets in one read.

## Development

```
pip install -e .[test]
pytest
```