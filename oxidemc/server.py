"""A minimal game server answering status pings and logins, with its proxy alongside."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from oxidemc.protocol import PacketError, frame, read_varint, write_varint
from oxidemc.proxy import start_server as start_proxy

_BUFFER_SIZE = 1024
_UUID_SIZE = 16
_PING_PAYLOAD_SIZE = 8

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 25565
DEFAULT_PROXY_PORT = 8080

STATUS_RESPONSE = {
    "version": {"name": "1.21", "protocol": 770},
    "players": {"max": 100, "online": 0},
    "description": {"text": "Hello from OxideMC"},
}

JOIN_GAME_PACKET = bytes(
    [
        0x26,  # packet id
        0x01,  # player entity id
        0x00,  # hardcore flag
        0x01,  # gamemode
        0x01,  # previous gamemode
        0x01,  # world count
        0x00,  # world names
    ]
)

SPAWN_POSITION_PACKET = write_varint(0x4E) + (0).to_bytes(8, "big", signed=True) * 3


def status_response_packet() -> bytes:
    """Build the framed status response carrying the server description JSON."""
    body = json.dumps(STATUS_RESPONSE).encode("utf-8")
    return frame(write_varint(0x00) + write_varint(len(body)) + body)


def pong_packet(ping_data: bytes) -> bytes:
    """Build the framed pong echoing the last eight bytes of a ping."""
    payload = bytes(ping_data)[-_PING_PAYLOAD_SIZE:]
    return frame(write_varint(0x01) + payload)


def login_success_packet(uuid_bytes: bytes, username: str) -> bytes:
    """Build the framed Login Success packet with no properties."""
    name = username.encode("utf-8")
    return frame(
        write_varint(0x02)
        + bytes(uuid_bytes)
        + write_varint(len(name))
        + name
        + write_varint(0)
    )


def parse_handshake_next_state(data: bytes) -> int | None:
    """Return the requested next state of a handshake, or None for another packet.

    Bytes missing from the end of the data are read as zero.
    """
    data = bytes(data)
    _, cursor = read_varint(data)
    packet_id, used = read_varint(data[cursor:])
    cursor += used
    if packet_id != 0x00:
        return None
    _, used = read_varint(data[cursor:])
    cursor += used
    address_length = data[cursor] if cursor < len(data) else 0
    cursor += 1 + address_length
    cursor += 2  # port
    next_state, _ = read_varint(data[cursor:])
    return next_state


def parse_login_start(data: bytes) -> tuple[str, bytes]:
    """Read a Login Start packet, returning (username, uuid bytes).

    The sixteen identifier bytes are taken from where the username begins,
    padded with zeros when the data runs short.
    """
    data = bytes(data)
    _, cursor = read_varint(data)
    packet_id, used = read_varint(data[cursor:])
    cursor += used
    if packet_id != 0x00:
        raise PacketError("Expected Login Start packet")
    name_length, used = read_varint(data[cursor:])
    cursor += used
    if name_length < 0:
        raise PacketError(f"Invalid username length: {name_length}")
    username = data[cursor : cursor + name_length].decode("utf-8", errors="replace")
    uuid_bytes = data[cursor : cursor + _UUID_SIZE].ljust(_UUID_SIZE, b"\x00")
    return username, uuid_bytes


async def handle_connection(
    reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    """Read a handshake and continue with the status or login exchange."""
    data = await reader.read(_BUFFER_SIZE)
    if not data:
        return
    next_state = parse_handshake_next_state(data)
    if next_state == 1:
        await handle_status(reader, writer)
    elif next_state == 2:
        await handle_login(reader, writer)


async def handle_status(
    reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    """Answer a status request and then the ping that follows it."""
    if not await reader.read(_BUFFER_SIZE):
        return
    writer.write(status_response_packet())
    await writer.drain()

    ping = await reader.read(_BUFFER_SIZE)
    if not ping:
        return
    writer.write(pong_packet(ping))
    await writer.drain()


async def handle_login(
    reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    """Accept a login, send Login Success and enter the play state."""
    data = await reader.read(_BUFFER_SIZE)
    if not data:
        return
    username, uuid_bytes = parse_login_start(data)
    print(f"UUID: {uuid_bytes.hex()}")
    writer.write(login_success_packet(uuid_bytes, username))
    await writer.drain()
    await handle_play_state(reader, writer)


async def handle_play_state(
    reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    """Send the join and spawn packets, then keep the connection open."""
    writer.write(JOIN_GAME_PACKET)
    await writer.drain()
    writer.write(SPAWN_POSITION_PACKET)
    await writer.drain()
    while True:
        await asyncio.sleep(1)


async def _serve_client(
    reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    print(f"Client connected from: {writer.get_extra_info('peername')}")
    try:
        await handle_connection(reader, writer)
    except (PacketError, OSError) as exc:
        print(f"Connection error: {exc}", file=sys.stderr)
    finally:
        try:
            writer.close()
        except OSError:
            pass


async def run(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    proxy_port: int = DEFAULT_PROXY_PORT,
) -> None:
    """Serve game clients forever, with the logging proxy running beside them."""
    server = await asyncio.start_server(_serve_client, host, port)
    print(f"Listening on {host}:{port}")
    proxy_task = asyncio.create_task(start_proxy(host, proxy_port, host, port))
    try:
        async with server:
            await server.serve_forever()
    finally:
        proxy_task.cancel()
        await asyncio.gather(proxy_task, return_exceptions=True)


def main(argv: list[str] | None = None) -> int:
    """Parse command-line options and run the server until interrupted."""
    parser = argparse.ArgumentParser(prog="oxidemc", description=__doc__)
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--proxy-port", type=int, default=DEFAULT_PROXY_PORT)
    args = parser.parse_args(argv)
    try:
        asyncio.run(run(args.host, args.port, args.proxy_port))
    except KeyboardInterrupt:
        pass
    return 0