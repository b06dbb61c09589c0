"""A logging TCP proxy that relays packets between a client and a server."""

from __future__ import annotations

import asyncio
import sys
from typing import Callable

from oxidemc.protocol import Packet, PacketError, parse_packet

_BUFFER_SIZE = 1024

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_UPSTREAM_HOST = "127.0.0.1"
DEFAULT_UPSTREAM_PORT = 25565


def _log_client_packet(packet: Packet) -> None:
    print(
        f"[CLIENT->SERVER]: packet id: {packet.packet_id}, "
        f"packet length:{packet.length}, data:"
    )
    for byte in packet.data:
        print(byte)


def _log_server_packet(packet: Packet) -> None:
    print(f"[SERVER->CLIENT]: {packet!r}")


async def _relay(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    log: Callable[[Packet], None],
    source: str,
    target: str,
) -> None:
    """Forward chunks from reader to writer until EOF, an error or a bad packet."""
    while True:
        try:
            chunk = await reader.read(_BUFFER_SIZE)
        except OSError as exc:
            print(f"{source} read error: {exc}", file=sys.stderr)
            return
        if not chunk:
            return
        try:
            packet, _ = parse_packet(chunk)
        except PacketError as exc:
            print(f"Packet parse error: {exc}", file=sys.stderr)
            return
        log(packet)
        try:
            writer.write(chunk)
            await writer.drain()
        except OSError as exc:
            print(f"{target} write error: {exc}", file=sys.stderr)
            return


def _close(writer: asyncio.StreamWriter) -> None:
    try:
        writer.close()
    except OSError:
        pass


async def handle_client(
    client_reader: asyncio.StreamReader,
    client_writer: asyncio.StreamWriter,
    upstream_host: str = DEFAULT_UPSTREAM_HOST,
    upstream_port: int = DEFAULT_UPSTREAM_PORT,
) -> None:
    """Connect to the upstream server and relay traffic both ways, logging packets."""
    peer = client_writer.get_extra_info("peername")
    try:
        server_reader, server_writer = await asyncio.open_connection(
            upstream_host, upstream_port
        )
    except OSError as exc:
        print(f"Failed to connect to MC server: {exc}", file=sys.stderr)
        _close(client_writer)
        return

    tasks = [
        asyncio.create_task(
            _relay(client_reader, server_writer, _log_client_packet, "Client", "Server")
        ),
        asyncio.create_task(
            _relay(server_reader, client_writer, _log_server_packet, "Server", "Client")
        ),
    ]
    try:
        _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
    finally:
        for task in tasks:
            task.cancel()
        _close(server_writer)
        _close(client_writer)
    print(f"Connection with {peer} closed")


async def start_server(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    upstream_host: str = DEFAULT_UPSTREAM_HOST,
    upstream_port: int = DEFAULT_UPSTREAM_PORT,
) -> None:
    """Accept proxy clients forever, relaying each to the upstream server."""

    async def _on_connect(
        reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        print(f"New connection from: {writer.get_extra_info('peername')}")
        await handle_client(reader, writer, upstream_host, upstream_port)

    server = await asyncio.start_server(_on_connect, host, port)
    print(f"Proxy server listening on {host}:{port}")
    async with server:
        await server.serve_forever()