import asyncio
import json

import pytest

from oxidemc.protocol import PacketError, frame, parse_packet, read_varint, write_varint
from oxidemc.server import (
    JOIN_GAME_PACKET,
    SPAWN_POSITION_PACKET,
    handle_connection,
    handle_login,
    handle_play_state,
    handle_status,
    login_success_packet,
    main,
    parse_handshake_next_state,
    parse_login_start,
    pong_packet,
    status_response_packet,
)

UUID = bytes(range(0x10, 0x20))


class ChunkReader:
    def __init__(self, *chunks):
        self._chunks = list(chunks)

    async def read(self, n):
        if not self._chunks:
            return b""
        return self._chunks.pop(0)[:n]


class RecordingWriter:
    def __init__(self):
        self.data = bytearray()
        self.closed = False

    def write(self, data):
        self.data.extend(data)

    async def drain(self):
        pass

    def close(self):
        self.closed = True

    def get_extra_info(self, name):
        return ("127.0.0.1", 40000)


def handshake(next_state, packet_id=0):
    host = b"localhost"
    body = (
        write_varint(packet_id)
        + write_varint(770)
        + bytes([len(host)])
        + host
        + (25565).to_bytes(2, "big")
        + write_varint(next_state)
    )
    return frame(body)


def login_start(name, packet_id=0):
    raw = name.encode("utf-8")
    return frame(write_varint(packet_id) + write_varint(len(raw)) + raw + UUID)


PING = frame(write_varint(1) + (1234567).to_bytes(8, "big"))


def test_status_response_json():
    packet, _ = parse_packet(status_response_packet())
    assert packet.packet_id == 0
    size, used = read_varint(packet.data)
    body = packet.data[used:]
    assert len(body) == size
    status = json.loads(body)
    assert status["version"] == {"name": "1.21", "protocol": 770}
    assert status["players"]["max"] == 100
    assert status["description"]["text"] == "Hello from OxideMC"


def test_status_response_length_prefix_matches():
    raw = status_response_packet()
    length, used = read_varint(raw)
    assert length == len(raw) - used


def test_pong_echoes_last_eight_bytes():
    pong = pong_packet(PING)
    packet, _ = parse_packet(pong)
    assert packet.packet_id == 1
    assert packet.data == PING[-8:]
    assert packet.length == len(pong) - 1


def test_pong_short_ping_echoes_everything():
    packet, _ = parse_packet(pong_packet(b"\x01\x02\x03"))
    assert packet.data == b"\x01\x02\x03"


def test_login_success_layout():
    packet, _ = parse_packet(login_success_packet(UUID, "Steve"))
    assert packet.packet_id == 2
    assert packet.data[:16] == UUID
    name_len, used = read_varint(packet.data[16:])
    name = packet.data[16 + used : 16 + used + name_len]
    assert name == b"Steve"
    assert packet.data[16 + used + name_len :] == write_varint(0)


def test_login_success_counts_utf8_bytes():
    packet, _ = parse_packet(login_success_packet(UUID, "Jörg"))
    name_len, used = read_varint(packet.data[16:])
    assert name_len == len("Jörg".encode("utf-8"))


@pytest.mark.parametrize("state", [1, 2, 3])
def test_handshake_next_state(state):
    assert parse_handshake_next_state(handshake(state)) == state


def test_handshake_other_packet_id():
    assert parse_handshake_next_state(handshake(1, packet_id=5)) is None


def test_handshake_truncated_reads_zero():
    full = handshake(1)
    assert parse_handshake_next_state(full[:-1]) == 0


def test_login_start_username_and_uuid():
    username, uuid_bytes = parse_login_start(login_start("Steve"))
    assert username == "Steve"
    assert len(uuid_bytes) == 16
    assert uuid_bytes == (b"Steve" + UUID)[:16]


def test_login_start_short_data_padded():
    data = frame(write_varint(0) + write_varint(2) + b"Al")
    username, uuid_bytes = parse_login_start(data)
    assert username == "Al"
    assert uuid_bytes == b"Al".ljust(16, b"\x00")


def test_login_start_wrong_packet_id():
    with pytest.raises(PacketError):
        parse_login_start(login_start("Steve", packet_id=3))


def test_spawn_position_packet_layout():
    packet_id, used = read_varint(SPAWN_POSITION_PACKET)
    assert packet_id == 0x4E
    assert SPAWN_POSITION_PACKET[used:] == bytes(24)


@pytest.mark.asyncio
async def test_handle_connection_status_flow():
    reader = ChunkReader(handshake(1), frame(write_varint(0)), PING)
    writer = RecordingWriter()
    await handle_connection(reader, writer)
    assert bytes(writer.data) == status_response_packet() + pong_packet(PING)


@pytest.mark.asyncio
async def test_handle_status_stops_without_ping():
    writer = RecordingWriter()
    await handle_status(ChunkReader(frame(write_varint(0))), writer)
    assert bytes(writer.data) == status_response_packet()


@pytest.mark.asyncio
async def test_handle_status_no_request_writes_nothing():
    writer = RecordingWriter()
    await handle_status(ChunkReader(), writer)
    assert writer.data == bytearray()


@pytest.mark.asyncio
async def test_handle_connection_unknown_state_writes_nothing():
    writer = RecordingWriter()
    await handle_connection(ChunkReader(handshake(7), PING), writer)
    assert writer.data == bytearray()


@pytest.mark.asyncio
async def test_handle_connection_empty_writes_nothing():
    writer = RecordingWriter()
    await handle_connection(ChunkReader(), writer)
    assert writer.data == bytearray()


@pytest.mark.asyncio
async def test_handle_connection_login_flow_keeps_open():
    writer = RecordingWriter()
    reader = ChunkReader(handshake(2), login_start("Steve"))
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(handle_connection(reader, writer), timeout=0.05)
    _, uuid_bytes = parse_login_start(login_start("Steve"))
    expected = login_success_packet(uuid_bytes, "Steve") + JOIN_GAME_PACKET + SPAWN_POSITION_PACKET
    assert bytes(writer.data) == expected


@pytest.mark.asyncio
async def test_handle_login_rejects_wrong_packet():
    writer = RecordingWriter()
    with pytest.raises(PacketError):
        await handle_login(ChunkReader(login_start("Steve", packet_id=1)), writer)
    assert writer.data == bytearray()


@pytest.mark.asyncio
async def test_handle_play_state_sends_join_then_spawn():
    writer = RecordingWriter()
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(handle_play_state(ChunkReader(), writer), timeout=0.05)
    assert bytes(writer.data) == JOIN_GAME_PACKET + SPAWN_POSITION_PACKET
    assert writer.data[0] == 0x26


def test_main_rejects_bad_port():
    with pytest.raises(SystemExit) as excinfo:
        main(["--port", "notanumber"])
    assert excinfo.value.code == 2