"""Wire primitives: VarInt coding, packet framing and packet parsing."""

from __future__ import annotations

from dataclasses import dataclass

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_MAX_VARINT_BYTES = 5


class PacketError(ValueError):
    """Raised when bytes on the wire cannot be read as a packet."""


@dataclass(frozen=True)
class Packet:
    """A parsed packet: declared length, packet id and the remaining bytes."""

    length: int
    packet_id: int
    data: bytes


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def write_varint(value: int) -> bytes:
    """Encode a signed 32-bit integer as a VarInt."""
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"VarInt value out of 32-bit range: {value}")
    value &= 0xFFFFFFFF
    out = bytearray()
    while value & ~0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def read_varint(data: bytes) -> tuple[int, int]:
    """Read a VarInt leniently, returning (value, bytes consumed).

    Stops at the first byte without a continuation bit or at the end of
    the data; empty input gives (0, 0).
    """
    result = 0
    shift = 0
    consumed = 0
    for byte in data:
        result |= (byte & 0x7F) << shift
        consumed += 1
        if not byte & 0x80:
            break
        shift += 7
    return _to_int32(result), consumed


def read_varint_strict(data: bytes) -> tuple[int, int]:
    """Read a VarInt of at most five bytes, returning (value, bytes consumed)."""
    result = 0
    shift = 0
    for consumed, byte in enumerate(data, start=1):
        result |= (byte & 0x7F) << shift
        shift += 7
        if not byte & 0x80:
            return _to_int32(result), consumed
        if consumed >= _MAX_VARINT_BYTES:
            raise PacketError("VarInt too long (max 5 bytes)")
    raise PacketError("Incomplete VarInt")


def parse_packet(raw_data: bytes) -> tuple[Packet, int]:
    """Split raw bytes into a Packet and the offset where its data begins."""
    raw = bytes(raw_data)
    length, used = read_varint_strict(raw)
    cursor = used
    packet_id, used = read_varint_strict(raw[cursor:])
    cursor += used
    return Packet(length=length, packet_id=packet_id, data=raw[cursor:]), cursor


def frame(payload: bytes) -> bytes:
    """Prefix a payload with its length as a VarInt."""
    payload = bytes(payload)
    return write_varint(len(payload)) + payload