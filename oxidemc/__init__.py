"""A minimal Minecraft protocol server, logging proxy and VarInt packet helpers."""

__version__ = "0.1.0"
__all__ = ["protocol", "proxy", "server"]