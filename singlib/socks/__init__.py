"""SOCKS4/4a and SOCKS5 message codecs and client handshakes."""

__all__ = ["handshake", "socks4", "socks5"]