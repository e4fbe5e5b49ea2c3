"""Encoding and decoding of the RTP Video Layers Allocation header extension."""

__version__ = "0.1.0"
__all__ = ["vla"]