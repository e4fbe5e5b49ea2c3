"""Video Layer Allocation (VLA) RTP header extension."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

_MAX_STREAMS = 4
_MAX_SPATIAL = 4
_MAX_TEMPORAL = 4
_RESOLUTION_SIZE = 5
_LEB128_MAX_BYTES = 8
_UINT64_MASK = (1 << 64) - 1


class VLAError(ValueError):
    """Base class for VLA encoding and decoding errors."""


class VLATooShortError(VLAError):
    """The payload is too short."""

    def __init__(self, offset: int) -> None:
        super().__init__(f"VLA payload too short (offset={offset})")
        self.offset = offset


class VLAInvalidStreamCountError(VLAError):
    """The RTP stream count is invalid."""


class VLAInvalidStreamIDError(VLAError):
    """An RTP stream ID is invalid."""


class VLAInvalidSpatialIDError(VLAError):
    """A spatial ID is invalid."""


class VLADuplicateSpatialIDError(VLAError):
    """A spatial layer appears more than once."""


class VLAInvalidTemporalLayerError(VLAError):
    """A spatial layer has an invalid number of temporal layers."""


@dataclass
class SpatialLayer:
    """A spatial layer in a VLA.

    Width, height and framerate are meaningful only when the owning VLA
    has resolution and framerate.
    """

    rtp_stream_id: int = 0
    spatial_id: int = 0
    target_bitrates: list[int] | None = None
    width: int = 0
    height: int = 0
    framerate: int = 0


def _encode_leb128(value: int) -> bytes:
    value &= _UINT64_MASK
    out = bytearray()
    while True:
        low = value & 0x7F
        value >>= 7
        if value:
            out.append(low | 0x80)
        else:
            out.append(low)
            return bytes(out)


def _read_leb128(payload: bytes, offset: int) -> tuple[int, int]:
    """Return the decoded value and the number of bytes it took."""
    value = 0
    for index, byte in enumerate(payload[offset:offset + _LEB128_MAX_BYTES]):
        value |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            return value, index + 1
    raise VLATooShortError(offset)


def _common_bitmask(bitmasks: list[int]) -> int:
    common = 0
    for bitmask in bitmasks:
        if bitmask == 0:
            continue
        if common == 0:
            common = bitmask
        elif bitmask != common:
            return 0
    return common


@dataclass
class VLA:
    """A Video Layer Allocation extension."""

    rtp_stream_id: int = 0
    rtp_stream_count: int = 0
    active_spatial_layers: list[SpatialLayer] = field(default_factory=list)
    has_resolution_and_framerate: bool = False

    def _index_layers(self) -> tuple[list[int], dict[tuple[int, int], SpatialLayer]]:
        if not 0 < self.rtp_stream_count <= _MAX_STREAMS:
            raise VLAInvalidStreamCountError("invalid RTP stream count in VLA")
        if not 0 <= self.rtp_stream_id < self.rtp_stream_count:
            raise VLAInvalidStreamIDError("invalid RTP stream ID in VLA")

        bitmasks = [0] * _MAX_STREAMS
        grid: dict[tuple[int, int], SpatialLayer] = {}
        for layer in self.active_spatial_layers:
            if not 0 <= layer.rtp_stream_id < self.rtp_stream_count:
                raise VLAInvalidStreamIDError(
                    f"invalid RTP stream ID {layer.rtp_stream_id} in VLA"
                )
            if not 0 <= layer.spatial_id < _MAX_SPATIAL:
                raise VLAInvalidSpatialIDError(
                    f"invalid spatial ID {layer.spatial_id} in VLA"
                )
            temporal_count = len(layer.target_bitrates or ())
            if not 0 < temporal_count <= _MAX_TEMPORAL:
                raise VLAInvalidTemporalLayerError(
                    f"invalid temporal layer count {temporal_count} in VLA"
                )
            bitmasks[layer.rtp_stream_id] |= 1 << layer.spatial_id
            key = (layer.rtp_stream_id, layer.spatial_id)
            if key in grid:
                raise VLADuplicateSpatialIDError("duplicate spatial ID in VLA")
            grid[key] = layer
        return bitmasks, grid

    def marshal(self) -> bytes:
        """Encode this VLA into bytes."""
        bitmasks, grid = self._index_layers()
        common = _common_bitmask(bitmasks)
        count = self.rtp_stream_count
        ordered = [
            grid[(stream, spatial)]
            for stream in range(count)
            for spatial in range(_MAX_SPATIAL)
            if (stream, spatial) in grid
        ]

        out = bytearray([(self.rtp_stream_id << 6) | ((count - 1) << 4) | common])
        header_len = 1
        if common == 0:
            header_len = 3
            for stream in range(0, count, 2):
                high = bitmasks[stream] << 4
                low = bitmasks[stream + 1] if stream + 1 < count else 0
                out.append(high | low)

        chunks = [ordered[start:start + 4] for start in range(0, len(ordered), 4)] or [[]]
        for chunk in chunks:
            packed = 0
            for position, layer in enumerate(chunk):
                packed |= (len(layer.target_bitrates) - 1) << (2 * (3 - position))
            out.append(packed)

        bitrates = b"".join(
            _encode_leb128(kbps) for layer in ordered for kbps in layer.target_bitrates
        )
        out += bitrates

        if self.has_resolution_and_framerate:
            for layer in self.active_spatial_layers:
                out += struct.pack(
                    ">HHB",
                    (layer.width - 1) & 0xFFFF,
                    (layer.height - 1) & 0xFFFF,
                    layer.framerate & 0xFF,
                )

        required = header_len + len(chunks) + len(bitrates)
        if self.has_resolution_and_framerate:
            required += _RESOLUTION_SIZE * len(self.active_spatial_layers)
        return bytes(out.ljust(required, b"\x00"))

    @classmethod
    def unmarshal(cls, payload: bytes) -> tuple[VLA, int]:
        """Decode a VLA from bytes; return it with the number of bytes read."""
        payload = bytes(payload)
        vla = cls()

        if len(payload) < 1:
            raise VLATooShortError(0)
        first = payload[0]
        vla.rtp_stream_id = (first >> 6) & 0b11
        vla.rtp_stream_count = ((first >> 4) & 0b11) + 1
        count = vla.rtp_stream_count
        shared_bitmask = first & 0b1111
        offset = 1

        if shared_bitmask:
            bitmasks = [shared_bitmask] * count
        else:
            needed = (count - 1) // 2 + 1
            if len(payload) - offset < needed:
                raise VLATooShortError(offset)
            bitmasks = [
                (payload[offset + stream // 2] >> (0 if stream % 2 else 4)) & 0b1111
                for stream in range(count)
            ]
            offset += needed

        if len(payload) - offset < 1:
            raise VLATooShortError(offset)
        position = 0
        for stream, bitmask in enumerate(bitmasks):
            for spatial in range(_MAX_SPATIAL):
                if not bitmask & (1 << spatial):
                    continue
                if position >= 4:
                    position = 0
                    offset += 1
                    if len(payload) - offset < 1:
                        raise VLATooShortError(offset)
                temporal_count = ((payload[offset] >> (2 * (3 - position))) & 0b11) + 1
                position += 1
                vla.active_spatial_layers.append(
                    SpatialLayer(
                        rtp_stream_id=stream,
                        spatial_id=spatial,
                        target_bitrates=[0] * temporal_count,
                    )
                )
        offset += 1

        for layer in vla.active_spatial_layers:
            decoded = []
            for _ in layer.target_bitrates:
                kbps, size = _read_leb128(payload, offset)
                decoded.append(kbps)
                offset += size
            layer.target_bitrates = decoded

        if offset == len(payload):
            return vla, offset

        if len(payload) - offset < _RESOLUTION_SIZE * len(vla.active_spatial_layers):
            raise VLATooShortError(offset)
        vla.has_resolution_and_framerate = True
        for layer in vla.active_spatial_layers:
            width, height, framerate = struct.unpack_from(">HHB", payload, offset)
            layer.width = width + 1
            layer.height = height + 1
            layer.framerate = framerate
            offset += _RESOLUTION_SIZE
        return vla, offset

    def __str__(self) -> str:
        parts = []
        for layer in self.active_spatial_layers:
            bitrates = " ".join(str(kbps) for kbps in layer.target_bitrates or ())
            text = f"RTPStreamID:{layer.rtp_stream_id},TargetBitrates:[{bitrates}]"
            if self.has_resolution_and_framerate:
                text += f",Resolution:({layer.width},{layer.height})"
                text += f",Framerate:{layer.framerate}"
            parts.append(text)
        return (
            f"RID:{self.rtp_stream_id},RTPStreamCount:{self.rtp_stream_count}"
            f",ActiveSpatialLayers:{{{','.join(parts)}}}"
        )