# rtpvla

`rtpvla` reads and writes the RTP **Video Layers Allocation** (VLA) header extension. WebRTC senders use this extension to tell receivers which simulcast streams and spatial layers are active. For each active layer the extension carries the target bitrate of every temporal layer. It can also carry the resolution and framerate of each layer.

Everything lives in the `rtpvla.vla` module. The package has no runtime dependencies.

## Installation

```
pip install .
```

## Data model

`SpatialLayer` is a dataclass with the following fields:

- `rtp_stream_id`: the stream (0..3) that the layer belongs to.
- `spatial_id`: the spatial layer within the stream (0..3).
- `target_bitrates`: a list of 1 to 4 bitrates in kbps, one for each temporal layer.
- `width`, `height` and `framerate`: used only when the owning `VLA` has `has_resolution_and_framerate` set.

`VLA` is a dataclass with the following fields:

- `rtp_stream_id`: the stream this allocation is sent on.
- `rtp_stream_count`: the number of streams, 1..4.
- `active_spatial_layers`: a list of `SpatialLayer`.
- `has_resolution_and_framerate`: whether resolution and framerate are included.

## Encoding

```python
from rtpvla.vla import VLA, SpatialLayer

vla = VLA(
    rtp_stream_id=0,
    rtp_stream_count=3,
    active_spatial_layers=[
        SpatialLayer(rtp_stream_id=0, spatial_id=0, target_bitrates=[150]),
        SpatialLayer(rtp_stream_id=1, spatial_id=0, target_bitrates=[240, 400]),
        SpatialLayer(rtp_stream_id=2, spatial_id=0, target_bitrates=[720, 1200]),
    ],
)
payload = vla.marshal()
print(payload.hex())  # 21149601f0019003d005b009
```

How `marshal()` lays out the payload:

- Target bitrates are LEB128-encoded.
- Layers are written in stream order, and within each stream in spatial-ID order.
- When every stream that has active layers uses the same spatial-layer bitmask, that bitmask is packed into the first byte. Otherwise the payload carries one bitmask per stream.
- When `has_resolution_and_framerate` is set, each layer gets 5 bytes, written in the order of `active_spatial_layers`. Width and height are stored minus one as big-endian 16-bit values, and framerate as one byte.

## Decoding

`VLA.unmarshal` is a class method. It returns the decoded allocation together with the number of bytes it consumed:

```python
vla, consumed = VLA.unmarshal(bytes.fromhex("1110c801d005b009"))
print(vla)
# RID:0,RTPStreamCount:2,ActiveSpatialLayers:{RTPStreamID:0,TargetBitrates:[200],RTPStreamID:1,TargetBitrates:[720 1200]}
```

If any bytes remain after the bitrates, they are read as the resolution and framerate of each layer, and `has_resolution_and_framerate` is set on the result.

## Errors

Every error is a subclass of `VLAError`, which is itself a `ValueError`:

| Exception | Raised when |
|---|---|
| `VLATooShortError` | the payload ends before all fields are read (its `offset` attribute tells where) |
| `VLAInvalidStreamCountError` | the stream count is outside 1..4 |
| `VLAInvalidStreamIDError` | the allocation's or a layer's stream ID is outside the stream count |
| `VLAInvalidSpatialIDError` | a spatial ID is outside 0..3 |
| `VLADuplicateSpatialIDError` | the same stream and spatial ID appear twice |
| `VLAInvalidTemporalLayerError` | a layer has no bitrates, or more than four |

## Running the tests

```
pip install .[test]
pytest
```