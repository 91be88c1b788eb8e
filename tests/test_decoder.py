"""Tests for the Aseprite decoder."""
import struct

import numpy as np
import pytest

from asetiler.core.decoder import decode
from asetiler.core.errors import AsepriteError, MalformedDocument, NoFrames


class TestDecodeStructure:
    """Test decoding of well-formed documents."""

    def test_canvas_and_layers(self, two_layer_bytes):
        """Test header dimensions and layer names."""
        document = decode(two_layer_bytes)
        assert document.width == 8
        assert document.height == 6
        assert document.color_depth == 32
        assert [layer.name for layer in document.layers] == ['Background', 'Foreground']
        assert [layer.index for layer in document.layers] == [0, 1]
        assert all(layer.visible for layer in document.layers)

    def test_cel_geometry_and_pixels(self, two_layer_bytes, blue):
        """Test cel fields and RGBA payload."""
        document = decode(two_layer_bytes)
        assert len(document.frames) == 1
        cels = document.frames[0].cels
        assert len(cels) == 2

        top = cels[1]
        assert (top.layer_index, top.x, top.y, top.w, top.h) == (1, 2, 2, 4, 4)
        assert top.pixels.shape == (4, 4, 4)
        assert top.pixels.dtype == np.uint8
        assert (top.pixels == np.array(blue, dtype=np.uint8)).all()

    def test_frame_duration(self, ase):
        """Test frame duration is carried through."""
        data = ase.document(2, 2, [ase.frame([], duration=250)])
        assert decode(data).frames[0].duration == 250

    def test_negative_position(self, ase, red):
        """Test cel positions are signed."""
        data = ase.document(4, 4, [ase.frame([ase.cel(0, -3, -1, ase.solid(2, 2, red))])])
        cel = decode(data).frames[0].cels[0]
        assert (cel.x, cel.y) == (-3, -1)

    def test_pixels_are_row_major(self, ase):
        """Test pixel order follows rows of the cel extent."""
        pixels = np.arange(3 * 2 * 4, dtype=np.uint8).reshape(2, 3, 4)
        data = ase.document(3, 2, [ase.frame([ase.cel(0, 0, 0, pixels)])])
        decoded = decode(data).frames[0].cels[0].pixels
        np.testing.assert_array_equal(decoded, pixels)
        assert decoded[0, 1].tolist() == [4, 5, 6, 7]

    def test_empty_payload_is_empty_cel(self, ase):
        """Test a cel without pixel data decodes with pixels=None."""
        data = ase.document(4, 4, [ase.frame([ase.cel(0, 1, 1, size=(2, 2))])])
        cel = decode(data).frames[0].cels[0]
        assert cel.pixels is None
        assert cel.is_empty
        assert (cel.w, cel.h) == (2, 2)

    def test_hidden_layer_flag(self, ase):
        """Test layer flags expose visibility."""
        data = ase.document(2, 2, [ase.frame([ase.layer('Shown'), ase.layer('Guide', flags=0)])])
        layers = decode(data).layers
        assert layers[0].visible is True
        assert layers[1].visible is False

    def test_unknown_chunks_are_skipped(self, ase, red):
        """Test chunks other than layer/cel are ignored by size."""
        palette = ase.chunk(0x2019, b'\x00' * 20)
        data = ase.document(2, 2, [ase.frame([palette, ase.cel(0, 0, 0, ase.solid(2, 2, red))])])
        assert len(decode(data).frames[0].cels) == 1

    def test_multiple_frames(self, ase, red, blue):
        """Test every frame is decoded in order."""
        data = ase.document(2, 2, [
            ase.frame([ase.cel(0, 0, 0, ase.solid(1, 1, red))]),
            ase.frame([ase.cel(0, 1, 1, ase.solid(1, 1, blue))]),
        ])
        document = decode(data)
        assert len(document.frames) == 2
        assert document.frames[1].cels[0].x == 1


class TestCelEncodings:
    """Test compressed and linked cels."""

    def test_compressed_matches_raw(self, ase):
        """Test zlib-compressed cels decode to the same pixels as raw ones."""
        pixels = np.random.default_rng(3).integers(0, 256, size=(5, 7, 4), dtype=np.uint8)
        raw = decode(ase.document(8, 8, [ase.frame([ase.cel(0, 1, 2, pixels)])]))
        packed = decode(ase.document(8, 8, [ase.frame([ase.cel(0, 1, 2, pixels, compressed=True)])]))
        np.testing.assert_array_equal(raw.frames[0].cels[0].pixels,
                                      packed.frames[0].cels[0].pixels)

    def test_linked_cel_reuses_earlier_frame(self, ase, red):
        """Test a linked cel resolves to the cel on the same layer in the linked frame."""
        data = ase.document(4, 4, [
            ase.frame([ase.cel(0, 1, 1, ase.solid(2, 2, red))]),
            ase.frame([ase.linked_cel(0, 0)]),
        ])
        document = decode(data)
        first = document.frames[0].cels[0]
        linked = document.frames[1].cels[0]
        assert (linked.x, linked.y, linked.w, linked.h) == (1, 1, 2, 2)
        np.testing.assert_array_equal(linked.pixels, first.pixels)

    def test_linked_cel_to_missing_frame(self, ase):
        """Test a link to a frame that does not exist yet is malformed."""
        data = ase.document(4, 4, [ase.frame([ase.linked_cel(0, 3)])])
        with pytest.raises(MalformedDocument):
            decode(data)

    def test_tilemap_cel_is_empty(self, ase):
        """Test tilemap cels are decoded as empty."""
        payload = struct.pack('<HhhBHh5x', 0, 0, 0, 255, 3, 0) + struct.pack('<HH', 2, 2)
        data = ase.document(4, 4, [ase.frame([ase.chunk(0x2005, payload + b'\x00' * 32)])])
        assert decode(data).frames[0].cels[0].pixels is None


class TestDecodeFailures:
    """Test malformed inputs are rejected."""

    def test_empty_buffer(self):
        """Test an empty buffer is malformed."""
        with pytest.raises(MalformedDocument):
            decode(b'')

    def test_truncated_buffer(self, two_layer_bytes):
        """Test a buffer cut short of its declared size is malformed."""
        with pytest.raises(MalformedDocument):
            decode(two_layer_bytes[:-10])

    def test_truncated_inside_header(self, two_layer_bytes):
        """Test a buffer shorter than the header is malformed."""
        with pytest.raises(MalformedDocument):
            decode(two_layer_bytes[:64])

    def test_bad_header_magic(self, two_layer_bytes):
        """Test a wrong file magic is rejected."""
        data = bytearray(two_layer_bytes)
        data[4:6] = b'\x00\x00'
        with pytest.raises(MalformedDocument, match="magic"):
            decode(bytes(data))

    def test_bad_frame_magic(self, two_layer_bytes):
        """Test a wrong frame magic is rejected."""
        data = bytearray(two_layer_bytes)
        data[128 + 4:128 + 6] = b'\xff\xff'
        with pytest.raises(MalformedDocument, match="frame 0"):
            decode(bytes(data))

    def test_corrupt_chunk_length(self, ase, red):
        """Test a chunk claiming more bytes than its frame holds is rejected."""
        data = bytearray(ase.document(4, 4, [ase.frame([ase.cel(0, 0, 0, ase.solid(2, 2, red))])]))
        first_chunk = 128 + 16
        data[first_chunk:first_chunk + 4] = struct.pack('<I', 10_000)
        with pytest.raises(MalformedDocument, match="Chunk length"):
            decode(bytes(data))

    def test_chunk_length_below_header(self, ase, red):
        """Test a chunk shorter than its own header is rejected."""
        data = bytearray(ase.document(4, 4, [ase.frame([ase.cel(0, 0, 0, ase.solid(2, 2, red))])]))
        first_chunk = 128 + 16
        data[first_chunk:first_chunk + 4] = struct.pack('<I', 2)
        with pytest.raises(MalformedDocument):
            decode(bytes(data))

    def test_wrong_payload_length(self, ase):
        """Test a raw payload that is not w*h*4 bytes is rejected."""
        payload = struct.pack('<HhhBHh5x', 0, 0, 0, 255, 0, 0) + struct.pack('<HH', 2, 2) + b'\x01' * 7
        data = ase.document(4, 4, [ase.frame([ase.chunk(0x2005, payload)])])
        with pytest.raises(MalformedDocument, match="expected 16"):
            decode(data)

    def test_corrupt_compressed_payload(self, ase):
        """Test undecodable zlib data is rejected."""
        payload = struct.pack('<HhhBHh5x', 0, 0, 0, 255, 2, 0) + struct.pack('<HH', 2, 2) + b'not zlib'
        data = ase.document(4, 4, [ase.frame([ase.chunk(0x2005, payload)])])
        with pytest.raises(MalformedDocument, match="Corrupt"):
            decode(data)

    def test_unsupported_color_depth(self, ase):
        """Test indexed documents are rejected."""
        data = ase.document(4, 4, [ase.frame([])], depth=8)
        with pytest.raises(MalformedDocument, match="color depth"):
            decode(data)

    def test_zero_canvas(self, ase):
        """Test zero-sized canvases are rejected."""
        with pytest.raises(MalformedDocument):
            decode(ase.document(0, 4, [ase.frame([])]))

    def test_no_frames(self, ase):
        """Test a valid header with zero frames raises NoFrames."""
        with pytest.raises(NoFrames):
            decode(ase.document(4, 4, []))

    def test_errors_share_base_class(self, ase):
        """Test both failure kinds are AsepriteError and ValueError."""
        with pytest.raises(AsepriteError):
            decode(ase.document(4, 4, []))
        with pytest.raises(ValueError):
            decode(b'\x00' * 10)

    def test_malformed_reports_offset(self, two_layer_bytes):
        """Test malformed errors carry the failing byte offset."""
        data = bytearray(two_layer_bytes)
        data[4:6] = b'\x00\x00'
        with pytest.raises(MalformedDocument) as exc_info:
            decode(bytes(data))
        assert exc_info.value.offset == 4
