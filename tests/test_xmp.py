#!/usr/bin/env python3
"""
Tests for XMP packet extraction from GIF streams
"""

import io

import pytest

from conftest import XMP_TRAILER, make_gif, xmp_extension
from raster_codecs.gif.xmp import CHUNK_SIZE, XMP_SIGNATURE, locate_xmp

PACKET = b'<?xpacket begin=""?><x:xmpmeta xmlns:x="adobe:ns:meta/">ok</x:xmpmeta>'


class FailingStream(io.BytesIO):
    """Raises OSError on the second read"""

    def __init__(self, data):
        super().__init__(data)
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        if self.reads == 2:
            raise OSError("device went away")
        return super().read(size)


class TestLocateXMP:
    """Scanning for the XMP application extension"""

    def test_found_in_gif(self):
        stream = io.BytesIO(make_gif(extensions=xmp_extension(PACKET)))
        packet = locate_xmp(stream)
        assert packet.found
        assert packet.payload == PACKET
        assert "xmpmeta" in packet.text

    def test_not_found(self):
        assert not locate_xmp(io.BytesIO(make_gif())).found

    def test_empty_stream(self):
        assert not locate_xmp(io.BytesIO(b"")).found

    @pytest.mark.parametrize("position", [0, 7, 100])
    def test_position_restored(self, position):
        stream = io.BytesIO(make_gif(extensions=xmp_extension(PACKET)))
        stream.seek(position)
        locate_xmp(stream)
        assert stream.tell() == position

    def test_position_restored_on_miss(self):
        stream = io.BytesIO(make_gif())
        stream.seek(5)
        locate_xmp(stream)
        assert stream.tell() == 5

    def test_position_restored_on_read_error(self):
        stream = FailingStream(make_gif() + b"\x00" * (3 * CHUNK_SIZE))
        stream.seek(11)
        with pytest.raises(OSError, match="device went away"):
            locate_xmp(stream)
        assert stream.reads == 2
        assert stream.tell() == 11

    @pytest.mark.parametrize("split", range(1, len(XMP_SIGNATURE)))
    def test_signature_straddles_chunk_boundary(self, split):
        prefix = b"\x00" * (CHUNK_SIZE - split)
        stream = io.BytesIO(prefix + xmp_extension(PACKET))
        packet = locate_xmp(stream)
        assert packet.found
        assert packet.payload == PACKET

    def test_signature_deep_in_stream(self):
        prefix = b"\x01" * (5 * CHUNK_SIZE + 17)
        packet = locate_xmp(io.BytesIO(prefix + xmp_extension(PACKET)))
        assert packet.payload == PACKET

    def test_payload_spanning_many_chunks(self):
        large = b"<x>" + b"a" * (3 * CHUNK_SIZE) + b"</x>"
        packet = locate_xmp(io.BytesIO(make_gif(extensions=xmp_extension(large))))
        assert packet.payload == large

    def test_missing_trailer(self):
        stream = io.BytesIO(XMP_SIGNATURE + PACKET * 10 + b"\x00")
        assert not locate_xmp(stream).found

    def test_short_payload(self):
        """A payload no longer than the trailer cannot hold a packet"""
        assert not locate_xmp(io.BytesIO(XMP_SIGNATURE + XMP_TRAILER)).found

    def test_payload_until_eof(self):
        """Without a terminating NUL the payload runs to the end of the stream"""
        stream = io.BytesIO(XMP_SIGNATURE + PACKET + XMP_TRAILER[:-2])
        packet = locate_xmp(stream)
        assert packet.found
        assert packet.payload == PACKET
