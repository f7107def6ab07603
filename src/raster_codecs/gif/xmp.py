"""
Locate an XMP packet embedded in a GIF stream.

GIF files carry XMP in an application extension whose identifier is
"XMP DataXMP". The packet text is stored raw after that identifier and is
followed by a 258 byte "magic trailer" (0x01, 0xFF, 0xFE, ..., 0x01, 0x00)
that keeps GIF decoders in sync (XMP Part 3, "Storage in files",
section 2.1.2).

The scan reads 1024 byte chunks behind a 1024 byte lookback window, so a
signature split across two reads is still found. The caller's stream
position is restored whatever the outcome.
"""

import logging
from dataclasses import dataclass
from typing import BinaryIO

logger = logging.getLogger("raster_codecs.gif.xmp")

XMP_SIGNATURE = b"\x21\xff\x0bXMP DataXMP"
CHUNK_SIZE = 1024
MIN_PACKET_LENGTH = 256
TRAILER_LENGTH = 256  # magic trailer bytes before its closing NUL


@dataclass(frozen=True)
class MetadataPacket:
    """Result of a scan; `found` is False when no packet is present."""

    found: bool
    payload: bytes = b""

    @property
    def text(self) -> str:
        return self.payload.decode("utf-8", errors="replace")


NOT_FOUND = MetadataPacket(found=False)


def _has_trailer(payload: bytearray, length: int) -> bool:
    return (
        length > MIN_PACKET_LENGTH
        and payload[length - 1] == 0x01
        and payload[length - 2] == 0x02
        and payload[length - 255] == 0xFF
        and payload[length - 256] == 0x01
    )


def _read_payload(stream: BinaryIO, payload: bytearray) -> MetadataPacket:
    """Grow the payload until its terminating NUL (or EOF), then check the trailer."""
    nul = payload.find(b"\x00")
    while nul < 0:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        previous = len(payload)
        payload.extend(chunk)
        nul = payload.find(b"\x00", previous)

    length = nul if nul >= 0 else len(payload)
    if not _has_trailer(payload, length):
        logger.debug(f"XMP signature found but packet of {length} bytes has no valid trailer")
        return NOT_FOUND

    return MetadataPacket(found=True, payload=bytes(payload[: length - TRAILER_LENGTH]))


def _scan(stream: BinaryIO) -> MetadataPacket:
    # [lookback window | fresh chunk]
    window = bytearray(2 * CHUNK_SIZE)
    search_from = CHUNK_SIZE

    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        end = CHUNK_SIZE + len(chunk)
        window[CHUNK_SIZE:end] = chunk

        found = window.find(XMP_SIGNATURE, search_from, end)
        search_from = 0

        if found >= 0:
            payload_start = found + len(XMP_SIGNATURE)
            logger.debug("Found XMP application extension")
            return _read_payload(stream, bytearray(window[payload_start:end]))

        if len(chunk) != CHUNK_SIZE:
            break
        window[:CHUNK_SIZE] = window[CHUNK_SIZE:]

    return NOT_FOUND


def locate_xmp(stream: BinaryIO) -> MetadataPacket:
    """
    Find and extract the XMP packet of a GIF stream.

    Args:
        stream: Seekable binary stream; its position is left unchanged

    Returns:
        MetadataPacket, with found=False when the stream has no packet
    """
    position = stream.tell()
    try:
        stream.seek(0)
        return _scan(stream)
    finally:
        stream.seek(position)
