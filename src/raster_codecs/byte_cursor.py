"""
Little-endian field access over a random-access byte buffer.

The header codecs keep their whole header in memory, so the cursor works on
a bytearray: reads and writes at explicit offsets, plus a movable position
for the sequential writer.
"""

import struct
from typing import Optional

_INT16 = struct.Struct("<h")
_UINT16 = struct.Struct("<H")
_INT32 = struct.Struct("<i")
_FLOAT64 = struct.Struct("<d")


class ByteCursor:
    """Fixed-size buffer with a seek/tell position and typed accessors."""

    def __init__(self, size: Optional[int] = None, data: Optional[bytes] = None):
        if data is not None:
            self.buffer = bytearray(data)
        elif size is not None:
            self.buffer = bytearray(size)
        else:
            raise ValueError("Either size or data must be provided")
        self.position = 0

    def __len__(self) -> int:
        return len(self.buffer)

    def seek(self, offset: int) -> None:
        if offset < 0 or offset > len(self.buffer):
            raise ValueError(f"Seek outside buffer: {offset} (size {len(self.buffer)})")
        self.position = offset

    def skip(self, count: int) -> None:
        self.seek(self.position + count)

    def tell(self) -> int:
        return self.position

    def getvalue(self) -> bytes:
        return bytes(self.buffer)

    # Random access readers

    def int16_at(self, offset: int) -> int:
        return _INT16.unpack_from(self.buffer, offset)[0]

    def uint16_at(self, offset: int) -> int:
        return _UINT16.unpack_from(self.buffer, offset)[0]

    def int32_at(self, offset: int) -> int:
        return _INT32.unpack_from(self.buffer, offset)[0]

    def float64_at(self, offset: int) -> float:
        return _FLOAT64.unpack_from(self.buffer, offset)[0]

    def string_at(self, offset: int, width: int) -> str:
        """Read a NUL-terminated string from a fixed-width slot."""
        raw = bytes(self.buffer[offset : offset + width])
        return raw.split(b"\x00", 1)[0].decode("latin-1")

    # Sequential writers

    def _write(self, packer: struct.Struct, value) -> None:
        end = self.position + packer.size
        if end > len(self.buffer):
            raise ValueError(f"Write past end of buffer at {self.position}")
        packer.pack_into(self.buffer, self.position, value)
        self.position = end

    def write_uint16(self, value: int) -> None:
        self._write(_UINT16, value)

    def write_int16(self, value: int) -> None:
        self._write(_INT16, value)

    def write_int32(self, value: int) -> None:
        self._write(_INT32, value)

    def write_float64(self, value: float) -> None:
        self._write(_FLOAT64, value)

    def write_string(self, value: str, width: int) -> None:
        """Write at most `width` bytes of `value`; the slot stays NUL-padded."""
        encoded = value.encode("latin-1", errors="replace")[:width]
        end = self.position + len(encoded)
        if end > len(self.buffer):
            raise ValueError(f"Write past end of buffer at {self.position}")
        self.buffer[self.position : end] = encoded
        self.position = end
