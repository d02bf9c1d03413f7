import struct

from .errors import TruncatedData

_U16 = struct.Struct('<H')
_I16 = struct.Struct('<h')
_U32 = struct.Struct('<I')
_I32 = struct.Struct('<i')
_U64 = struct.Struct('<Q')
_I64 = struct.Struct('<q')
_F32 = struct.Struct('<f')
_F64 = struct.Struct('<d')


class ByteCursor:
    """Little-endian reader over an in-memory buffer.

    Every read is bounds checked: running off the end raises TruncatedData
    instead of returning short data.
    """

    def __init__(self, data, name="<memory>"):
        self.data = memoryview(bytes(data))
        self.name = name
        self.pos = 0

    @classmethod
    def from_file(cls, path):
        with open(path, 'rb') as f:
            return cls(f.read(), name=path)

    def _take(self, n):
        if n < 0:
            raise TruncatedData(self.pos, n, self.length() - self.pos)
        end = self.pos + n
        if end > len(self.data):
            raise TruncatedData(self.pos, n, len(self.data) - self.pos)
        start = self.pos
        self.pos = end
        return start

    def _unpack(self, fmt):
        start = self._take(fmt.size)
        return fmt.unpack_from(self.data, start)[0]

    def u8(self):
        start = self._take(1)
        return self.data[start]

    def u16(self):
        return self._unpack(_U16)

    def i16(self):
        return self._unpack(_I16)

    def u32(self):
        return self._unpack(_U32)

    def i32(self):
        return self._unpack(_I32)

    def u64(self):
        return self._unpack(_U64)

    def i64(self):
        return self._unpack(_I64)

    def f32(self):
        return self._unpack(_F32)

    def f64(self):
        return self._unpack(_F64)

    def varint(self):
        # 7 bits per byte, low group first, high bit = continuation
        value = 0
        shift = 0
        while True:
            byte = self.u8()
            value |= (byte & 0x7F) << shift
            if not (byte & 0x80):
                return value
            shift += 7

    def string(self):
        n = self.varint()
        return self.bytes(n).decode('utf-8', 'replace')

    def bytes(self, n):
        start = self._take(n)
        return self.data[start:start + n].tobytes()

    def skip(self, n):
        self._take(n)

    def seek(self, offset):
        if offset < 0 or offset > len(self.data):
            raise TruncatedData(offset, 0, len(self.data) - offset)
        self.pos = offset

    def tell(self):
        return self.pos

    def length(self):
        return len(self.data)

    def remaining(self):
        return len(self.data) - self.pos

    def rest(self):
        """Returns every byte from the current position to the end."""
        return self.bytes(self.remaining())

    def bitmap(self, count):
        """Reads `count` packed flags, first flag in bit 0 of each byte."""
        flags = []
        bits = 0
        for i in range(count):
            if i % 8 == 0:
                bits = self.u8()
            flags.append(bool(bits & (1 << (i % 8))))
        return flags

    def __repr__(self):
        return f"ByteCursor({self.name!r}, pos={self.pos}, length={len(self.data)})"
