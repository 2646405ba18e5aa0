from pathlib import Path
from typing import Union

from bitarray import bitarray
from bitarray.util import ba2int, int2ba

EOF = -1 # returned by read_bits when fewer than n bits remain


class BitInputStream:
    """
    Sequential MSB-first bit reader over an in-memory buffer
    """

    def __init__(self, data: bytes = b""):
        self.bits = bitarray(endian="big")
        self.bits.frombytes(bytes(data))
        self.pos = 0

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "BitInputStream":
        with open(path, "rb") as f:
            return cls(f.read())

    @property
    def bits_read(self) -> int:
        return self.pos

    def read_bits(self, n: int) -> int:
        """
        Read the next n bits as an unsigned integer, most significant bit first
        Returns EOF (and leaves the position unchanged) when fewer than n bits remain
        """
        if n <= 0:
            return 0
        if self.pos + n > len(self.bits):
            return EOF
        val = ba2int(self.bits[self.pos:self.pos + n])
        self.pos += n
        return val

    def reset(self) -> None:
        self.pos = 0


class BitOutputStream:
    """
    Sequential MSB-first bit writer; getvalue() pads the last byte with zeros
    """

    def __init__(self):
        self.bits = bitarray(endian="big")

    @property
    def bits_written(self) -> int:
        return len(self.bits)

    def write_bits(self, n: int, value: int) -> None:
        if n <= 0:
            return
        self.bits.extend(int2ba(value & ((1 << n) - 1), length=n, endian="big"))

    def getvalue(self) -> bytes:
        # tobytes() fills the unused bits of the final byte with 0
        return self.bits.tobytes()

    def write_to(self, path: Union[str, Path]) -> int:
        data = self.getvalue()
        with open(path, "wb") as f:
            f.write(data)
        return len(data)
