"""
Binary stream reader and writer with layout-aware struct parsing.

This module provides a BinaryStream class that reads fixed-layout
structures in an explicit byte order, and performs positioned writes
for building flat images.
"""

from io import BytesIO
from typing import BinaryIO, Optional, Type, TypeVar, Union

from .layout import LITTLE_ENDIAN, struct_for, unpack_class
from ..errors import TruncatedReadError

T = TypeVar('T')

# Upper bound on a single read when copying segment data
COPY_CHUNK_SIZE = 0x100000


class BinaryStream:
    """
    Binary stream over raw bytes or a seekable file object.

    Attributes:
        byte_order: struct prefix used for multi-byte reads ('<' or '>')
    """

    def __init__(self, data: Union[bytes, bytearray, BinaryIO], byte_order: str = LITTLE_ENDIAN):
        """
        Initialize a BinaryStream.

        Args:
            data: Either raw bytes or a seekable binary file object
            byte_order: Default byte order for integer and struct reads
        """
        if isinstance(data, (bytes, bytearray)):
            self._stream = BytesIO(data)
        else:
            self._stream = data

        self.byte_order = byte_order

    # ========== Position ==========

    @property
    def position(self) -> int:
        """Get current stream position."""
        return self._stream.tell()

    @position.setter
    def position(self, value: int) -> None:
        """Set stream position."""
        self._stream.seek(value)

    # ========== Primitive Readers ==========

    def read_bytes(self, count: int) -> bytes:
        """Read up to ``count`` raw bytes."""
        return self._stream.read(count)

    def read_exact(self, count: int, what: str = "data") -> bytes:
        """
        Read exactly ``count`` bytes.

        Args:
            count: Number of bytes to read
            what: Description of the data, used in the error message

        Raises:
            TruncatedReadError: If the stream ends first
        """
        offset = self.position
        data = self.read_bytes(count)
        if len(data) != count:
            raise TruncatedReadError(what, offset, count, len(data))
        return data

    # ========== Class/Struct Reading ==========

    def read_class(
        self,
        cls: Type[T],
        addr: Optional[int] = None,
        byte_order: Optional[str] = None,
        what: Optional[str] = None
    ) -> T:
        """
        Read a layout dataclass instance from the stream.

        Args:
            cls: The layout dataclass type to read
            addr: Optional address to seek to before reading
            byte_order: Override for the stream's default byte order
            what: Description used if the read comes up short

        Returns:
            An instance of the dataclass with fields populated from the stream
        """
        if addr is not None:
            self.position = addr

        order = byte_order or self.byte_order
        size = struct_for(cls, order).size
        data = self.read_exact(size, what or cls.__name__)
        return unpack_class(cls, data, order)

    # ========== Write Methods ==========

    def write_bytes(self, data: bytes) -> None:
        """Write raw bytes."""
        self._stream.write(data)

    def copy_to(
        self,
        sink: 'BinaryStream',
        offset: int,
        size: int,
        dest: int,
        what: str = "data"
    ) -> int:
        """
        Copy ``size`` bytes from ``offset`` in this stream to ``dest`` in ``sink``.

        Data is moved in chunks of at most COPY_CHUNK_SIZE bytes.

        Returns:
            Number of bytes copied
        """
        self.position = offset
        sink.position = dest
        remaining = size
        while remaining > 0:
            chunk = self.read_bytes(min(remaining, COPY_CHUNK_SIZE))
            if not chunk:
                raise TruncatedReadError(what, offset, size, size - remaining)
            sink.write_bytes(chunk)
            remaining -= len(chunk)
        return size
