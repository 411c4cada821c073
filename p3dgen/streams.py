'''
Reference implementation of the reader the generated code is written against.

The generated C++ relies on a MemoryStream with typed reads and on P3DChunk
for the tree of chunks; here the same contract is implemented on top of
bitstring so that the parsers can be exercised from python.
'''
import logging
from typing import List

from bitstring import ConstBitStream, ReadError, pack

from .types import FORMATS
from .exceptions import UnpackException


logger = logging.getLogger(__name__)


class MemoryStream(object):
    '''Little-endian typed reader over a chunk payload.'''

    def __init__(self, data: bytes):
        self.data = data
        self.obj = ConstBitStream(bytes=data)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.position}/{self.size})>'

    @property
    def position(self) -> int:
        return self.obj.bytepos

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def end(self) -> bool:
        return self.position >= self.size

    def _read(self, fmt):
        try:
            return self.obj.read(fmt)
        except ReadError as e:
            raise UnpackException(chain=[], message=f"reading '{fmt}' at offset {self.position}: {e}")

    def read(self, token: str):
        '''Read a value of a primitive type (no strings).'''
        if token not in FORMATS:
            raise UnpackException(chain=[], message=f"type '{token}' can't be read from a stream")

        fmt, count = FORMATS[token]

        if count > 1:
            return tuple(self._read(fmt) for _ in range(count))

        value = self._read(fmt)

        return bool(value) if token == 'bool' else value

    def read_bytes(self, n: int) -> bytes:
        if n == 0:
            return b''

        return self._read(f'bytes:{n}')

    def read_string(self, n: int) -> str:
        '''Fixed length string, the padding after the first NUL is discarded.'''
        raw = self.read_bytes(n)
        return raw.split(b'\x00', 1)[0].decode('latin1')

    def read_lpstring(self) -> str:
        '''String prefixed by its length as a single byte.'''
        length = self._read('uint:8')
        return self.read_string(length)

    def read_array(self, token: str, n: int) -> list:
        if token == 'string':
            return [self.read_lpstring() for _ in range(n)]

        return [self.read(token) for _ in range(n)]


class P3DChunk(object):
    '''A node of the chunk tree:

      .------------------------------.
      | u32 type                     |
      | u32 data size (with header)  |
      | u32 total size               |
      | data                         |
      | children ...                 |
      '------------------------------'
    '''
    HEADER_SIZE = 12

    def __init__(self, type: int, data: bytes = b'', children: List["P3DChunk"] = None):
        self.type = type
        self.data = data
        self.children = children or []

    def __repr__(self):
        return f'<{self.__class__.__name__}(0x{self.type:x}, {len(self.data)} bytes, {len(self.children)} children)>'

    def is_type(self, value: int) -> bool:
        return self.type == value

    @property
    def data_size(self) -> int:
        return len(self.data)

    @property
    def size(self) -> int:
        return self.HEADER_SIZE + self.data_size + sum(_.size for _ in self.children)

    @classmethod
    def parse(cls, raw: bytes) -> "P3DChunk":
        header = MemoryStream(raw[:cls.HEADER_SIZE])
        type_id = header.read('u32')
        data_size = header.read('u32')
        total_size = header.read('u32')

        if data_size < cls.HEADER_SIZE or total_size < data_size or total_size > len(raw):
            raise UnpackException(
                chain=[f'0x{type_id:x}'],
                message=f'inconsistent sizes (data={data_size}, total={total_size}, available={len(raw)})')

        children = []
        offset = data_size
        while offset < total_size:
            child = cls.parse(raw[offset:total_size])
            logger.debug('chunk 0x%x: child %r at offset %d' % (type_id, child, offset))
            children.append(child)
            offset += child.size

        return cls(type_id, raw[cls.HEADER_SIZE:data_size], children)

    def pack(self) -> bytes:
        '''The inverse of parse(), used to build test data.'''
        children = b''.join(_.pack() for _ in self.children)
        data_size = self.HEADER_SIZE + self.data_size
        header = pack('uintle:32, uintle:32, uintle:32', self.type, data_size, data_size + len(children))

        return header.bytes + self.data + children
