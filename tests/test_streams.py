import struct

import pytest

from p3dgen.exceptions import UnpackException
from p3dgen.streams import MemoryStream, P3DChunk

from conftest import u32, lpstring


def test_typed_reads():
    raw = (
        b'\xff' +
        struct.pack('<h', -2) +
        u32(0xdeadbeef) +
        struct.pack('<f', 0.25) +
        struct.pack('<3f', 1.0, 2.0, 3.0) +
        b'\x01'
    )
    stream = MemoryStream(raw)

    assert stream.read('u8') == 0xff
    assert stream.read('s16') == -2
    assert stream.read('u32') == 0xdeadbeef
    assert stream.read('float') == 0.25
    assert stream.read('vec3') == (1.0, 2.0, 3.0)
    assert stream.read('bool') is True
    assert stream.end
    assert stream.position == stream.size == len(raw)


def test_strings():
    stream = MemoryStream(lpstring('mesh') + b'flat\x00abc' + lpstring(''))

    assert stream.read_lpstring() == 'mesh'
    # what follows the terminator is padding
    assert stream.read_string(8) == 'flat'
    assert stream.read_lpstring() == ''
    assert stream.end


def test_read_array():
    stream = MemoryStream(struct.pack('<3H', 1, 2, 3) + lpstring('a') + lpstring('b'))

    assert stream.read_array('u16', 3) == [1, 2, 3]
    assert stream.read_array('string', 2) == ['a', 'b']
    assert stream.read_array('u8', 0) == []


def test_underflow():
    stream = MemoryStream(b'\x01\x02')

    with pytest.raises(UnpackException):
        stream.read('u32')

    with pytest.raises(UnpackException):
        MemoryStream(b'\x05ab').read_lpstring()


def test_unknown_type():
    with pytest.raises(UnpackException):
        MemoryStream(b'\x00' * 4).read('Mesh')


def test_chunk_tree():
    child = P3DChunk(0x200, u32(1))
    root = P3DChunk(0x100, b'\xaa\xbb', [child, P3DChunk(0x300)])

    raw = root.pack()

    assert len(raw) == root.size == 12 + 2 + (12 + 4) + 12
    assert raw[:12] == u32(0x100, 14, len(raw))

    parsed = P3DChunk.parse(raw)

    assert parsed.is_type(0x100)
    assert parsed.data == b'\xaa\xbb'
    assert [_.type for _ in parsed.children] == [0x200, 0x300]
    assert parsed.children[0].data == u32(1)
    assert parsed.children[1].children == []


def test_chunk_inconsistent_sizes():
    with pytest.raises(UnpackException):
        P3DChunk.parse(u32(0x100, 12, 64))

    with pytest.raises(UnpackException):
        P3DChunk.parse(u32(0x100, 8, 12))
