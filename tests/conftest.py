import json
import logging
import struct

import pytest

from p3dgen.enum import Registry
from p3dgen.streams import P3DChunk


logging.basicConfig(level=logging.DEBUG)


@pytest.fixture
def registry():
    return Registry.from_mapping({
        'Foo': 0x100,
        'Bar': 0x200,
        'Baz': 0x300,
    }, name='TestChunkType')


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / 'out'
    path.mkdir()
    return path


@pytest.fixture
def write_schema(tmp_path):
    """Serialize a mapping as the schema file and return its path."""
    def _write(mapping, name='schema.json'):
        path = tmp_path / name
        path.write_text(json.dumps(mapping), encoding='utf-8')
        return path

    return _write


def u32(*values):
    return struct.pack('<%dI' % len(values), *values)


def lpstring(text):
    raw = text.encode('latin1')
    return struct.pack('<B', len(raw)) + raw


def make_chunk(type_id, data=b'', children=None):
    return P3DChunk(type_id, data, children or [])
