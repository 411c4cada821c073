"""
Python parsers built from the schema.

The classes created here follow the same plans used to generate the C++
code, so they behave like the generated parsers: same order of reads,
same dispatch, same diagnostics.

    schema = Schema.from_json(text)
    classes = build_classes(schema, Registry())
    mesh = classes['Mesh'](P3DChunk.parse(raw))
"""
import logging
from typing import Dict, List, Tuple

from .core import generate
from .enum import Registry
from .exceptions import UnpackException, ChunkUnpackException
from .meta import MetaChunk
from .streams import MemoryStream, P3DChunk


class Chunk(metaclass=MetaChunk):
    '''Base class of the parsers: instantiate it with a P3DChunk to parse it.'''

    def __init__(self, chunk: P3DChunk = None):
        self.logger = logging.getLogger(__name__)

        if chunk is not None:
            self.logger.debug('unpacking \'%s\' from %r' % (self.__class__.__name__, chunk))
            self.unpack(chunk)

    def get_fields(self) -> List[Tuple[str, object]]:
        '''It returns a list of couples (name, value) for each field.'''
        return [(_, getattr(self, _)) for _ in self._meta.fields]

    def __repr__(self):
        msg = []
        for field_name, value in self.get_fields():
            msg.append('%s=%r' % (field_name, value))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def _unpack_field(self, field_name, callback, *args):
        try:
            callback(self, *args)
        except (UnpackException, ChunkUnpackException) as e:
            chain = list(e.chain)
            chain.append(field_name)
            raise ChunkUnpackException(chain=chain, message=e.message)

    def unpack(self, chunk: P3DChunk):
        meta = self._meta
        name = self.__class__.__name__

        if meta.type_id is not None and not chunk.is_type(meta.type_id):
            raise UnpackException(chain=[name], message=f'expected chunk 0x{meta.type_id:x}, found 0x{chunk.type:x}')

        stream = MemoryStream(chunk.data)

        for field_name in meta.fields:
            field = meta.plans[field_name]
            if field.is_dispatched:
                continue

            self.logger.debug('unpacking %s.%s at offset %d' % (name, field_name, stream.position))
            self._unpack_field(field_name, field.unpack, stream)

        if meta.dispatch is not None:
            for child in chunk.children:
                field = meta.dispatch.get(child.type)

                if field is None:
                    if meta.log:
                        self.logger.warning(f'[{name}] Unexpected Chunk: {child.type}')
                    continue

                self._unpack_field(field.name, field.dispatch, child, MemoryStream(child.data))

        if meta.log and not stream.end:
            self.logger.warning(f'[{name}] only read {stream.position} out of {stream.size} bytes!')


def build_classes(schema, registry: Registry = None) -> Dict[str, type]:
    '''One Chunk subclass for each chunk type of the schema, by name.'''
    if registry is None:
        registry = Registry()

    namespace: Dict[str, type] = {}

    for generator in generate(schema, registry):
        attrs = {
            '__module__': __name__,
            '__qualname__': generator.name,
        }
        for field in generator.fields:
            attrs[field.name] = field

        cls = MetaChunk(generator.name, (Chunk,), attrs)
        cls._meta.type_id = generator.type_id
        cls._meta.log = generator.log
        cls._meta.dispatch = generator.dispatch.by_id() if generator.dispatch else None
        cls._meta.namespace = namespace

        namespace[generator.name] = cls

    return namespace
