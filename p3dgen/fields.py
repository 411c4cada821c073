"""
A Field is the compiled form of a single directive of the schema: it knows how
the value is stored in the generated class, how it's read and how it's documented.

There are two families of fields:

 1. sequential: read in declaration order from the data of the chunk itself
 2. dispatched: populated while traversing the children, when one of them has
    the chunk type indicated by `chunk_type`

Each field renders the C++ fragments (accessor, storage, read statements) and
implements the same semantics in python via unpack()/dispatch(), used by the
parsers built in p3dgen.runtime.
"""
import logging
from enum import Enum, auto
from typing import List

from .exceptions import UnpackException
from .meta import FieldBase
from .types import native_type, is_string


class ReadStrategy(Enum):
    SEQUENTIAL_SCALAR    = auto()
    FIXED_CHAR_BUFFER    = auto()
    SEQUENTIAL_ARRAY     = auto()
    CHILD_SINGLE         = auto()
    CHILD_TYPED_SCALAR   = auto()
    CHILDREN_LIST        = auto()
    CHILDREN_TYPED_LIST  = auto()
    DICTIONARY_BY_KEY    = auto()
    BUFFER               = auto()
    MULTI_CHANNEL_BUFFER = auto()


class DocTable(Enum):
    TYPES    = auto()
    CHILDREN = auto()


def read_call(stream: str, type: str) -> str:
    if is_string(type):
        return f'{stream}.ReadLPString()'

    return f'{stream}.Read<{native_type(type)}>()'


def read_value(stream, type: str):
    if is_string(type):
        return stream.read_lpstring()

    return stream.read(type)


class Field(FieldBase):
    """Base class to subclass from"""
    strategy = None
    doc_table = DocTable.TYPES
    needs_data_stream = False

    def __init__(self, name: str, type: str = None, chunk_type: str = None):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.type = type
        self.chunk_type = chunk_type

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name}: {self.doc_type()})>'

    @property
    def accessor(self) -> str:
        return f'{self.name[0].upper()}{self.name[1:]}'

    @property
    def storage(self) -> str:
        return f'_{self.name}'

    @property
    def native_type(self) -> str:
        return native_type(self.type) if self.type else self.chunk_type

    @property
    def is_dispatched(self) -> bool:
        return self.chunk_type is not None

    def public(self) -> str:
        return f'const {self.native_type}& Get{self.accessor}() const {{ return {self.storage}; }}'

    def private(self) -> str:
        return f'{self.native_type} {self.storage};'

    def readers(self) -> List[str]:
        '''Statements reading this field from the stream of the chunk.'''
        return []

    def case(self) -> List[str]:
        '''Statements executed when a child with the right type is found.'''
        return []

    def doc_type(self) -> str:
        return self.type

    def value_from_default(self):
        return None

    def unpack(self, instance, stream):
        raise NotImplementedError(f'{self.__class__.__name__} is not read sequentially')

    def dispatch(self, instance, child, data):
        raise NotImplementedError(f'{self.__class__.__name__} is not populated from children')

    def _child_class(self, instance):
        try:
            return instance._meta.namespace[self.chunk_type]
        except KeyError:
            raise UnpackException(chain=[], message=f"no parser for chunk type '{self.chunk_type}'")


class ScalarField(Field):
    strategy = ReadStrategy.SEQUENTIAL_SCALAR

    def readers(self):
        return [f'{self.storage} = {read_call("stream", self.type)};']

    def unpack(self, instance, stream):
        setattr(instance, self.name, read_value(stream, self.type))


class FixedStringField(Field):
    '''Characters with a length fixed by the format, like "string[32]".'''
    strategy = ReadStrategy.FIXED_CHAR_BUFFER

    def __init__(self, name, type, n: int):
        super().__init__(name, type)
        self.n = n

    def readers(self):
        return [f'{self.storage} = stream.ReadString({self.n});']

    def doc_type(self):
        return f'{self.type}[{self.n}]'

    def unpack(self, instance, stream):
        setattr(instance, self.name, stream.read_string(self.n))


class BufferField(Field):
    '''Vector of elements read from the stream of the chunk: the number of elements
    is fixed, taken from another field or read as u32 just before the data.'''
    strategy = ReadStrategy.SEQUENTIAL_ARRAY
    stream_name = 'stream'

    def __init__(self, name, type, chunk_type=None, size=None):
        super().__init__(name, type, chunk_type)
        self.size = size

    @property
    def fixed(self) -> bool:
        return self.size is not None

    def public(self):
        return f'const std::vector<{self.native_type}>& Get{self.accessor}() const {{ return {self.storage}; }}'

    def private(self):
        return f'std::vector<{self.native_type}> {self.storage};'

    def _statements(self):
        stream = self.stream_name
        length = self.size.render() if self.fixed else f'{stream}.Read<uint32_t>()'
        lines = [f'{self.storage}.resize({length});']

        if is_string(self.type):
            lines += [
                f'for (size_t i = 0; i < {self.storage}.size(); ++i)',
                '{',
                f'    {self.storage}[i] = {stream}.ReadLPString();',
                '}',
            ]
        else:
            lines.append(
                f'{stream}.ReadBytes(reinterpret_cast<uint8_t*>({self.storage}.data()), '
                f'{self.storage}.size() * sizeof({self.native_type}));')

        return lines

    def readers(self):
        return self._statements()

    def doc_type(self):
        return f'{self.type}[{self.size if self.fixed else "u32"}]'

    def value_from_default(self):
        return []

    def _read(self, instance, stream):
        n = self.size.resolve(instance) if self.fixed else stream.read('u32')
        self.logger.debug(f'reading {n} elements of type {self.type} for {self.name}')
        setattr(instance, self.name, stream.read_array(self.type, n))

    def unpack(self, instance, stream):
        self._read(instance, stream)


class ChildField(Field):
    strategy = ReadStrategy.CHILD_SINGLE
    doc_table = DocTable.CHILDREN

    def __init__(self, name, chunk_type):
        super().__init__(name, chunk_type=chunk_type)

    def public(self):
        return f'const std::unique_ptr<{self.chunk_type}>& Get{self.accessor}() const {{ return {self.storage}; }}'

    def private(self):
        return f'std::unique_ptr<{self.chunk_type}> {self.storage};'

    def case(self):
        return [f'{self.storage} = std::make_unique<{self.chunk_type}>(*child);']

    def doc_type(self):
        return self.chunk_type

    def dispatch(self, instance, child, data):
        setattr(instance, self.name, self._child_class(instance)(child))


class ChildScalarField(Field):
    '''The value is read from the data of the child, not the child itself.'''
    strategy = ReadStrategy.CHILD_TYPED_SCALAR
    doc_table = DocTable.CHILDREN
    needs_data_stream = True

    def case(self):
        return [f'{self.storage} = {read_call("data", self.type)};']

    def doc_type(self):
        return f'{self.chunk_type}<{self.type}>'

    def dispatch(self, instance, child, data):
        setattr(instance, self.name, read_value(data, self.type))


class ChildrenField(Field):
    strategy = ReadStrategy.CHILDREN_LIST
    doc_table = DocTable.CHILDREN

    def __init__(self, name, chunk_type):
        super().__init__(name, chunk_type=chunk_type)

    def public(self):
        return (f'const std::vector<std::unique_ptr<{self.chunk_type}>>& Get{self.accessor}() const '
                f'{{ return {self.storage}; }}')

    def private(self):
        return f'std::vector<std::unique_ptr<{self.chunk_type}>> {self.storage};'

    def case(self):
        return [f'{self.storage}.push_back(std::make_unique<{self.chunk_type}>(*child));']

    def doc_type(self):
        return f'{self.chunk_type}[]'

    def value_from_default(self):
        return []

    def dispatch(self, instance, child, data):
        getattr(instance, self.name).append(self._child_class(instance)(child))


class ChildrenScalarField(Field):
    strategy = ReadStrategy.CHILDREN_TYPED_LIST
    doc_table = DocTable.CHILDREN
    needs_data_stream = True

    def public(self):
        return f'const std::vector<{self.native_type}>& Get{self.accessor}() const {{ return {self.storage}; }}'

    def private(self):
        return f'std::vector<{self.native_type}> {self.storage};'

    def case(self):
        return [f'{self.storage}.push_back({read_call("data", self.type)});']

    def doc_type(self):
        return f'{self.chunk_type}<{self.type}>[]'

    def value_from_default(self):
        return []

    def dispatch(self, instance, child, data):
        getattr(instance, self.name).append(read_value(data, self.type))


class DictionaryField(Field):
    '''Children indexed by one of their own fields.

    When two children have the same key the last one processed replaces
    the previous one.'''
    strategy = ReadStrategy.DICTIONARY_BY_KEY
    doc_table = DocTable.CHILDREN

    def __init__(self, name, key_type, key_name, chunk_type):
        super().__init__(name, type=key_type, chunk_type=chunk_type)
        self.key_name = key_name

    @property
    def key_accessor(self):
        return f'{self.key_name[0].upper()}{self.key_name[1:]}'

    def public(self):
        return (f'{self.chunk_type}* Get{self.accessor}Value(const {native_type(self.type)}& key) const '
                f'{{ auto it = {self.storage}.find(key); '
                f'return (it != {self.storage}.end()) ? it->second.get() : nullptr; }}')

    def private(self):
        return f'std::map<{native_type(self.type)}, std::unique_ptr<{self.chunk_type}>> {self.storage};'

    def case(self):
        return [
            f'auto value = std::make_unique<{self.chunk_type}>(*child);',
            f'auto key = value->Get{self.key_accessor}();',
            f'{self.storage}.insert_or_assign(key, std::move(value));',
        ]

    def doc_type(self):
        return f'{self.chunk_type}[]'

    def value_from_default(self):
        return {}

    def dispatch(self, instance, child, data):
        value = self._child_class(instance)(child)
        key = getattr(value, self.key_name)
        values = getattr(instance, self.name)

        if key in values:
            self.logger.debug(f"{self.name}: key {key!r} replaced")

        values[key] = value


class ChunkBufferField(BufferField):
    '''Like BufferField but the elements come from the data of a child.'''
    strategy = ReadStrategy.BUFFER
    doc_table = DocTable.CHILDREN
    needs_data_stream = True
    stream_name = 'data'

    def readers(self):
        return []

    def case(self):
        return self._statements()

    def doc_type(self):
        return f'{self.chunk_type}<{self.type}>[{self.size if self.fixed else "u32"}]'

    def dispatch(self, instance, child, data):
        self._read(instance, data)


class MultiChannelBufferField(Field):
    '''Each child brings length and channel index followed by the elements:
    the channels are kept in a list that grows to contain the highest index.'''
    strategy = ReadStrategy.MULTI_CHANNEL_BUFFER
    doc_table = DocTable.CHILDREN
    needs_data_stream = True

    def public(self):
        return (f'const std::vector<{self.native_type}>& Get{self.accessor}(size_t index) const '
                f'{{ return {self.storage}.at(index); }}')

    def private(self):
        return f'std::vector<std::vector<{self.native_type}>> {self.storage};'

    def case(self):
        return [
            'uint32_t length = data.Read<uint32_t>();',
            'uint32_t channel = data.Read<uint32_t>();',
            f'if ({self.storage}.size() <= channel) {self.storage}.resize(channel + 1);',
            f'{self.storage}.at(channel).resize(length);',
            f'data.ReadBytes(reinterpret_cast<uint8_t*>({self.storage}.at(channel).data()), '
            f'length * sizeof({self.native_type}));',
        ]

    def doc_type(self):
        return f'{self.chunk_type}<{self.type}>[u32][u32]'

    def value_from_default(self):
        return []

    def dispatch(self, instance, child, data):
        length = data.read('u32')
        channel = data.read('u32')
        channels = getattr(instance, self.name)

        while len(channels) <= channel:
            channels.append([])

        channels[channel] = data.read_array(self.type, length)
