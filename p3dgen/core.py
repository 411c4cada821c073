"""
Core module of the generator: it aggregates the fields of a chunk type into
what the parser of that chunk needs.

The parser of a chunk does two things

 1. reads the sequential fields from the data of the chunk, in the
    order they are declared in the schema
 2. traverses the children and, for each one, selects the field to
    populate comparing the type of the child with the chunk types the
    fields are interested in (the dispatch)

The dispatch is built up front as a mapping from chunk type to field: when
two fields ask for the same chunk type the first declared wins and the
others are kept in DispatchTable.shadowed.
"""
import logging
from typing import Dict, List, Optional, Tuple

from .enum import Registry
from .fields import Field, DocTable
from .schema import ChunkDef


class DispatchTable(object):

    def __init__(self, owner: str, registry: Registry):
        self.logger = logging.getLogger(__name__)
        self.owner = owner
        self.registry = registry
        self.entries: Dict[str, Field] = {}
        self.shadowed: List[Field] = []

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.owner}: {list(self.entries)})>'

    def __len__(self):
        return len(self.entries)

    def __bool__(self):
        return len(self.entries) > 0

    def __iter__(self):
        return iter(self.entries.items())

    def add(self, field: Field) -> bool:
        winner = self.entries.get(field.chunk_type)
        if winner is not None:
            self.logger.warning(
                f"[{self.owner}] '{field.name}' and '{winner.name}' both dispatch on "
                f"{field.chunk_type}: only '{winner.name}' will be populated")
            self.shadowed.append(field)
            return False

        self.logger.debug(f'[{self.owner}] dispatch {field.chunk_type} -> {field.name}')
        self.entries[field.chunk_type] = field
        return True

    def registered(self) -> List[Tuple[str, Field]]:
        '''Entries whose chunk type has an identifier: the others can never
        match a child, they have no case.'''
        return [(chunk_type, field) for chunk_type, field in self.entries.items()
                if self.registry.lookup(chunk_type) is not None]

    def by_id(self) -> Dict[int, Field]:
        '''The same table keyed by the numeric identifiers.'''
        return {self.registry.lookup(chunk_type): field for chunk_type, field in self.registered()}

    @property
    def use_data_stream(self) -> bool:
        return any(field.needs_data_stream for _, field in self.registered())


class ChunkGenerator(object):
    '''Per chunk type artifacts: fields, statements and dispatch.'''

    def __init__(self, chunk_def: ChunkDef, registry: Registry):
        self.logger = logging.getLogger(__name__)
        self.name = chunk_def.name
        self.log = chunk_def.log
        self.type_id: Optional[int] = registry.lookup(chunk_def.name)
        self.fields = chunk_def.compile()
        self.dispatch = DispatchTable(self.name, registry)

        for field in self.fields:
            if field.is_dispatched:
                self.dispatch.add(field)

        self.logger.debug('generating %s: %d fields, %d dispatched' % (
            self.name, len(self.fields), len(self.dispatch)))

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name})>'

    @property
    def registered(self) -> bool:
        return self.type_id is not None

    @property
    def sequential(self) -> List[Field]:
        return [_ for _ in self.fields if not _.is_dispatched]

    def statements(self) -> List[str]:
        '''The read statements of the sequential fields, in declaration order.'''
        lines = []
        for field in self.sequential:
            lines.extend(field.readers())

        return lines

    def public(self) -> List[str]:
        return [_.public() for _ in self.fields]

    def private(self) -> List[str]:
        return [_.private() for _ in self.fields]

    @property
    def use_data_stream(self) -> bool:
        return self.dispatch.use_data_stream

    def rows(self, table: DocTable) -> List[tuple]:
        return [(_.name, _.doc_type()) for _ in self.fields if _.doc_table == table]


def generate(schema, registry: Registry) -> List[ChunkGenerator]:
    return [ChunkGenerator(chunk_def, registry) for chunk_def in schema]
