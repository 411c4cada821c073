'''
The schema describes the chunk types as a JSON object

    {
        "Mesh": {
            "!log": true,
            "name": "string",
            "version": "u32",
            "groups": "children PrimitiveGroup"
        }
    }

The order of the chunk types and of their fields is meaningful and it's
preserved: it's the order of the declarations and of the reads.
'''
import json
import logging
from typing import Dict, Iterator, List, Optional

from .directives import compile_field
from .exceptions import SchemaException
from .fields import Field


logger = logging.getLogger(__name__)

LOG_FLAG = '!log'


class FieldDef(object):

    def __init__(self, name: str, directive):
        self.name = name
        self.directive = directive

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name}={self.directive!r})>'

    def compile(self) -> Optional[Field]:
        return compile_field(self.name, self.directive)


class ChunkDef(object):

    def __init__(self, name: str, fields: List[FieldDef] = None, log: bool = False):
        self.name = name
        self.fields = fields or []
        self.log = log

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name}, {len(self.fields)} fields, log={self.log})>'

    def compile(self) -> List[Field]:
        '''Fields in declaration order, skipping the directives that don't generate anything.'''
        plans = []
        for field_def in self.fields:
            plan = field_def.compile()
            if plan is not None:
                plans.append(plan)

        return plans

    @classmethod
    def from_dict(cls, name: str, properties: Dict) -> "ChunkDef":
        if not isinstance(properties, dict):
            raise SchemaException(chain=[name], message='chunk definition must be an object')

        log = False
        fields = []
        for field_name, directive in properties.items():
            if field_name == LOG_FLAG:
                log = directive is True
                continue

            fields.append(FieldDef(field_name, directive))

        return cls(name, fields, log=log)


class Schema(object):

    def __init__(self, chunks: List[ChunkDef] = None):
        self.chunks = chunks or []

    def __iter__(self) -> Iterator[ChunkDef]:
        return iter(self.chunks)

    def __len__(self):
        return len(self.chunks)

    def __getitem__(self, name) -> ChunkDef:
        for chunk in self.chunks:
            if chunk.name == name:
                return chunk

        raise KeyError(name)

    @property
    def names(self) -> List[str]:
        return [_.name for _ in self.chunks]

    @classmethod
    def from_dict(cls, mapping: Dict) -> "Schema":
        if not isinstance(mapping, dict):
            raise SchemaException(chain=[], message='schema must be an object')

        return cls([ChunkDef.from_dict(name, properties) for name, properties in mapping.items()])

    @classmethod
    def from_json(cls, text: str) -> "Schema":
        try:
            mapping = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaException(chain=[], message=str(e))

        return cls.from_dict(mapping)

    @classmethod
    def load(cls, path) -> "Schema":
        logger.debug('loading schema from \'%s\'' % path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise SchemaException(chain=[str(path)], message=f'schema is not valid UTF-8: {e}')

        return cls.from_json(text)
