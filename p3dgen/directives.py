'''
Compiler of the per-field directives of the schema.

A directive is a short string split on spaces and angle brackets:

    "u32"                          scalar
    "string[32]"                   fixed length characters
    "child Mesh"                   single child chunk
    "child u32 Count"              value read from the data of a child
    "children Mesh"                list of child chunks
    "children<string> Name"        list of values read from the children
    "dictionary string name Mesh"  child chunks indexed by their field "name"
    "buffer<u8>"                   u32 count followed by the elements
    "buffer<u8[16]>"               16 elements
    "buffer<u8[count]>"            as many elements as the field "count"
    "buffer<vec3> PositionList"    elements from the data of a child
    "buffers<float> Channel"       u32 length, u32 channel, elements

Anything else doesn't produce a field: unknown shapes are ignored so that a
schema can carry directives this version doesn't understand.
'''
import logging
import re
from typing import List, Optional, Tuple

from . import fields
from .properties import parse_size


logger = logging.getLogger(__name__)

_RE_SEPARATOR = re.compile(r'[ <>]')
_RE_SUBSCRIPT = re.compile(r'[\[\]]')


def tokenize(directive: str) -> List[str]:
    return [_ for _ in _RE_SEPARATOR.split(directive) if _]


def split_subscript(token: str) -> Optional[Tuple[str, Optional[str]]]:
    '''"u8[16]" -> ("u8", "16"), "u8" -> ("u8", None), None when malformed.'''
    if '[' not in token:
        return token, None

    parts = [_ for _ in _RE_SUBSCRIPT.split(token) if _]
    if len(parts) != 2:
        return None

    return parts[0], parts[1]


def _compile_scalar(name, token):
    subscript = split_subscript(token)
    if subscript is None:
        return None

    type, n = subscript
    if n is None:
        return fields.ScalarField(name, type)

    if not (n.isascii() and n.isdecimal()):
        return None

    return fields.FixedStringField(name, type, int(n))


def _compile_child(name, args):
    if len(args) == 1:
        return fields.ChildField(name, args[0])
    if len(args) == 2:
        return fields.ChildScalarField(name, type=args[0], chunk_type=args[1])

    return None


def _compile_children(name, args):
    if len(args) == 1:
        return fields.ChildrenField(name, args[0])
    if len(args) == 2:
        return fields.ChildrenScalarField(name, type=args[0], chunk_type=args[1])

    return None


def _compile_dictionary(name, args):
    if len(args) != 3:
        return None

    key_type, key_name, chunk_type = args

    return fields.DictionaryField(name, key_type, key_name, chunk_type)


def _compile_buffer(name, args):
    subscript = split_subscript(args[0])
    if subscript is None:
        return None

    type, n = subscript
    size = None
    if n is not None:
        size = parse_size(n)
        if size is None:
            return None

    if len(args) == 1:
        return fields.BufferField(name, type, size=size)
    if len(args) == 2:
        return fields.ChunkBufferField(name, type, chunk_type=args[1], size=size)

    return None


def _compile_buffers(name, args):
    if len(args) != 2:
        return None

    type, chunk_type = args
    if type == 'string':
        return None

    return fields.MultiChannelBufferField(name, type, chunk_type)


DIRECTIVES = {
    'child':      _compile_child,
    'children':   _compile_children,
    'dictionary': _compile_dictionary,
    'buffer':     _compile_buffer,
    'buffers':    _compile_buffers,
}


def compile_field(name: str, directive) -> Optional[fields.Field]:
    '''Returns the field for the directive or None if there is nothing to generate.'''
    if not isinstance(directive, str):
        return None

    if not name or not name.strip() or not directive.strip():
        return None

    tokens = tokenize(directive)

    field = None
    if len(tokens) == 1:
        field = _compile_scalar(name, tokens[0])
    elif 2 <= len(tokens) <= 4:
        compiler = DIRECTIVES.get(tokens[0])
        if compiler is not None:
            field = compiler(name, tokens[1:])

    if field is None:
        logger.debug(f"ignoring directive '{directive}' for field '{name}'")
    else:
        logger.debug(f"compiled '{name}': '{directive}' as {field!r}")

    return field
