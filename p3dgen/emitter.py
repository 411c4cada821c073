'''
Rendering of the three artifacts:

 1. the header with the declarations of the classes
 2. the source with their constructors, i.e. the parsers
 3. the markdown documentation of the chunks

Header and source are written only when their content changes, so that the
build system doesn't recompile everything at each generation; the
documentation is always rewritten.
'''
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import List

from .core import ChunkGenerator
from .enum import Registry, format_id
from .fields import DocTable


logger = logging.getLogger(__name__)

HEADER_NAME = 'P3D.generated.h'
SOURCE_NAME = 'P3D.generated.cpp'
DOC_NAME = 'Chunks.md'

NAMESPACE = 'Donut::P3D'
GENERATED_COMMENT = '// This file is generated by p3dgen: do not edit it by hand.'

HEADER_INCLUDES = [
    'P3D/P3DChunk.h',
    'glm/vec2.hpp',
    'glm/vec3.hpp',
    'glm/vec4.hpp',
    'glm/gtc/quaternion.hpp',
    'glm/mat4x4.hpp',
    'string',
    'memory',
    'vector',
    'map',
]

SOURCE_INCLUDES = [
    'Core/MemoryStream.h',
    'fmt/format.h',
    'cassert',
    'iostream',
]


class CodeWriter(object):
    '''Accumulates lines keeping track of the indentation.'''

    def __init__(self, indent='    '):
        self.indent = indent
        self.level = 0
        self._lines: List[str] = []

    def line(self, text=''):
        self._lines.append(f'{self.indent * self.level}{text}' if text else '')

    def lines(self, texts):
        for text in texts:
            self.line(text)

    @contextmanager
    def block(self, opener=None, closer='}'):
        if opener is not None:
            self.line(opener)
        self.line('{')
        self.level += 1
        yield self
        self.level -= 1
        self.line(closer)

    def getvalue(self) -> str:
        return '\n'.join(self._lines) + '\n'


def render_declaration(writer: CodeWriter, generator: ChunkGenerator):
    name = generator.name

    with writer.block(f'class {name}', closer='};'):
        writer.line('public:')
        writer.line()
        writer.line(f'{name}(const P3DChunk&);')
        writer.line()
        writer.line(f'static std::unique_ptr<{name}> Load(const P3DChunk& chunk) '
                    f'{{ return std::make_unique<{name}>(chunk); }}')

        public = generator.public()
        if public:
            writer.line()
            writer.lines(public)

        writer.line()
        writer.line('private:')

        private = generator.private()
        if private:
            writer.line()
            writer.lines(private)


def render_dispatch(writer: CodeWriter, generator: ChunkGenerator):
    name = generator.name

    with writer.block('for (auto const& child : chunk.GetChildren())'):
        if generator.use_data_stream:
            writer.line('MemoryStream data(child->GetData());')
            writer.line()

        with writer.block('switch (child->GetType())'):
            for chunk_type, field in generator.dispatch.registered():
                writer.line(f'case ChunkType::{chunk_type}:')
                with writer.block():
                    writer.lines(field.case())
                    writer.line('break;')

            writer.line('default:')
            writer.level += 1
            if generator.log:
                writer.line(f'std::cout << "[{name}] Unexpected Chunk: " << child->GetType() << "\\n";')
            writer.line('break;')
            writer.level -= 1


def render_constructor(writer: CodeWriter, generator: ChunkGenerator):
    name = generator.name

    with writer.block(f'{name}::{name}(const P3DChunk& chunk)'):
        if generator.registered:
            writer.line(f'assert(chunk.IsType(ChunkType::{name}));')
            writer.line()

        writer.line('MemoryStream stream(chunk.GetData());')
        writer.lines(generator.statements())

        if generator.dispatch:
            writer.line()
            render_dispatch(writer, generator)

        if generator.log:
            writer.line()
            with writer.block('if (!stream.End())'):
                writer.line(f'std::cout << fmt::format("[{name}] only read {{0}} out of {{1}} bytes!", '
                            f'stream.Position(), chunk.GetDataSize()) << std::endl;')


def _banner(writer: CodeWriter, copyright: str):
    writer.line(f'// {copyright}')
    writer.line()


def render_header(generators: List[ChunkGenerator], copyright: str) -> str:
    writer = CodeWriter()
    _banner(writer, copyright)
    writer.line('#pragma once')
    writer.line()
    writer.line(GENERATED_COMMENT)
    writer.line()

    for include in HEADER_INCLUDES:
        writer.line(f'#include <{include}>')
    writer.line()

    with writer.block(f'namespace {NAMESPACE}'):
        for generator in generators:
            writer.line(f'class {generator.name};')

        for generator in generators:
            writer.line()
            render_declaration(writer, generator)

    return writer.getvalue()


def render_source(generators: List[ChunkGenerator], copyright: str) -> str:
    writer = CodeWriter()
    _banner(writer, copyright)
    writer.line(GENERATED_COMMENT)
    writer.line()

    writer.line(f'#include "{HEADER_NAME}"')
    for include in SOURCE_INCLUDES:
        writer.line(f'#include <{include}>')
    writer.line()

    with writer.block(f'namespace {NAMESPACE}'):
        for idx, generator in enumerate(generators):
            if idx:
                writer.line()
            render_constructor(writer, generator)

    return writer.getvalue()


def _table(lines: List[str], header: str, rows):
    lines.append(header)
    lines.append('|--|--|')
    for name, doc_type in rows:
        lines.append(f'|`{name}`|`{doc_type}`|')
    lines.append('')


def render_chunk_doc(generator: ChunkGenerator) -> str:
    lines = [f'## {generator.name} `{format_id(generator.type_id)}`']
    _table(lines, '|Name|Type|', generator.rows(DocTable.TYPES))

    children = generator.rows(DocTable.CHILDREN)
    if children:
        lines.append('### Children')
        _table(lines, '|Name|Chunk|', children)

    return '\n'.join(lines)


def render_documentation(generators: List[ChunkGenerator], registry: Registry) -> str:
    '''Registered chunk types ordered by identifier, then the ones still missing.'''
    documented = sorted([_ for _ in generators if _.registered], key=lambda _: _.type_id)
    missing = registry.coverage([_.name for _ in documented])
    total = len(registry)

    lines = [f'# Chunks ({total - len(missing)} / {total})', '']
    for generator in documented:
        lines.append(render_chunk_doc(generator))

    lines.append(f'# TODO Chunks ({len(missing)} / {total})')
    for chunk_type in missing:
        lines.append(f'#### {chunk_type.name} `{format_id(chunk_type.value)}`')

    return '\n'.join(lines) + '\n'


def write_if_changed(path, content: str) -> bool:
    '''Write the content only if different from what is already on disk.

    Returns True when the file was written.'''
    path = Path(path)
    data = content.encode('utf-8')

    if path.is_file() and path.stat().st_size == len(data) and path.read_bytes() == data:
        logger.debug('unchanged: %s' % path)
        return False

    path.write_bytes(data)
    logger.info('written: %s' % path)

    return True


def write(path, content: str) -> bool:
    Path(path).write_bytes(content.encode('utf-8'))
    logger.info('written: %s' % path)

    return True
