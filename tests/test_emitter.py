import os

from p3dgen import emitter
from p3dgen.core import generate
from p3dgen.emitter import CodeWriter, write_if_changed
from p3dgen.schema import Schema


def stripped(text):
    return [_.strip() for _ in text.splitlines()]


def test_code_writer_blocks():
    writer = CodeWriter()
    with writer.block('namespace A'):
        writer.line('int a;')
        writer.line()
        with writer.block('struct B', closer='};'):
            writer.line('int b;')

    assert writer.getvalue() == (
        'namespace A\n'
        '{\n'
        '    int a;\n'
        '\n'
        '    struct B\n'
        '    {\n'
        '        int b;\n'
        '    };\n'
        '}\n'
    )


def test_foo_end_to_end(registry):
    schema = Schema.from_dict({'Foo': {'id': 'u32', 'name': 'string'}})
    generators = generate(schema, registry)

    header = stripped(emitter.render_header(generators, 'Copyright (C) Test'))
    source = stripped(emitter.render_source(generators, 'Copyright (C) Test'))
    documentation = emitter.render_documentation(generators, registry)

    assert header[0] == '// Copyright (C) Test'
    assert '#pragma once' in header
    assert '#include <P3D/P3DChunk.h>' in header
    assert header.index('class Foo;') < header.index('class Foo')
    assert 'Foo(const P3DChunk&);' in header
    assert 'const uint32_t& GetId() const { return _id; }' in header
    assert 'const std::string& GetName() const { return _name; }' in header
    assert header.index('public:') < header.index('const uint32_t& GetId() const { return _id; }')
    assert header.index('private:') < header.index('uint32_t _id;') < header.index('std::string _name;')

    assert source[0] == '// Copyright (C) Test'
    assert f'#include "{emitter.HEADER_NAME}"' in source
    assert 'Foo::Foo(const P3DChunk& chunk)' in source
    assert 'assert(chunk.IsType(ChunkType::Foo));' in source
    assert source.index('_id = stream.Read<uint32_t>();') < source.index('_name = stream.ReadLPString();')
    # nothing to dispatch, nothing to log
    assert 'switch (child->GetType())' not in source
    assert 'if (!stream.End())' not in source

    assert documentation == (
        '# Chunks (1 / 3)\n'
        '\n'
        '## Foo `0x100`\n'
        '|Name|Type|\n'
        '|--|--|\n'
        '|`id`|`u32`|\n'
        '|`name`|`string`|\n'
        '\n'
        '# TODO Chunks (2 / 3)\n'
        '#### Bar `0x200`\n'
        '#### Baz `0x300`\n'
    )


def test_dispatch_rendering(registry):
    schema = Schema.from_dict({
        'Foo': {
            '!log': True,
            'bar': 'child Bar',
            'counts': 'children u32 Baz',
        },
    })
    generators = generate(schema, registry)

    source = stripped(emitter.render_source(generators, ''))

    assert 'for (auto const& child : chunk.GetChildren())' in source
    assert 'MemoryStream data(child->GetData());' in source
    assert source.index('case ChunkType::Bar:') < source.index('_bar = std::make_unique<Bar>(*child);')
    assert source.index('case ChunkType::Baz:') < source.index('_counts.push_back(data.Read<uint32_t>());')
    assert source.index('default:') > source.index('case ChunkType::Baz:')
    assert 'std::cout << "[Foo] Unexpected Chunk: " << child->GetType() << "\\n";' in source
    assert 'if (!stream.End())' in source
    assert ('std::cout << fmt::format("[Foo] only read {0} out of {1} bytes!", '
            'stream.Position(), chunk.GetDataSize()) << std::endl;') in source


def test_dispatch_without_log_has_silent_default(registry):
    schema = Schema.from_dict({'Foo': {'bar': 'child Bar'}})
    source = stripped(emitter.render_source(generate(schema, registry), ''))

    default = source.index('default:')
    assert source[default + 1] == 'break;'
    assert 'MemoryStream data(child->GetData());' not in source
    assert not any('Unexpected Chunk' in _ for _ in source)


def test_dispatch_collision_renders_a_single_case(registry):
    schema = Schema.from_dict({'Foo': {'a': 'child Bar', 'b': 'children Bar'}})
    source = stripped(emitter.render_source(generate(schema, registry), ''))

    assert source.count('case ChunkType::Bar:') == 1
    assert '_a = std::make_unique<Bar>(*child);' in source
    assert '_b.push_back(std::make_unique<Bar>(*child));' not in source


def test_unregistered_chunk_is_declared_but_not_documented(registry):
    schema = Schema.from_dict({
        'Mesh': {'name': 'string'},
        'Foo': {'id': 'u32'},
    })
    generators = generate(schema, registry)

    header = stripped(emitter.render_header(generators, ''))
    source = stripped(emitter.render_source(generators, ''))
    documentation = emitter.render_documentation(generators, registry)

    # forward declarations in schema order
    assert header.index('class Mesh;') < header.index('class Foo;')
    assert 'const std::string& GetName() const { return _name; }' in header
    assert 'Mesh::Mesh(const P3DChunk& chunk)' in source
    assert 'assert(chunk.IsType(ChunkType::Mesh));' not in source
    assert 'Mesh' not in documentation
    assert '## Foo `0x100`' in documentation


def test_documentation_is_ordered_by_id(registry):
    schema = Schema.from_dict({
        'Baz': {'x': 'u8'},
        'Foo': {'bars': 'children Bar'},
    })

    documentation = emitter.render_documentation(generate(schema, registry), registry)

    assert documentation.index('## Foo `0x100`') < documentation.index('## Baz `0x300`')
    assert '### Children\n|Name|Chunk|\n|--|--|\n|`bars`|`Bar[]`|\n' in documentation
    assert '# TODO Chunks (1 / 3)\n#### Bar `0x200`\n' in documentation


def test_write_if_changed(tmp_path):
    path = tmp_path / 'file.h'

    assert write_if_changed(path, 'int a;\n')
    assert path.read_bytes() == b'int a;\n'

    os.utime(path, (1, 1))
    assert not write_if_changed(path, 'int a;\n')
    assert path.stat().st_mtime == 1

    # same length, different content
    assert write_if_changed(path, 'int b;\n')
    assert path.read_bytes() == b'int b;\n'


def test_unregistered_dispatch_target_has_no_case(registry):
    schema = Schema.from_dict({'Foo': {'mesh': 'child Mesh', 'count': 'child u32 Mesh', 'bar': 'child Bar'}})
    generators = generate(schema, registry)

    header = stripped(emitter.render_header(generators, ''))
    source = stripped(emitter.render_source(generators, ''))

    assert 'case ChunkType::Mesh:' not in source
    assert '_mesh = std::make_unique<Mesh>(*child);' not in source
    assert 'case ChunkType::Bar:' in source
    # only the unregistered target reads from the child data
    assert 'MemoryStream data(child->GetData());' not in source
    # the field is still declared
    assert 'const std::unique_ptr<Mesh>& GetMesh() const { return _mesh; }' in header
    assert 'std::unique_ptr<Mesh> _mesh;' in header
