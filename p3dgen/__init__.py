"""
# P3D parsers generator.

The P3D format is made of chunks: each chunk has a type, a block of data and
a list of children chunks. The schema describes, for each chunk type, how
its data and its children map to fields, one directive per field

    {
        "Mesh": {
            "name": "string",
            "version": "u32",
            "groups": "children PrimitiveGroup"
        }
    }

From the schema three artifacts are generated:

 1. P3D.generated.h: one class for each chunk type, with accessors
 2. P3D.generated.cpp: the constructors of these classes, that parse a chunk
    reading the sequential fields and dispatching the children
 3. Chunks.md: the documentation of the chunks, ordered by identifier, with
    the list of the chunk types not defined yet

The pipeline is

    schema -> directives.compile_field() -> core.ChunkGenerator -> emitter

and p3dgen.runtime builds python parsers from the same compiled fields.
"""
