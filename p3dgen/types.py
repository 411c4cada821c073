'''
Primitive types understood by the schema.

Any token not listed here is a reference to another chunk type and it's
passed through as it is.
'''

NATIVE_TYPES = {
    's8':  'int8_t',
    's16': 'int16_t',
    's32': 'int32_t',
    's64': 'int64_t',

    'u8':  'uint8_t',
    'u16': 'uint16_t',
    'u32': 'uint32_t',
    'u64': 'uint64_t',

    'bool':   'bool',
    'float':  'float',
    'string': 'std::string',

    'vec2': 'glm::vec2',
    'vec3': 'glm::vec3',
    'vec4': 'glm::vec4',
    'quat': 'glm::quat',
    'mat4': 'glm::mat4',
}

# bitstring format and number of components, used by the reference runtime
FORMATS = {
    's8':  ('int:8', 1),
    's16': ('intle:16', 1),
    's32': ('intle:32', 1),
    's64': ('intle:64', 1),

    'u8':  ('uint:8', 1),
    'u16': ('uintle:16', 1),
    'u32': ('uintle:32', 1),
    'u64': ('uintle:64', 1),

    'bool':  ('uint:8', 1),
    'float': ('floatle:32', 1),

    'vec2': ('floatle:32', 2),
    'vec3': ('floatle:32', 3),
    'vec4': ('floatle:32', 4),
    'quat': ('floatle:32', 4),
    'mat4': ('floatle:32', 16),
}


def native_type(token: str) -> str:
    return NATIVE_TYPES.get(token, token)


def is_string(token: str) -> bool:
    return token == 'string'
