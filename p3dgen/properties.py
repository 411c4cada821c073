import logging

from .exceptions import UnpackException


class FixedSize(object):
    '''Number of elements known when the schema is written, like u8[16].'''

    def __init__(self, n: int):
        self.n = n

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.n})>'

    def __eq__(self, other):
        return isinstance(other, FixedSize) and other.n == self.n

    def __str__(self):
        return str(self.n)

    def render(self):
        return str(self.n)

    def resolve(self, instance):
        return self.n


class Dependency(object):
    '''This makes the relation between fields possible.

    The number of elements of a buffer is the value of a field read before,
    at the same level of the chunk: u8[count] reads as many elements as the
    value of the field named "count".

        class Mesh(Chunk):
            count = fields.ScalarField('count', 'u32')
            data  = fields.BufferField('data', 'u8', size=Dependency('.count'))
    '''

    def __init__(self, expression: str):
        self.expression = expression
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def __eq__(self, other):
        return isinstance(other, Dependency) and other.expression == self.expression

    def __str__(self):
        return self.field_name

    @property
    def field_name(self):
        return self.expression.lstrip('.')

    def render(self):
        '''The private storage of the referenced field in the generated class.'''
        return f'_{self.field_name}'

    def resolve(self, instance):
        self.logger.debug("resolving '%s' from %s" % (self.expression, instance.__class__.__name__))
        value = getattr(instance, self.field_name)

        if not isinstance(value, int):
            raise UnpackException(
                chain=[], message=f"field '{self.field_name}' can't be used as a size (value {value!r})")

        return value


def parse_size(text: str):
    '''"16" -> FixedSize(16), "count" -> Dependency('.count'), None otherwise'''
    if text.isascii() and text.isdecimal():
        return FixedSize(int(text))

    if text.isidentifier():
        return Dependency(f'.{text}')

    return None
