class P3DGenException(Exception):
    '''Base class to extend in order to throw exception in p3dgen.

    It takes a single argument that represents the chain of the layer that
    caused the exception (chunk and field names).
    '''

    def __init__(self, chain, message=None):
        self.chain = chain
        self.message = message
        super().__init__(message or '.'.join(chain))

    def __str__(self):
        location = '.'.join(self.chain)
        if self.message and location:
            return f'{location}: {self.message}'

        return self.message or location


class PreconditionException(P3DGenException):
    '''Input file or output directory missing: nothing is generated.'''
    pass


class SchemaException(P3DGenException):
    pass


class UnpackException(P3DGenException):
    pass


class ChunkUnpackException(P3DGenException):
    pass
