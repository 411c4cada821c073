'''
One shot generation: load the schema, compile every chunk type in order and
write header, source and documentation into the output directory.
'''
import logging
from pathlib import Path

from . import emitter
from .core import generate
from .enum import Registry
from .exceptions import PreconditionException, SchemaException
from .schema import Schema


logger = logging.getLogger(__name__)


def check_preconditions(input_file, output_path):
    if not Path(input_file).is_file():
        raise PreconditionException(chain=[str(input_file)], message='input file doesn\'t exist')

    if not Path(output_path).is_dir():
        raise PreconditionException(chain=[str(output_path)], message='output directory doesn\'t exist')


def run(input_file, output_path, copyright: str, registry: Registry = None) -> dict:
    '''Returns for each artifact if it was written.'''
    check_preconditions(input_file, output_path)

    if registry is None:
        registry = Registry()

    schema = Schema.load(input_file)
    generators = generate(schema, registry)

    # everything is rendered before touching the disk
    header = emitter.render_header(generators, copyright)
    source = emitter.render_source(generators, copyright)
    documentation = emitter.render_documentation(generators, registry)

    output_path = Path(output_path)

    return {
        emitter.HEADER_NAME: emitter.write_if_changed(output_path / emitter.HEADER_NAME, header),
        emitter.SOURCE_NAME: emitter.write_if_changed(output_path / emitter.SOURCE_NAME, source),
        emitter.DOC_NAME: emitter.write(output_path / emitter.DOC_NAME, documentation),
    }


def process(input_file, output_path, copyright: str = '', registry: Registry = None) -> int:
    '''Exit code: 0 on success, 1 when the inputs are not usable.'''
    try:
        run(input_file, output_path, copyright, registry=registry)
    except (PreconditionException, SchemaException) as e:
        logger.error(str(e))
        return 1

    return 0
