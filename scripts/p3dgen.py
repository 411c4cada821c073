#!/usr/bin/env python3
'''
Generate the P3D parsers and their documentation from a schema.

 $ p3dgen.py p3d.json ../src/P3D "Copyright (C) 2024 Donut Team"
'''
import logging
import os
import sys

from p3dgen.generator import process


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print(f'usage: {progname} <schema file> <output directory> [copyright]')
    sys.exit(1)


if __name__ == '__main__':
    if len(sys.argv) < 3:
        usage(sys.argv[0])

    input_file = sys.argv[1]
    output_path = sys.argv[2]
    copyright = sys.argv[3] if len(sys.argv) > 3 else ''

    sys.exit(process(input_file, output_path, copyright))
