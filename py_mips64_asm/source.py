#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Source file loading with !INCLUDE resolution
"""

import logging
import os
from typing import List, Optional, Sequence
from .operand import OperandParser
from .utils import SevereError, IncludeError, UnknownDirective

log = logging.getLogger(__name__)


def parse_include(line: str) -> Optional[str]:
    """
    Path named by an !INCLUDE line, None for any other line

    @example: !INCLUDE "lib/io.asm" -> 'lib/io.asm'
    """
    line = line.strip()
    if not line.startswith('!'):
        return None

    words = line.split()
    if words[0].upper() != '!INCLUDE':
        raise UnknownDirective(f'"{words[0]}" is not a valid directive.')
    if len(words) < 2:
        raise IncludeError("!INCLUDE needs a quoted file path.")
    return OperandParser.parse_string(words[1:], 0)


def read_source(path: str, _including: Sequence[str] = ()) -> List[str]:
    """
    Read an assembly file into a flat list of non-blank lines

    Included files are spliced in place of their !INCLUDE line. Relative
    include paths are resolved against the including file's directory.
    """
    path = os.path.abspath(path)
    if path in _including:
        raise IncludeError(f'File "{path}" includes itself.')

    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw_lines = f.read().splitlines()
    except FileNotFoundError:
        raise IncludeError(f'The file "{path}" doesn\'t exist.')
    except OSError as e:
        raise IncludeError(f'Error reading "{path}": {e}')

    lines: List[str] = []
    for line_no, line in enumerate(raw_lines, 1):
        if not line.strip():
            continue

        try:
            target = parse_include(line)
            if target is None:
                lines.append(line)
                continue

            if not os.path.isabs(target):
                target = os.path.join(os.path.dirname(path), target)
            log.debug("including %s from %s", target, path)
            lines.extend(read_source(target, tuple(_including) + (path,)))
        except SevereError as e:
            raise e.at_line(line_no, f"{os.path.basename(path)}: {line}")

    return lines
