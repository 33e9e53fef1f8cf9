#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MIPS64 Output Format Writers
"""

from typing import List
from .assembler import AsmProgram
from .utils import SevereError


def _write(output_path: str, content, mode: str, what: str) -> None:
    try:
        with open(output_path, mode, encoding=None if 'b' in mode else 'utf-8') as f:
            f.write(content)
    except OSError as e:
        raise SevereError(f"Failed to write {what} file: {str(e)}")


def write_raw(asm_program: AsmProgram, output_path: str) -> None:
    """
    Write the program as raw big-endian machine words
    """
    _write(output_path, asm_program.to_bytes(), 'wb', 'raw')


def program_to_coe(asm_program: AsmProgram) -> str:
    """
    Convert program to COE format text

    An empty program still gets one zero word so the vector is never empty.
    """
    header = [
        'memory_initialization_radix=16;',
        'memory_initialization_vector='
    ]
    data_values = asm_program.to_hex(zero_x=False)
    if not data_values:
        data_values = ['00000000']
    return '\n'.join(header) + '\n' + ',\n'.join(data_values) + ';'


def write_coe(asm_program: AsmProgram, output_path: str) -> None:
    """
    Write the program as a Xilinx COE memory initialization file
    """
    _write(output_path, program_to_coe(asm_program), 'w', 'COE')


def write_hex(asm_program: AsmProgram, output_path: str) -> None:
    """
    Write one 8-digit hex word per line
    """
    lines = asm_program.to_hex(zero_x=False)
    _write(output_path, '\n'.join(lines) + ('\n' if lines else ''), 'w', 'hex')


def program_to_listing(asm_program: AsmProgram) -> List[str]:
    """
    Address, word, source text and description of every encoded instruction
    """
    return [f'{addr:08x}  {word:08x}  {text:<24}  ; {note}'
            for addr, word, text, note in asm_program.listing]


def write_listing(asm_program: AsmProgram, output_path: str) -> None:
    lines = program_to_listing(asm_program)
    _write(output_path, '\n'.join(lines) + ('\n' if lines else ''), 'w', 'listing')


WRITERS = {
    'raw': write_raw,
    'coe': write_coe,
    'hex': write_hex,
}
