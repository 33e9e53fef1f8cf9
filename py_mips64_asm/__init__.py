#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MIPS64 Assembler Package
"""

import logging

from .assembler import Assembler, AsmProgram
from .instruction import Instruction, InstructionEncoder, Field, MIPS64Instructions
from .macro import Macro, MacroExpander, BuiltinMacros
from .operand import OperandParser, OperandKind, Register, Immediate, Text
from .preprocessor import Preprocessor
from .source import read_source
from .symbols import SymbolStore
from .convert import write_raw, write_coe, write_hex, write_listing
from .utils import SevereError
from .register import reg_to_index, cop0_reg_to_index, register_names

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = '1.0.0'
__all__ = [
    # Assembler
    'Assembler', 'AsmProgram',
    # Instruction
    'Instruction', 'InstructionEncoder', 'Field', 'MIPS64Instructions',
    # Macro / Preprocessor
    'Macro', 'MacroExpander', 'BuiltinMacros', 'Preprocessor',
    # Operands
    'OperandParser', 'OperandKind', 'Register', 'Immediate', 'Text',
    # Symbols / Source
    'SymbolStore', 'read_source',
    # Convert
    'write_raw', 'write_coe', 'write_hex', 'write_listing',
    # Utils
    'SevereError',
    # Register
    'reg_to_index', 'cop0_reg_to_index', 'register_names'
]
