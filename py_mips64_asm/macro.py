#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Built-in pseudo-instruction macros
"""

from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Sequence, Tuple
from .utils import UnknownMacro, WrongMacroArity, MacroRecursionError, assert_

# Expansion nesting deeper than this is treated as a self-referencing macro
MAX_MACRO_DEPTH = 16


class Macro:
    """
    Macro descriptor: argument count and template lines using {0}, {1}, ...
    """

    def __init__(self, symbol: str, desc: str, argc: int, templates: Sequence[str]):
        self._symbol = symbol
        self._desc = desc
        self._argc = argc
        self._templates = tuple(templates)

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def desc(self) -> str:
        return self._desc

    @property
    def argc(self) -> int:
        return self._argc

    @property
    def templates(self) -> Tuple[str, ...]:
        return self._templates

    def __repr__(self) -> str:
        return f"Macro({self._symbol}, {self._argc})"


_macros: Dict[str, Macro] = {}


def new_macro(symbol: str, desc: str, argc: int, templates: List[str]) -> None:
    """
    Add a new macro to the table
    """
    assert_(symbol not in _macros, f'Macro "{symbol}" is defined twice.')
    _macros[symbol] = Macro(symbol, desc, argc, templates)


new_macro('B', 'Unconditional Branch', 1, [
    'BEQ $R0, $R0, {0}',
])

new_macro('GOTO', 'Jump to BASE:target through a register', 2, [
    'LUI {0}, BASE',
    'ADDIU {0}, {0}, {1}',
    'JR {0}',
])

new_macro('CALL', 'Call BASE:target through a register', 2, [
    'LUI {0}, BASE',
    'ADDIU {0}, {0}, {1}',
    'JALR {0}',
])

new_macro('RET', 'Return from Call', 0, [
    'JR $RA',
])

new_macro('MOVE', 'Copy Register', 2, [
    'ADDU {0}, {1}, $R0',
])

new_macro('BEQZ', 'Branch on Equal Zero', 2, [
    'BEQ {0}, $R0, {1}',
])

new_macro('BNEZ', 'Branch on Not Equal Zero', 2, [
    'BNE {0}, $R0, {1}',
])

new_macro('LI', 'Load 16-bit Immediate', 2, [
    'ORI {0}, $R0, {1}',
])


BuiltinMacros: Mapping[str, Macro] = MappingProxyType(_macros)


def split_instruction(line: str) -> Tuple[str, List[str]]:
    """
    Split an instruction line into its uppercase mnemonic and operands

    Whitespace inside operands is dropped, operands are comma separated.

    @example: 'ADDIU $T0, $T0, 5' -> ('ADDIU', ['$T0', '$T0', '5'])
    """
    parts = line.strip().split(None, 1)
    if not parts:
        return '', []
    mnemonic = parts[0].upper()
    rest = ''.join(parts[1].split()) if len(parts) > 1 else ''
    args = rest.split(',') if rest else []
    return mnemonic, args


class MacroExpander:
    """
    Expands macro invocations into the lines they stand for
    """

    def __init__(self, table: Mapping[str, Macro] = BuiltinMacros):
        self.table = table

    def is_macro(self, mnemonic: str) -> bool:
        return mnemonic.upper() in self.table

    def lookup(self, mnemonic: str) -> Macro:
        macro = self.table.get(mnemonic.upper())
        if macro is None:
            raise UnknownMacro(f'Unknown macro "{mnemonic}".')
        return macro

    def expand(self, mnemonic: str, args: Sequence[str]) -> List[str]:
        """
        Substitute the written arguments into every template line
        """
        macro = self.lookup(mnemonic)
        if len(args) != macro.argc:
            raise WrongMacroArity(
                f'Macro "{macro.symbol}" ({macro.desc}) needs {macro.argc} arguments, got {len(args)}.'
            )
        return [template.format(*args) for template in macro.templates]

    def count(self, mnemonic: str, is_instruction: Callable[[str], bool], depth: int = 0) -> int:
        """
        Number of real instructions one invocation expands to

        Nested macro templates are counted through; template lines that are
        neither instructions nor macros count as one and fail when encoded.
        """
        if depth > MAX_MACRO_DEPTH:
            raise MacroRecursionError(f'Macro "{mnemonic}" nests deeper than {MAX_MACRO_DEPTH} levels.')

        total = 0
        for template in self.lookup(mnemonic).templates:
            name, _ = split_instruction(template)
            if not is_instruction(name) and self.is_macro(name):
                total += self.count(name, is_instruction, depth + 1)
            else:
                total += 1
        return total
