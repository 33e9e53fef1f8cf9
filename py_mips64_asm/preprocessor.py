#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Bracketed preprocessor directives: [BASE imm16], [DEFINE name text]
"""

import logging
from typing import Callable, Dict, List, Sequence, Tuple
from .operand import OperandKind, OperandParser, Operand, VARIADIC_KINDS
from .symbols import SymbolStore
from .utils import UnknownDirective, WrongDirectiveArity

log = logging.getLogger(__name__)


def is_directive(line: str) -> bool:
    line = line.strip()
    return len(line) >= 2 and line[0] == '[' and line[-1] == ']'


def split_directive(line: str) -> Tuple[str, List[str]]:
    """
    Split a directive line into its uppercase name and argument tokens

    Arguments are separated by commas and/or whitespace, so text captured by
    a trailing REST operand is rejoined with single spaces.

    @example: '[DEFINE FOO $T1]' -> ('DEFINE', ['FOO', '$T1'])
    """
    inner = line.strip()[1:-1].replace(',', ' ')
    words = inner.split()
    if not words:
        return '', []
    return words[0].upper(), words[1:]


class Preprocessor:
    """
    Applies directive effects to the symbol store during the first pass
    """

    def __init__(self, symbols: SymbolStore, parser: OperandParser):
        self.symbols = symbols
        self.parser = parser
        self._directives: Dict[str, Tuple[List[OperandKind], Callable[[List[Operand]], None]]] = {
            'BASE': ([OperandKind.NUMBER_16], self._set_base),
            'DEFINE': ([OperandKind.WORD, OperandKind.REST], self._define),
        }

    def process(self, line: str) -> bool:
        """
        Run the directive on line; False if line is not a directive
        """
        if not is_directive(line):
            return False

        name, args = split_directive(line)
        entry = self._directives.get(name)
        if entry is None:
            raise UnknownDirective(f'"{name}" is not a valid Pre-Processor directive.')
        kinds, method = entry

        self._check_arity(name, kinds, args)
        method(self._parse_args(kinds, args))
        return True

    @staticmethod
    def _check_arity(name: str, kinds: Sequence[OperandKind], args: Sequence[str]) -> None:
        if kinds and kinds[-1] in VARIADIC_KINDS:
            ok = len(args) >= len(kinds)
        else:
            ok = len(args) == len(kinds)
        if not ok:
            raise WrongDirectiveArity(
                f'The Pre-Processor directive "{name}" requires {len(kinds)} arguments, got {len(args)}.'
            )

    def _parse_args(self, kinds: Sequence[OperandKind], args: Sequence[str]) -> List[Operand]:
        operands = []
        for i, kind in enumerate(kinds):
            # DEFINE name and text are stored verbatim
            substitute = kind not in (OperandKind.WORD, OperandKind.REST)
            operands.append(self.parser.parse(args[i], kind, args, i, substitute=substitute))
        return operands

    def _set_base(self, operands: List[Operand]) -> None:
        self.symbols.set_base(operands[0].value)
        log.debug("base = 0x%04x", self.symbols.base)

    def _define(self, operands: List[Operand]) -> None:
        name, text = operands
        self.symbols.add_user_macro(name.value.upper(), text.value)
