#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MIPS64 Operand Parser

Turns one written operand token into a typed value for the encoder:
registers, masked immediates, branch displacements and strings.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Sequence, Tuple, Union
from .register import reg_to_index, cop0_reg_to_index
from .symbols import SymbolStore
from .utils import (
    SevereError, InvalidNumberLiteral, UnresolvedLabel, MalformedOffset,
    ExpectedString, UnterminatedString,
    is_hex_digits, is_bin_digits, is_dec_literal
)


class OperandKind(Enum):
    GP_REGISTER = auto()
    COP0_REGISTER = auto()
    NUMBER_16 = auto()
    NUMBER_24 = auto()
    NUMBER_5 = auto()
    BRANCH_TARGET = auto()
    OFFSET = auto()         # IMM(REG), written as one token
    BASE = auto()           # the REG half of an OFFSET token
    STRING = auto()         # "quoted string", may span split tokens
    WORD = auto()           # bare token, untouched
    REST = auto()           # everything from here to the end of the line


# Bit width of each numeric kind
NUMBER_BITS = {
    OperandKind.NUMBER_16: 16,
    OperandKind.NUMBER_24: 24,
    OperandKind.NUMBER_5: 5,
    OperandKind.OFFSET: 16,
    OperandKind.BRANCH_TARGET: 16,
}

# Kinds that may consume more than one written token
VARIADIC_KINDS = (OperandKind.STRING, OperandKind.REST)

LABEL_HINT = "(Perhaps you referenced a Label that doesn't exist?)"

_identifier_re = re.compile(r'^\.?[A-Za-z_][A-Za-z0-9_.]*$')
_offset_re = re.compile(r'^([^()]*)\(([^()]*)\)$')


@dataclass(frozen=True)
class Register:
    index: int

    @property
    def value(self) -> int:
        return self.index


@dataclass(frozen=True)
class Immediate:
    value: int
    bits: int


@dataclass(frozen=True)
class Text:
    value: str


Operand = Union[Register, Immediate, Text]


def split_offset(token: str) -> Tuple[str, str]:
    """
    Split an IMM(REG) token into its immediate and register texts

    @example: 8($SP) -> ('8', '$SP')
    """
    match = _offset_re.match(token.strip())
    if match is None or not match.group(2).strip():
        raise MalformedOffset(f'Can\'t parse offset "{token}".')
    return match.group(1).strip(), match.group(2).strip()


class OperandParser:
    """
    Operand parser bound to the symbol store of one assembly run
    """

    def __init__(self, symbols: SymbolStore):
        self.symbols = symbols

    def substitute(self, token: str) -> str:
        """Return the DEFINE replacement of token, or token itself"""
        replacement = self.symbols.get_user_macro(token.strip().upper())
        return token if replacement is None else replacement

    def parse(self, token: str, kind: OperandKind,
              all_operands: Optional[Sequence[str]] = None, position: int = 0,
              substitute: bool = True) -> Operand:
        """
        Parse one operand token as the expected kind

        A token naming a user macro is replaced by its text first; the
        replacement itself is not looked up again.
        """
        if substitute:
            replacement = self.symbols.get_user_macro(token.strip().upper())
            if replacement is not None:
                if all_operands is not None:
                    all_operands = list(all_operands)
                    all_operands[position] = replacement
                return self.parse(replacement, kind, all_operands, position, substitute=False)

        if kind == OperandKind.GP_REGISTER or kind == OperandKind.BASE:
            return Register(reg_to_index(token))
        if kind == OperandKind.COP0_REGISTER:
            return Register(cop0_reg_to_index(token))
        if kind in (OperandKind.NUMBER_16, OperandKind.NUMBER_24, OperandKind.NUMBER_5):
            bits = NUMBER_BITS[kind]
            return Immediate(self.parse_number_with_label_check(token) & ((1 << bits) - 1), bits)
        if kind == OperandKind.BRANCH_TARGET:
            return Immediate(self.parse_branch_target(token), 16)
        if kind == OperandKind.OFFSET:
            imm, _ = split_offset(token)
            return self.parse(imm, OperandKind.NUMBER_16)
        if kind == OperandKind.WORD:
            return Text(token.strip())
        if kind == OperandKind.STRING:
            return Text(self.parse_string(all_operands, position))
        if kind == OperandKind.REST:
            return Text(self.parse_rest(all_operands, position))

        raise SevereError(f'Expected type {kind.name} got "{token}" instead.')

    def parse_number(self, number: str) -> int:
        """
        Parse a numeric literal or the BASE keyword

        Tokens shorter than three characters are only tried as decimal.
        """
        number = number.strip().upper() if number else ''
        if not number:
            raise InvalidNumberLiteral("Number cannot be empty!")

        if number == 'BASE':
            return self.symbols.base

        if len(number) >= 3:
            prefix, digits = number[:2], number[2:]
            if prefix == '0X':
                if not is_hex_digits(digits):
                    raise InvalidNumberLiteral(f'"{number}" is not a valid Hex Number.')
                return int(digits, 16)
            if prefix == '0B':
                if not is_bin_digits(digits):
                    raise InvalidNumberLiteral(f'"{number}" is not a valid Binary Number.')
                return int(digits, 2)

        if not is_dec_literal(number):
            raise InvalidNumberLiteral(f'"{number}" is not a valid Integer Number.')
        return int(number, 10)

    def resolve_address(self, token: str) -> int:
        """Label address if token names a label, else the literal value"""
        token = token.strip().upper() if token else ''
        addr = self.symbols.try_get_label(token)
        if addr is not None:
            return addr
        return self.parse_number(token)

    def parse_number_with_label_check(self, number: str) -> int:
        try:
            return self.resolve_address(number)
        except InvalidNumberLiteral as e:
            if number and _identifier_re.match(number.strip()):
                raise UnresolvedLabel(f'{e.message} {LABEL_HINT}') from e
            raise

    def parse_branch_target(self, target: str) -> int:
        """
        Word displacement from the current output position to target
        """
        if not target or not target.strip():
            raise UnresolvedLabel("Branch Target cannot be empty!")

        try:
            addr = self.resolve_address(target)
        except InvalidNumberLiteral as e:
            raise UnresolvedLabel(f'{e.message} {LABEL_HINT}') from e

        return ((addr - self.symbols.data_count) >> 2) & 0xFFFF

    @staticmethod
    def parse_string(all_operands: Optional[Sequence[str]], position: int) -> str:
        """
        Collect a quoted string spread over split tokens
        """
        if all_operands is None:
            raise SevereError("No operand list supplied, impossible to parse a String.")

        first = all_operands[position]
        if not first.startswith('"'):
            raise ExpectedString(f'String expected, but "{first}" does not start with quotes.')

        parts: List[str] = []
        for i in range(position, len(all_operands)):
            part = all_operands[i]
            parts.append(part)
            closing = part[1:] if i == position else part
            if closing.endswith('"'):
                return ' '.join(parts)[1:-1]

        raise UnterminatedString(f'String starting with {first} is never closed.')

    @staticmethod
    def parse_rest(all_operands: Optional[Sequence[str]], position: int) -> str:
        if all_operands is None:
            raise SevereError("No operand list supplied, impossible to parse a String.")
        return ' '.join(all_operands[position:]).strip()
