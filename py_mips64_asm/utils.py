#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utilities for MIPS64 Assembler
"""

from typing import Optional


class SevereError(Exception):
    """Custom exception for MIPS64 Assembler"""

    def __init__(self, message: str = None):
        super().__init__(message)
        self.message = message
        self.line: Optional[str] = None
        self.line_no: Optional[int] = None

    def at_line(self, line_no: int, line: str) -> 'SevereError':
        """Attach the source line the error was raised for (first one wins)"""
        if self.line is None:
            self.line_no = line_no
            self.line = line
        return self

    def __str__(self) -> str:
        if self.line is None:
            return str(self.message)
        return f"{self.message} (line {self.line_no}: {self.line.strip()})"


class UnknownMnemonic(SevereError):
    """Mnemonic is neither an instruction nor a macro"""
    pass


class UnknownDirective(SevereError):
    """Bracketed directive name is not in the directive table"""
    pass


class UnknownMacro(SevereError):
    """Macro name is not in the macro table"""
    pass


class WrongArgumentCount(SevereError):
    """Written argument count does not match the expected count"""
    pass


class WrongInstructionArity(WrongArgumentCount):
    pass


class WrongMacroArity(WrongArgumentCount):
    pass


class WrongDirectiveArity(WrongArgumentCount):
    pass


class UnknownRegister(SevereError):
    pass


class InvalidNumberLiteral(SevereError):
    pass


class UnresolvedLabel(SevereError):
    """Operand is neither a known label nor a valid literal"""
    pass


class UnscopedChildLabel(SevereError):
    """Child label declared before any global label"""
    pass


class DuplicateLabel(SevereError):
    pass


class DuplicateMacro(SevereError):
    pass


class MalformedOffset(SevereError):
    pass


class ExpectedString(SevereError):
    pass


class UnterminatedString(SevereError):
    pass


class MacroRecursionError(SevereError):
    pass


class IncludeError(SevereError):
    pass


def assert_(ensure: bool, hint: str = None, error: type = SevereError) -> None:
    """
    Ensure condition is true, else throw SevereError (or the given subclass)
    """
    if not ensure:
        raise error(hint)


def dec_to_bin(dec: int, length: int) -> str:
    """
    Convert decimal to binary with padding, two's complement for negatives
    """
    if dec < 0:
        dec = (1 << length) + dec
    return bin(dec)[2:].zfill(length)[-length:]


def is_hex_digits(text: str) -> bool:
    return bool(text) and all(c in '0123456789abcdefABCDEF' for c in text)


def is_bin_digits(text: str) -> bool:
    return bool(text) and all(c in '01' for c in text)


def is_dec_literal(text: str) -> bool:
    """Optionally signed run of decimal digits"""
    if text[:1] in ('-', '+'):
        text = text[1:]
    return bool(text) and all(c in '0123456789' for c in text)
