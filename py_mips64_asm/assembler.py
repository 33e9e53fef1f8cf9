#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MIPS64 Assembler Core Implementation
"""

import logging
import struct
from collections import deque
from typing import Deque, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from .instruction import Instruction, InstructionEncoder, MIPS64Instructions
from .macro import Macro, MacroExpander, BuiltinMacros, MAX_MACRO_DEPTH, split_instruction
from .operand import OperandParser
from .preprocessor import Preprocessor, is_directive
from .source import read_source
from .symbols import SymbolStore
from .utils import SevereError, UnknownMnemonic, MacroRecursionError, assert_

log = logging.getLogger(__name__)

COMMENT_PREFIXES = (';', '#', '//')

# (address, word, source text, instruction description) for every encoded word
ListingEntry = Tuple[int, int, str, str]


def strip_comment(line: str) -> str:
    """
    Drop a trailing comment that is not inside a quoted string

    @example: 'NOP ; idle' -> 'NOP '
    """
    in_quotes = False
    for i, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif not in_quotes and line.startswith(COMMENT_PREFIXES, i):
            return line[:i]
    return line


def canonical(line: str) -> str:
    """Comment-free, trimmed, uppercase form of a source line"""
    return strip_comment(line).strip().upper()


def split_label(line: str) -> Tuple[Optional[str], str]:
    """
    Split a leading label declaration from the rest of the line

    @example: 'LOOP: ADDIU $T0, $T0, 1' -> ('LOOP', 'ADDIU $T0, $T0, 1')
    """
    parts = line.split(None, 1)
    if parts and len(parts[0]) >= 2 and parts[0].endswith(':'):
        return parts[0][:-1], parts[1].strip() if len(parts) > 1 else ''
    return None, line


class AsmProgram:
    """Assembled program"""

    def __init__(self, words: Iterable[int], labels: Dict[str, int],
                 child_labels: Dict[Tuple[str, str], int], base: int,
                 listing: List[ListingEntry]):
        self.words: Tuple[int, ...] = tuple(words)
        self.labels = dict(labels)                  # label name -> address
        self.child_labels = dict(child_labels)      # (owner, .name) -> address
        self.base = base
        self.listing = list(listing)

    @property
    def total_size(self) -> int:
        """Size in bytes"""
        return len(self.words) * 4

    def to_bytes(self) -> bytes:
        """Words as concatenated 32-bit big-endian bytes"""
        return struct.pack(f'>{len(self.words)}I', *self.words)

    def to_hex(self, zero_x: bool = True) -> List[str]:
        prefix = '0x' if zero_x else ''
        return [f'{prefix}{word:08x}' for word in self.words]


class Assembler:
    """
    MIPS64 two-pass assembler

    Pass 1 applies directives and assigns label addresses by counting
    instructions; pass 2 encodes. Each call to assemble starts from a clean
    state, so one instance can be reused.
    """

    def __init__(self, instructions: Mapping[str, Instruction] = MIPS64Instructions,
                 macros: Mapping[str, Macro] = BuiltinMacros):
        self.instructions = instructions
        self.macros = macros
        self.reset()

    def reset(self) -> None:
        self.symbols = SymbolStore()
        self.parser = OperandParser(self.symbols)
        self.encoder = InstructionEncoder(self.symbols, self.parser, self.instructions)
        self.expander = MacroExpander(self.macros)
        self.preprocessor = Preprocessor(self.symbols, self.parser)
        self.pc = 0                                 # pass 1 instruction counter
        self.listing: List[ListingEntry] = []

    def assemble(self, source: Union[str, Iterable[str]]) -> AsmProgram:
        """
        Assemble source text or an ordered sequence of lines
        """
        lines = source.splitlines() if isinstance(source, str) else list(source)
        self.reset()

        self._first_pass(lines)
        log.debug("pass 1: %d instructions, %d labels, base 0x%04x",
                  self.pc, len(self.symbols.global_labels) + len(self.symbols.child_labels),
                  self.symbols.base)

        self._second_pass(lines)
        assert_(self.symbols.data_count == self.pc * 4,
                f"Pass 2 emitted {len(self.symbols.words)} words, pass 1 counted {self.pc}")
        log.debug("pass 2: %d words", len(self.symbols.words))

        return AsmProgram(
            self.symbols.words, self.symbols.global_labels, self.symbols.child_labels,
            self.symbols.base, self.listing
        )

    def assemble_file(self, path: str) -> AsmProgram:
        """Assemble a file, resolving !INCLUDE lines"""
        return self.assemble(read_source(path))

    def _first_pass(self, lines: List[str]) -> None:
        for line_no, line in enumerate(lines, 1):
            text = canonical(line)
            if not text:
                continue
            try:
                self._account(text)
            except SevereError as e:
                raise e.at_line(line_no, line)

    def _account(self, text: str) -> None:
        """Apply directives, record labels and advance the counter"""
        if self.preprocessor.process(text):
            return

        label, text = split_label(text)
        if label is not None:
            if label.startswith('.'):
                self.symbols.add_child_label(label, self.pc * 4)
            else:
                self.symbols.add_global_label(label, self.pc * 4)
            if not text or self.preprocessor.process(text):
                return

        mnemonic, _ = split_instruction(text)
        if self.encoder.is_instruction(mnemonic):
            self.pc += 1
        elif self.expander.is_macro(mnemonic):
            self.pc += self.expander.count(mnemonic, self.encoder.is_instruction)
        else:
            raise UnknownMnemonic(f'Failed to parse "{text}": unknown mnemonic "{mnemonic}".')

    def _second_pass(self, lines: List[str]) -> None:
        self.symbols.enter_scope('')
        for line_no, line in enumerate(lines, 1):
            text = canonical(line)
            if not text or is_directive(text):
                continue

            label, text = split_label(text)
            if label is not None:
                if not label.startswith('.'):
                    self.symbols.enter_scope(label)
                if not text or is_directive(text):
                    continue

            try:
                self._emit(text)
            except SevereError as e:
                raise e.at_line(line_no, line)

    def _emit(self, text: str) -> None:
        """
        Encode one line, expanding macros through a work queue

        Expanded lines go to the front of the queue so they are encoded in
        template order before anything that followed the macro.
        """
        pending: Deque[Tuple[str, int]] = deque([(text, 0)])
        while pending:
            line, depth = pending.popleft()
            mnemonic, args = split_instruction(line)

            if self.encoder.is_instruction(mnemonic):
                addr = self.symbols.data_count
                word = self.encoder.encode(mnemonic, args)
                ins = self.encoder.lookup(mnemonic)
                self.listing.append((addr, word, line, f"{ins.desc}: {ins.pseudo}"))
            elif self.expander.is_macro(mnemonic):
                assert_(depth < MAX_MACRO_DEPTH,
                        f'Macro "{mnemonic}" nests deeper than {MAX_MACRO_DEPTH} levels.',
                        MacroRecursionError)
                expanded = self.expander.expand(mnemonic, args)
                pending.extendleft(reversed([(sub, depth + 1) for sub in expanded]))
            else:
                raise UnknownMnemonic(f'Failed to parse "{line}": unknown mnemonic "{mnemonic}".')
