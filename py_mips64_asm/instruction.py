#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MIPS64 Instruction Definitions
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple
from .operand import OperandKind, OperandParser, Operand, split_offset
from .symbols import SymbolStore
from .utils import UnknownMnemonic, WrongInstructionArity, assert_, dec_to_bin

log = logging.getLogger(__name__)


class Field(Enum):
    """
    Bitfield an operand is placed into: (shift, mask)
    """
    RS = (21, 0x1F)
    RT = (16, 0x1F)
    RD = (11, 0x1F)
    SA = (6, 0x1F)
    IMM = (0, 0xFFFF)
    TARGET = (0, 0xFFFFFF)

    def __init__(self, shift: int, mask: int):
        self.shift = shift
        self.mask = mask

    def place(self, value: int) -> int:
        return (value & self.mask) << self.shift


class Instruction:
    """
    Instruction descriptor: base pattern plus operand kinds and placements
    """

    def __init__(self, symbol: str, desc: str, pseudo: str, base: int,
                 kinds: Sequence[OperandKind], fields: Sequence[Field]):
        assert_(len(kinds) == len(fields),
                f'Instruction "{symbol}" has {len(kinds)} kinds for {len(fields)} fields.')
        self._symbol = symbol      # Instruction mnemonic
        self._desc = desc          # Instruction description
        self._pseudo = pseudo      # Instruction pseudocode
        self._base = base          # Fixed opcode/function bits
        self._kinds = tuple(kinds)
        self._fields = tuple(fields)

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def desc(self) -> str:
        return self._desc

    @property
    def pseudo(self) -> str:
        return self._pseudo

    @property
    def base(self) -> int:
        return self._base

    @property
    def kinds(self) -> Tuple[OperandKind, ...]:
        return self._kinds

    @property
    def fields(self) -> Tuple[Field, ...]:
        return self._fields

    @property
    def has_offset(self) -> bool:
        return OperandKind.OFFSET in self._kinds

    @property
    def written_count(self) -> int:
        """Number of comma separated operands written in source"""
        return len(self._kinds) - 1 if self.has_offset else len(self._kinds)

    def pack(self, operands: Sequence[Operand]) -> int:
        """
        OR every operand into its field on top of the base pattern
        """
        word = self._base
        for field, operand in zip(self._fields, operands):
            word |= field.place(operand.value)
        return word & 0xFFFFFFFF

    def __repr__(self) -> str:
        return f"Instruction({self._symbol}, {self._base:#010x})"


_instructions: Dict[str, Instruction] = {}


def new_instruction(symbol: str, desc: str, pseudo: str, base: int,
                    operands: List[Tuple[OperandKind, Field]]) -> None:
    """
    Add a new instruction to the table
    """
    assert_(symbol not in _instructions, f'Instruction "{symbol}" is defined twice.')
    _instructions[symbol] = Instruction(
        symbol, desc, pseudo, base,
        [kind for kind, _ in operands], [field for _, field in operands]
    )


GPR = OperandKind.GP_REGISTER
COP0 = OperandKind.COP0_REGISTER
IMM16 = OperandKind.NUMBER_16
IMM24 = OperandKind.NUMBER_24
IMM5 = OperandKind.NUMBER_5
BRANCH = OperandKind.BRANCH_TARGET
OFFSET = OperandKind.OFFSET
BASE = OperandKind.BASE

# Operand layouts shared by whole instruction groups
R3 = [(GPR, Field.RD), (GPR, Field.RS), (GPR, Field.RT)]           # rd, rs, rt
R3V = [(GPR, Field.RD), (GPR, Field.RT), (GPR, Field.RS)]          # rd, rt, rs
SHIFT = [(GPR, Field.RD), (GPR, Field.RT), (IMM5, Field.SA)]       # rd, rt, sa
IMMED = [(GPR, Field.RT), (GPR, Field.RS), (IMM16, Field.IMM)]     # rt, rs, imm
MEM = [(GPR, Field.RT), (OFFSET, Field.IMM), (BASE, Field.RS)]     # rt, offset(base)
HILO = [(GPR, Field.RS), (GPR, Field.RT)]                          # rs, rt
BRANCH2 = [(GPR, Field.RS), (GPR, Field.RT), (BRANCH, Field.IMM)]  # rs, rt, target
BRANCH1 = [(GPR, Field.RS), (BRANCH, Field.IMM)]                   # rs, target
MOVC0 = [(GPR, Field.RT), (COP0, Field.RD)]                        # rt, cop0 rd


# =================== Other Instructions ===================

new_instruction('NOP', 'No Operation', 'None', 0x00000000, [])
new_instruction('SYNC', 'Synchronize Shared Memory', 'Order loads and stores', 0x0000000F, [])
new_instruction('SYSCALL', 'System Call', 'SystemCallException', 0x0000000C, [])
new_instruction('BREAK', 'Breakpoint', 'BreakpointException', 0x0000000D, [])
new_instruction('ERET', 'Exception Return', 'PC=EPC; Restore Status', 0x42000018, [])

# =================== Load / Store Instructions ===================

new_instruction('LB', 'Load Byte', '(rt)=SignExt(Mem8[(rs)+imm])', 0x80000000, MEM)
new_instruction('LBU', 'Load Byte Unsigned', '(rt)=ZeroExt(Mem8[(rs)+imm])', 0x90000000, MEM)
new_instruction('LD', 'Load Doubleword', '(rt)=Mem64[(rs)+imm]', 0xDC000000, MEM)
new_instruction('LDL', 'Load Doubleword Left', 'Merge Mem64[(rs)+imm] into (rt) high', 0x68000000, MEM)
new_instruction('LDR', 'Load Doubleword Right', 'Merge Mem64[(rs)+imm] into (rt) low', 0x6C000000, MEM)
new_instruction('LH', 'Load Halfword', '(rt)=SignExt(Mem16[(rs)+imm])', 0x84000000, MEM)
new_instruction('LHU', 'Load Halfword Unsigned', '(rt)=ZeroExt(Mem16[(rs)+imm])', 0x94000000, MEM)
new_instruction('LL', 'Load Linked Word', '(rt)=Mem32[(rs)+imm]; LLbit=1', 0xC0000000, MEM)
new_instruction('LLD', 'Load Linked Doubleword', '(rt)=Mem64[(rs)+imm]; LLbit=1', 0xD0000000, MEM)
new_instruction('LW', 'Load Word', '(rt)=SignExt(Mem32[(rs)+imm])', 0x8C000000, MEM)
new_instruction('LWL', 'Load Word Left', 'Merge Mem32[(rs)+imm] into (rt) high', 0x88000000, MEM)
new_instruction('LWR', 'Load Word Right', 'Merge Mem32[(rs)+imm] into (rt) low', 0x98000000, MEM)
new_instruction('LWU', 'Load Word Unsigned', '(rt)=ZeroExt(Mem32[(rs)+imm])', 0x9C000000, MEM)
new_instruction('SB', 'Store Byte', 'Mem8[(rs)+imm]=(rt)', 0xA0000000, MEM)
new_instruction('SC', 'Store Conditional Word', 'if LLbit: Mem32[(rs)+imm]=(rt)', 0xE0000000, MEM)
new_instruction('SCD', 'Store Conditional Doubleword', 'if LLbit: Mem64[(rs)+imm]=(rt)', 0xF0000000, MEM)
new_instruction('SD', 'Store Doubleword', 'Mem64[(rs)+imm]=(rt)', 0xFC000000, MEM)
new_instruction('SDL', 'Store Doubleword Left', 'Mem64[(rs)+imm] high=(rt)', 0xB0000000, MEM)
new_instruction('SDR', 'Store Doubleword Right', 'Mem64[(rs)+imm] low=(rt)', 0xB4000000, MEM)
new_instruction('SH', 'Store Halfword', 'Mem16[(rs)+imm]=(rt)', 0xA4000000, MEM)
new_instruction('SW', 'Store Word', 'Mem32[(rs)+imm]=(rt)', 0xAC000000, MEM)
new_instruction('SWL', 'Store Word Left', 'Mem32[(rs)+imm] high=(rt)', 0xA8000000, MEM)
new_instruction('SWR', 'Store Word Right', 'Mem32[(rs)+imm] low=(rt)', 0xB8000000, MEM)

# =================== Arithmetic / Logic Instructions ===================

new_instruction('ADD', 'Add', '(rd)=(rs)+(rt)', 0x00000020, R3)
new_instruction('ADDU', 'Add Unsigned', '(rd)=(rs)+(rt)', 0x00000021, R3)
new_instruction('ADDI', 'Add Immediate', '(rt)=(rs)+SignExt(imm)', 0x20000000, IMMED)
new_instruction('ADDIU', 'Add Immediate Unsigned', '(rt)=(rs)+SignExt(imm)', 0x24000000, IMMED)
new_instruction('AND', 'And', '(rd)=(rs)&(rt)', 0x00000024, R3)
new_instruction('ANDI', 'And Immediate', '(rt)=(rs)&ZeroExt(imm)', 0x30000000, IMMED)
new_instruction('OR', 'Or', '(rd)=(rs)|(rt)', 0x00000025, R3)
new_instruction('ORI', 'Or Immediate', '(rt)=(rs)|ZeroExt(imm)', 0x34000000, IMMED)
new_instruction('XOR', 'Exclusive Or', '(rd)=(rs)^(rt)', 0x00000026, R3)
new_instruction('XORI', 'Exclusive Or Immediate', '(rt)=(rs)^ZeroExt(imm)', 0x38000000, IMMED)
new_instruction('NOR', 'Nor', '(rd)=~((rs)|(rt))', 0x00000027, R3)
new_instruction('SLT', 'Set on Less Than', '(rd)=(rs)<(rt)', 0x0000002A, R3)
new_instruction('SLTU', 'Set on Less Than Unsigned', '(rd)=(rs)<(rt)', 0x0000002B, R3)
new_instruction('SLTI', 'Set on Less Than Immediate', '(rt)=(rs)<SignExt(imm)', 0x28000000, IMMED)
new_instruction('SLTIU', 'Set on Less Than Immediate Unsigned', '(rt)=(rs)<SignExt(imm)', 0x2C000000, IMMED)
new_instruction('SUB', 'Subtract', '(rd)=(rs)-(rt)', 0x00000022, R3)
new_instruction('SUBU', 'Subtract Unsigned', '(rd)=(rs)-(rt)', 0x00000023, R3)
new_instruction('LUI', 'Load Upper Immediate', '(rt)=imm<<16', 0x3C000000,
                [(GPR, Field.RT), (IMM16, Field.IMM)])

# =================== Doubleword Arithmetic ===================

new_instruction('DADD', 'Doubleword Add', '(rd)=(rs)+(rt)', 0x0000002C, R3)
new_instruction('DADDU', 'Doubleword Add Unsigned', '(rd)=(rs)+(rt)', 0x0000002D, R3)
new_instruction('DADDI', 'Doubleword Add Immediate', '(rt)=(rs)+SignExt(imm)', 0x60000000, IMMED)
new_instruction('DADDIU', 'Doubleword Add Immediate Unsigned', '(rt)=(rs)+SignExt(imm)', 0x64000000, IMMED)
new_instruction('DSUB', 'Doubleword Subtract', '(rd)=(rs)-(rt)', 0x0000002E, R3)
new_instruction('DSUBU', 'Doubleword Subtract Unsigned', '(rd)=(rs)-(rt)', 0x0000002F, R3)

# =================== Multiply / Divide ===================

new_instruction('MULT', 'Multiply', '(HI,LO)=(rs)*(rt)', 0x00000018, HILO)
new_instruction('MULTU', 'Multiply Unsigned', '(HI,LO)=(rs)*(rt)', 0x00000019, HILO)
new_instruction('DIV', 'Divide', 'LO=(rs)/(rt); HI=(rs)%(rt)', 0x0000001A, HILO)
new_instruction('DIVU', 'Divide Unsigned', 'LO=(rs)/(rt); HI=(rs)%(rt)', 0x0000001B, HILO)
new_instruction('DMULT', 'Doubleword Multiply', '(HI,LO)=(rs)*(rt)', 0x0000001C, HILO)
new_instruction('DMULTU', 'Doubleword Multiply Unsigned', '(HI,LO)=(rs)*(rt)', 0x0000001D, HILO)
new_instruction('DDIV', 'Doubleword Divide', 'LO=(rs)/(rt); HI=(rs)%(rt)', 0x0000001E, HILO)
new_instruction('DDIVU', 'Doubleword Divide Unsigned', 'LO=(rs)/(rt); HI=(rs)%(rt)', 0x0000001F, HILO)
new_instruction('MFHI', 'Move From HI', '(rd)=HI', 0x00000010, [(GPR, Field.RD)])
new_instruction('MFLO', 'Move From LO', '(rd)=LO', 0x00000012, [(GPR, Field.RD)])
new_instruction('MTHI', 'Move To HI', 'HI=(rs)', 0x00000011, [(GPR, Field.RS)])
new_instruction('MTLO', 'Move To LO', 'LO=(rs)', 0x00000013, [(GPR, Field.RS)])

# =================== Shift Instructions ===================

new_instruction('SLL', 'Shift Left Logical', '(rd)=(rt)<<sa', 0x00000000, SHIFT)
new_instruction('SRL', 'Shift Right Logical', '(rd)=(rt)>>sa', 0x00000002, SHIFT)
new_instruction('SRA', 'Shift Right Arithmetic', '(rd)=(rt)>>>sa', 0x00000003, SHIFT)
new_instruction('SLLV', 'Shift Left Logical Variable', '(rd)=(rt)<<(rs)', 0x00000004, R3V)
new_instruction('SRLV', 'Shift Right Logical Variable', '(rd)=(rt)>>(rs)', 0x00000006, R3V)
new_instruction('SRAV', 'Shift Right Arithmetic Variable', '(rd)=(rt)>>>(rs)', 0x00000007, R3V)
new_instruction('DSLL', 'Doubleword Shift Left Logical', '(rd)=(rt)<<sa', 0x00000038, SHIFT)
new_instruction('DSRL', 'Doubleword Shift Right Logical', '(rd)=(rt)>>sa', 0x0000003A, SHIFT)
new_instruction('DSRA', 'Doubleword Shift Right Arithmetic', '(rd)=(rt)>>>sa', 0x0000003B, SHIFT)
new_instruction('DSLL32', 'Doubleword Shift Left Logical Plus 32', '(rd)=(rt)<<(sa+32)', 0x0000003C, SHIFT)
new_instruction('DSRL32', 'Doubleword Shift Right Logical Plus 32', '(rd)=(rt)>>(sa+32)', 0x0000003E, SHIFT)
new_instruction('DSRA32', 'Doubleword Shift Right Arithmetic Plus 32', '(rd)=(rt)>>>(sa+32)', 0x0000003F, SHIFT)
new_instruction('DSLLV', 'Doubleword Shift Left Logical Variable', '(rd)=(rt)<<(rs)', 0x00000014, R3V)
new_instruction('DSRLV', 'Doubleword Shift Right Logical Variable', '(rd)=(rt)>>(rs)', 0x00000016, R3V)
new_instruction('DSRAV', 'Doubleword Shift Right Arithmetic Variable', '(rd)=(rt)>>>(rs)', 0x00000017, R3V)

# =================== Branch Instructions ===================

new_instruction('BEQ', 'Branch on Equal', 'if (rs==rt) PC=PC+imm*4', 0x10000000, BRANCH2)
new_instruction('BNE', 'Branch on Not Equal', 'if (rs!=rt) PC=PC+imm*4', 0x14000000, BRANCH2)
new_instruction('BLEZ', 'Branch on Less or Equal Zero', 'if (rs<=0) PC=PC+imm*4', 0x18000000, BRANCH1)
new_instruction('BGTZ', 'Branch on Greater Than Zero', 'if (rs>0) PC=PC+imm*4', 0x1C000000, BRANCH1)
new_instruction('BLTZ', 'Branch on Less Than Zero', 'if (rs<0) PC=PC+imm*4', 0x04000000, BRANCH1)
new_instruction('BGEZ', 'Branch on Greater or Equal Zero', 'if (rs>=0) PC=PC+imm*4', 0x04010000, BRANCH1)
new_instruction('BLTZAL', 'Branch on Less Than Zero and Link', 'R31=PC+8; if (rs<0) PC=PC+imm*4',
                0x04100000, BRANCH1)
new_instruction('BGEZAL', 'Branch on Greater or Equal Zero and Link', 'R31=PC+8; if (rs>=0) PC=PC+imm*4',
                0x04110000, BRANCH1)

# =================== Jump Instructions ===================

new_instruction('J', 'Jump', 'PC=PC[63:26]||target||00', 0x08000000, [(IMM24, Field.TARGET)])
new_instruction('JAL', 'Jump and Link', 'R31=PC+8; PC=PC[63:26]||target||00', 0x0C000000,
                [(IMM24, Field.TARGET)])
new_instruction('JR', 'Jump Register', 'PC=(rs)', 0x00000008, [(GPR, Field.RS)])
# rd fixed to $RA
new_instruction('JALR', 'Jump and Link Register', 'R31=PC+8; PC=(rs)', 0x0000F809, [(GPR, Field.RS)])

# =================== Coprocessor 0 ===================

new_instruction('MFC0', 'Move From Coprocessor 0', '(rt)=CP0[rd]', 0x40000000, MOVC0)
new_instruction('MTC0', 'Move To Coprocessor 0', 'CP0[rd]=(rt)', 0x40800000, MOVC0)
new_instruction('DMFC0', 'Doubleword Move From Coprocessor 0', '(rt)=CP0[rd]', 0x40200000, MOVC0)
new_instruction('DMTC0', 'Doubleword Move To Coprocessor 0', 'CP0[rd]=(rt)', 0x40A00000, MOVC0)


# Read-only view of the table, shared by every assembly run
MIPS64Instructions: Mapping[str, Instruction] = MappingProxyType(_instructions)


class InstructionEncoder:
    """
    Encodes real instructions into the symbol store's word stream
    """

    def __init__(self, symbols: SymbolStore, parser: OperandParser,
                 table: Mapping[str, Instruction] = MIPS64Instructions):
        self.symbols = symbols
        self.parser = parser
        self.table = table

    def is_instruction(self, mnemonic: str) -> bool:
        return mnemonic.upper() in self.table

    def lookup(self, mnemonic: str) -> Instruction:
        ins = self.table.get(mnemonic.upper())
        if ins is None:
            raise UnknownMnemonic(f'Unknown instruction "{mnemonic}".')
        return ins

    def parse_operands(self, ins: Instruction, args: Sequence[str]) -> List[Operand]:
        """
        Parse written operands in descriptor order

        An OFFSET operand is one written token that yields two operands:
        the immediate and the base register inside the parentheses.
        """
        if len(args) != ins.written_count:
            raise WrongInstructionArity(
                f'Instruction "{ins.symbol}" needs {ins.written_count} arguments, got {len(args)}.'
            )

        operands: List[Operand] = []
        kinds = [kind for kind in ins.kinds if kind != OperandKind.BASE]
        for i, kind in enumerate(kinds):
            operands.append(self.parser.parse(args[i], kind, args, i))
            if kind == OperandKind.OFFSET:
                _, reg = split_offset(self.parser.substitute(args[i]))
                operands.append(self.parser.parse(reg, OperandKind.BASE))
        return operands

    def encode(self, mnemonic: str, args: Sequence[str]) -> int:
        """
        Encode one instruction and append it to the output words
        """
        ins = self.lookup(mnemonic)
        word = ins.pack(self.parse_operands(ins, args))

        log.debug("0x%x: %s", self.symbols.data_count, dec_to_bin(word, 32))

        self.symbols.add_word(word)
        return word
