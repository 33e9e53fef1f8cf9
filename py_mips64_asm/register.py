#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MIPS64 Register Definitions
"""

from typing import List, Dict
from .utils import UnknownRegister


# General purpose register names in order
register_names = [
    'R0', 'AT',
    'V0', 'V1',
    'A0', 'A1', 'A2', 'A3',
    'T0', 'T1', 'T2', 'T3', 'T4', 'T5', 'T6', 'T7',
    'S0', 'S1', 'S2', 'S3', 'S4', 'S5', 'S6', 'S7',
    'T8', 'T9',
    'K0', 'K1',
    'GP', 'SP', 'S8',
    'RA',
]

# Common aliases accepted besides the canonical names
register_aliases = {
    'ZERO': 0,
    'FP': 30,
}

# Coprocessor 0 (system control) register names in order
cop0_register_names = [
    'INDEX', 'RANDOM', 'ENTRYLO0', 'ENTRYLO1',
    'CONTEXT', 'PAGEMASK', 'WIRED', 'RSVD0',
    'BADVADDR', 'COUNT', 'ENTRYHI', 'COMPARE',
    'STATUS', 'CAUSE', 'EPC', 'PREVID',
    'CONFIG', 'LLADDR', 'WATCHLO', 'WATCHHI',
    'XCONTEXT', 'RSVD1', 'RSVD2', 'RSVD3',
    'RSVD4', 'RSVD5', 'PERR', 'CACHEERR',
    'TAGLO', 'TAGHI', 'ERROREPC', 'RSVD6',
]


def _build_lookup(names: List[str], aliases: Dict[str, int] = None) -> Dict[str, int]:
    lookup = {f'${name}': index for index, name in enumerate(names)}
    for name, index in (aliases or {}).items():
        lookup[f'${name}'] = index
    return lookup


_gp_lookup = _build_lookup(register_names, register_aliases)
_cop0_lookup = _build_lookup(cop0_register_names)


def _reg_to_index(reg: str, lookup: Dict[str, int], kind: str) -> int:
    reg = reg.strip().upper()

    index = lookup.get(reg)
    if index is not None:
        return index

    # Numeric form: $0 .. $31
    number = reg[1:]
    if reg.startswith('$') and number.isdigit() and int(number) <= 31:
        return int(number)

    raise UnknownRegister(f'Expected {kind} register, got "{reg}" instead.')


def reg_to_index(reg: str) -> int:
    """
    Convert general purpose register name/number to its index

    @example: $T0, $t0, $8, $SP, $ra
    """
    return _reg_to_index(reg, _gp_lookup, 'general purpose')


def cop0_reg_to_index(reg: str) -> int:
    """
    Convert coprocessor 0 register name/number to its index

    @example: $STATUS, $epc, $12
    """
    return _reg_to_index(reg, _cop0_lookup, 'COP0')
