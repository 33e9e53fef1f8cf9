import sys
import os
import unittest

# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from py_mips64_asm.operand import (
    OperandParser, OperandKind, Register, Immediate, Text, split_offset
)
from py_mips64_asm.symbols import SymbolStore
from py_mips64_asm.utils import (
    UnknownRegister, InvalidNumberLiteral, UnresolvedLabel, MalformedOffset,
    ExpectedString, UnterminatedString, UnscopedChildLabel, DuplicateLabel
)


class TestOperandParser(unittest.TestCase):
    def setUp(self):
        self.symbols = SymbolStore()
        self.parser = OperandParser(self.symbols)

    def parse(self, token, kind):
        return self.parser.parse(token, kind)

    def test_registers(self):
        self.assertEqual(self.parse('$T0', OperandKind.GP_REGISTER), Register(8))
        self.assertEqual(self.parse('$sp', OperandKind.GP_REGISTER), Register(29))
        self.assertEqual(self.parse('$AT', OperandKind.GP_REGISTER), Register(1))
        self.assertEqual(self.parse('$RA', OperandKind.GP_REGISTER), Register(31))
        self.assertEqual(self.parse('$zero', OperandKind.GP_REGISTER), Register(0))
        self.assertEqual(self.parse('$FP', OperandKind.GP_REGISTER), Register(30))
        self.assertEqual(self.parse('$31', OperandKind.GP_REGISTER), Register(31))
        self.assertEqual(self.parse('$EPC', OperandKind.COP0_REGISTER), Register(14))
        self.assertEqual(self.parse('$ErrorEPC', OperandKind.COP0_REGISTER), Register(30))

    def test_unknown_registers(self):
        for token in ('$T10', 'T0', '$32', '', '$'):
            with self.subTest(token=token):
                with self.assertRaises(UnknownRegister):
                    self.parse(token, OperandKind.GP_REGISTER)
        with self.assertRaises(UnknownRegister):
            self.parse('$T0', OperandKind.COP0_REGISTER)

    def test_number_literals(self):
        self.assertEqual(self.parser.parse_number('42'), 42)
        self.assertEqual(self.parser.parse_number('100'), 100)
        self.assertEqual(self.parser.parse_number('0x1F'), 31)
        self.assertEqual(self.parser.parse_number('0XfF'), 255)
        self.assertEqual(self.parser.parse_number('0b101'), 5)
        self.assertEqual(self.parser.parse_number(' 7 '), 7)
        self.assertEqual(self.parser.parse_number('-1'), -1)

    def test_invalid_number_literals(self):
        for token in ('', '   ', '0x', '0b', '0xZZ', '0b102', '12a', '1_0', '0x1_0'):
            with self.subTest(token=token):
                with self.assertRaises(InvalidNumberLiteral):
                    self.parser.parse_number(token)

    def test_masking_per_kind(self):
        self.assertEqual(self.parse('-1', OperandKind.NUMBER_16), Immediate(0xFFFF, 16))
        self.assertEqual(self.parse('0x1234567', OperandKind.NUMBER_24), Immediate(0x234567, 24))
        self.assertEqual(self.parse('33', OperandKind.NUMBER_5), Immediate(1, 5))

    def test_base_keyword(self):
        self.assertEqual(self.parse('BASE', OperandKind.NUMBER_16), Immediate(0, 16))
        self.symbols.set_base(0x8000)
        self.assertEqual(self.parse('base', OperandKind.NUMBER_16), Immediate(0x8000, 16))

    def test_label_wins_over_literal(self):
        self.symbols.add_global_label('LOOP', 0x40)
        self.assertEqual(self.parse('loop', OperandKind.NUMBER_16), Immediate(0x40, 16))

    def test_unresolved_label(self):
        with self.assertRaises(UnresolvedLabel) as cm:
            self.parse('NOWHERE', OperandKind.NUMBER_16)
        self.assertIn("Label that doesn't exist", str(cm.exception))

    def test_branch_target_displacement(self):
        self.symbols.add_global_label('LOOP', 0)
        self.symbols.words.extend([0, 0, 0, 0])
        self.assertEqual(self.parse('LOOP', OperandKind.BRANCH_TARGET), Immediate(0xFFFC, 16))

        self.symbols.add_global_label('AHEAD', 40)
        self.assertEqual(self.parse('AHEAD', OperandKind.BRANCH_TARGET), Immediate(6, 16))

    def test_branch_target_unresolved(self):
        for token in ('MISSING', '0xZZ', ''):
            with self.subTest(token=token):
                with self.assertRaises(UnresolvedLabel) as cm:
                    self.parse(token, OperandKind.BRANCH_TARGET)
                if token:
                    self.assertIn("Perhaps", str(cm.exception))

    def test_child_label_scope(self):
        with self.assertRaises(UnscopedChildLabel):
            self.symbols.add_child_label('.LOOP', 0)
        self.symbols.add_global_label('MAIN', 0)
        self.symbols.add_child_label('.LOOP', 8)
        self.assertEqual(self.parse('.LOOP', OperandKind.NUMBER_16), Immediate(8, 16))
        with self.assertRaises(DuplicateLabel):
            self.symbols.add_child_label('.LOOP', 12)

        self.symbols.enter_scope('OTHER')
        with self.assertRaises(UnresolvedLabel):
            self.parse('.LOOP', OperandKind.NUMBER_16)

    def test_offset(self):
        self.assertEqual(split_offset('8($SP)'), ('8', '$SP'))
        self.assertEqual(split_offset(' -4 ( $T0 ) '), ('-4', '$T0'))
        self.assertEqual(self.parse('-4($T0)', OperandKind.OFFSET), Immediate(0xFFFC, 16))
        self.assertEqual(self.parse('$SP', OperandKind.BASE), Register(29))

    def test_malformed_offset(self):
        for token in ('8', '8$SP', '8()', '8($SP', '8(($SP))', '8($SP)x'):
            with self.subTest(token=token):
                with self.assertRaises(MalformedOffset):
                    self.parse(token, OperandKind.OFFSET)

    def test_strings(self):
        self.assertEqual(OperandParser.parse_string(['"hello', 'world"'], 0), 'hello world')
        self.assertEqual(OperandParser.parse_string(['x', '"a.asm"', 'y'], 1), 'a.asm')
        with self.assertRaises(UnterminatedString):
            OperandParser.parse_string(['"abc', 'def'], 0)
        with self.assertRaises(UnterminatedString):
            OperandParser.parse_string(['"'], 0)
        with self.assertRaises(ExpectedString):
            OperandParser.parse_string(['abc'], 0)

    def test_rest_and_word(self):
        operands = ['FOO', '$T1', 'AND', 'MORE']
        self.assertEqual(self.parser.parse('FOO', OperandKind.WORD, operands, 0), Text('FOO'))
        self.assertEqual(self.parser.parse('$T1', OperandKind.REST, operands, 1), Text('$T1 AND MORE'))

    def test_user_macro_substitution(self):
        """A DEFINE name may stand in for any operand, registers included"""
        self.symbols.add_user_macro('FOO', '$T1')
        self.symbols.add_user_macro('COUNT', '0x10')
        self.assertEqual(self.parse('foo', OperandKind.GP_REGISTER), Register(9))
        self.assertEqual(self.parse('COUNT', OperandKind.NUMBER_16), Immediate(16, 16))

    def test_user_macro_single_level(self):
        self.symbols.add_user_macro('A', 'B')
        self.symbols.add_user_macro('B', '$T0')
        with self.assertRaises(UnknownRegister):
            self.parse('A', OperandKind.GP_REGISTER)


if __name__ == '__main__':
    unittest.main()
