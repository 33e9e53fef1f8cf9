import sys
import os
import tempfile
import unittest

# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from py_mips64_asm.assembler import Assembler
from py_mips64_asm.convert import program_to_coe, program_to_listing, write_raw, write_hex
from py_mips64_asm.main import main
from py_mips64_asm.source import read_source, parse_include
from py_mips64_asm.utils import IncludeError, SevereError, UnknownDirective


class TestSourceAndOutput(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, name, content):
        path = os.path.join(self.dir, name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path

    def test_include(self):
        """!INCLUDE splices the file in place, relative to the includer"""
        self.write('lib/io.asm', 'PUTC:\n    RET\n')
        main_path = self.write('main.asm', 'MAIN:\n\n  CALL $T0, PUTC\n!include "lib/io.asm"\n')

        self.assertEqual(read_source(main_path),
                         ['MAIN:', '  CALL $T0, PUTC', 'PUTC:', '    RET'])

        program = Assembler().assemble_file(main_path)
        self.assertEqual(program.labels, {'MAIN': 0, 'PUTC': 12})
        self.assertEqual(program.words[-1], 0x03E00008)

    def test_include_path_with_spaces(self):
        self.write('my lib.asm', 'NOP\n')
        main_path = self.write('main.asm', '!INCLUDE "my lib.asm"\n')
        self.assertEqual(read_source(main_path), ['NOP'])

    def test_include_errors(self):
        missing = self.write('missing.asm', '!INCLUDE "nope.asm"\n')
        with self.assertRaises(IncludeError) as cm:
            read_source(missing)
        self.assertEqual(cm.exception.line_no, 1)

        self.write('a.asm', '!INCLUDE "b.asm"\n')
        b = self.write('b.asm', '!INCLUDE "a.asm"\n')
        with self.assertRaises(IncludeError):
            read_source(b)

        with self.assertRaises(UnknownDirective):
            parse_include('!FROB "x.asm"')
        with self.assertRaises(IncludeError):
            parse_include('!INCLUDE')
        self.assertIsNone(parse_include('NOP'))

    def test_coe(self):
        program = Assembler().assemble("ADDIU $T0, $T0, 5\nRET")
        self.assertEqual(program_to_coe(program),
                         'memory_initialization_radix=16;\n'
                         'memory_initialization_vector=\n'
                         '25080005,\n'
                         '03e00008;')
        empty = Assembler().assemble("")
        self.assertTrue(program_to_coe(empty).endswith('\n00000000;'))

    def test_raw_and_hex(self):
        program = Assembler().assemble("ADDIU $T0, $T0, 5\nRET")
        raw_path = os.path.join(self.dir, 'out.bin')
        hex_path = os.path.join(self.dir, 'out.hex')
        write_raw(program, raw_path)
        write_hex(program, hex_path)
        with open(raw_path, 'rb') as f:
            self.assertEqual(f.read(), b'\x25\x08\x00\x05\x03\xe0\x00\x08')
        with open(hex_path, 'r', encoding='utf-8') as f:
            self.assertEqual(f.read(), '25080005\n03e00008\n')

    def test_listing(self):
        program = Assembler().assemble("NOP\nB 0")
        self.assertEqual(program_to_listing(program), [
            '00000000  00000000  NOP' + ' ' * 21 + '  ; No Operation: None',
            '00000004  1000ffff  BEQ $R0, $R0, 0' + ' ' * 9 + '  ; Branch on Equal: if (rs==rt) PC=PC+imm*4',
        ])

    def test_write_failure(self):
        program = Assembler().assemble("NOP")
        missing_dir = os.path.join(self.dir, 'no', 'such', 'dir', 'out.bin')
        with self.assertRaises(SevereError):
            write_raw(program, missing_dir)
        with self.assertRaises(SevereError):
            write_hex(program, missing_dir)

    def test_cli(self):
        src = self.write('prog.asm', '[BASE 0x10]\nSTART: GOTO $T0, START\n')
        out = os.path.join(self.dir, 'prog.coe')
        lst = os.path.join(self.dir, 'prog.lst')

        self.assertEqual(main([src, out, '-f', 'coe', '-l', lst]), 0)
        with open(out, 'r', encoding='utf-8') as f:
            self.assertIn('3c080010,\n25080000,\n01000008;', f.read())
        with open(lst, 'r', encoding='utf-8') as f:
            self.assertEqual(len(f.read().splitlines()), 3)

    def test_cli_error(self):
        src = self.write('bad.asm', 'FROB $T0\n')
        out = os.path.join(self.dir, 'bad.bin')
        self.assertEqual(main([src, out]), 1)
        self.assertFalse(os.path.exists(out))


if __name__ == '__main__':
    unittest.main()
