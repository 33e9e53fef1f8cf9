#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MIPS64 Assembler Main Entry Point
"""

import argparse
import logging
import sys
from typing import List, Optional
from .assembler import Assembler, AsmProgram
from .convert import WRITERS, write_listing
from .utils import SevereError

log = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments
    """
    parser = argparse.ArgumentParser(
        description='MIPS64 Assembler - Convert assembly code to machine code'
    )

    # Required arguments
    parser.add_argument('in_file', help='Input assembly file path')
    parser.add_argument('out_file', help='Output file path')

    # Optional arguments
    parser.add_argument('-f', '--format', choices=sorted(WRITERS), default='raw',
                        help='Output format (default: raw big-endian words)')
    parser.add_argument('-l', '--listing', metavar='PATH',
                        help='Also write an address/word/source listing')
    parser.add_argument('-d', '--debug', action='store_true',
                        help='Enable debug output')

    return parser.parse_args(argv)


def assemble_file(in_file: str) -> AsmProgram:
    """
    Assemble the input file
    """
    program = Assembler().assemble_file(in_file)

    log.info("Assembly successful!")
    log.info("Text size: %d bytes", program.total_size)
    log.info("Labels: %d", len(program.labels) + len(program.child_labels))
    log.info("Instructions: %d", len(program.words))

    return program


def handle_assembly(args: argparse.Namespace) -> AsmProgram:
    """
    Handle the full assembly process
    """
    program = assemble_file(args.in_file)

    WRITERS[args.format](program, args.out_file)
    log.info("Wrote %s file: %s", args.format, args.out_file)

    if args.listing:
        write_listing(program, args.listing)
        log.info("Wrote listing: %s", args.listing)

    return program


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function
    """
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        program = handle_assembly(args)
    except SevereError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nAssembly interrupted by user", file=sys.stderr)
        return 1

    print("Assembly completed successfully!")
    print(f"  - {len(program.words)} words ({program.total_size} bytes)")
    print(f"  - Output: {args.out_file}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
