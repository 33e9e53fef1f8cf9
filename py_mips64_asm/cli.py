#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MIPS64 Assembler Command Line Interface
"""

import sys
from .main import main


if __name__ == '__main__':
    sys.exit(main())
