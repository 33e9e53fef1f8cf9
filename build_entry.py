import sys
import os

# Make the py_mips64_asm package importable when run from a checkout
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from py_mips64_asm.cli import main

if __name__ == '__main__':
    sys.exit(main())
