#!/usr/bin/env python3
"""LoopTimer — entry point.

Run with:
    python main.py --duration 30 --repeat 3 --tone chime
    python -m looptimer --help
"""

import sys

from looptimer.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
