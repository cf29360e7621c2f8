"""Entry point — ``python main.py export|import|update-cores ...``."""

from __future__ import annotations

import sys

from retroporter.cli import main

if __name__ == "__main__":
    sys.exit(main())
