#!/usr/bin/env python3
"""SmartRest — entry point.

Run with:
    python main.py "Bench Press" --set 3 --sets 3 --intensity 9 --compound
    python -m smartrest "Bench Press"
"""

import sys

from smartrest.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
