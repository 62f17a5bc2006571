#!/usr/bin/env python3
"""DojoTimer entry point.

Run with:
    python main.py
    python -m dojotimer
"""

from dojotimer.__main__ import main


if __name__ == "__main__":
    main()
