#!/usr/bin/env python3
"""Launch WorkSession from a source checkout.

Run with:
    python main.py
    python -m worksession
"""

from worksession.__main__ import main


if __name__ == "__main__":
    main()
