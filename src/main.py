#!/usr/bin/env python3
"""
Cosmetic filter engine command line.
"""

from app import main

if __name__ == "__main__":
    main()
