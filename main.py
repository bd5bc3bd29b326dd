#!/usr/bin/env python3
"""
Wallet Conformance Test CLI - Main Entry Point

Runs the IT Wallet conformance test suites with options passed as
command-line flags.
"""

import sys

from wct.cli import main

if __name__ == "__main__":
    sys.exit(main())
