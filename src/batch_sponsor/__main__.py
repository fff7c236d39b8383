#!/usr/bin/env python3
"""
Entry point for running the demo as a module.

Usage:
    python -m batch_sponsor [run|status|revoke]
"""
import sys

from batch_sponsor.commands.delegation_demo import main

if __name__ == "__main__":
    sys.exit(main())
