"""
EIP-7702 delegation and sponsored batch execution demo.
"""

__version__ = "0.1.0"
