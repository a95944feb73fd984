"""
Main entry point for running gst_invoice as a module.

Usage:
    python -m gst_invoice invoice.json [options]
"""
import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
