#!/usr/bin/env python3
"""
Convenience entry point for running appointmentagent directly.

Usage: python -m appointmentagent [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
