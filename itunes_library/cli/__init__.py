#!/usr/bin/env python3
"""
Command-line interface for the iTunes library reader
"""

from .main import app, main

__all__ = ["app", "main"]
