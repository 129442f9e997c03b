"""
emojicc Command-Line Interface
==============================

- **emjc**: compile an emoji program to assembly and a native executable

The tool is a Click application with unified error reporting and exit
codes (see errors.py).
"""

__all__ = ["emjc"]
