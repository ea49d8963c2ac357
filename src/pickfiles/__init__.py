"""
Pickfiles - pick files and folders from a terminal and copy their contents.

This package lists the current directory, lets the user filter and
multi-select entries with the keyboard, and copies a tagged text document
holding the contents of everything selected (folders expanded
recursively) to the clipboard, ready to paste into an LLM prompt.
"""

__version__ = "0.1.0"
__author__ = "Pickfiles Team"
