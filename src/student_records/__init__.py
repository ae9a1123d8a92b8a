"""
Student Records

File-backed student store with debounced auto-save and polled auto-reload.
"""

__version__ = "0.1.0"
