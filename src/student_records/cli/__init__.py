"""
Command Line Interface Module for Student Records
"""

from .cli_interface import CLIInterface, main

__all__ = ['CLIInterface', 'main']
