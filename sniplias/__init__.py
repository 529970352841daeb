"""sniplias - manage shell aliases and command snippets from the terminal"""

__version__ = "0.3.0"
