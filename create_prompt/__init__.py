"""
create-prompt - turns casual requests into structured, context-rich prompts.
"""

__version__ = "1.5.0"
