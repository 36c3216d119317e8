"""
Utilities for IDE plugin style extensions.

- `idea_common.exec`: build, render, parse, and run external command lines
- `idea_common.map`: reverse lookups in mappings
- `idea_common.password`: stored passwords and password prompts
"""

__version__ = "0.1.0.dev0"
