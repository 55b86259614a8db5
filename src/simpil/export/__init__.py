"""simpil export: source text from the IR.

Public API::

    from simpil.export import to_text
    source = to_text(program)
"""

from .text import to_text

__all__ = ["to_text"]
