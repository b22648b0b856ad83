"""Phrase board state package.

Persistent stores behind an assistive communication board: the ordered
category/tile collection, a short history of spoken phrases and the set of
favorite phrases. Modules do no storage I/O on import.
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
