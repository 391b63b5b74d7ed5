"""
boltmod parse-tree transformers
===============================

Turn Lark parse trees into declaration nodes.
"""

from .declarations import DeclarationTransformer

__all__ = [
    'DeclarationTransformer',
]
