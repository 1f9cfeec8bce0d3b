"""Syntax trees, a symbol table and an x86-64 assembly generator for a small C-like language."""

__version__ = "0.1.0"

__all__ = ["codegen", "symbols", "syntax_tree"]