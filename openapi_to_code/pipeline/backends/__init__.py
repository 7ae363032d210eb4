"""
Code generation backends.

Contains language-specific code generators.
"""

from __future__ import annotations

from .base import CodeBackend
from .csharp_backend import CSharpBackend

__all__ = [
    "CodeBackend",
    "CSharpBackend",
]
