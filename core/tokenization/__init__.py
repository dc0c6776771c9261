"""
Package core.tokenization - Word extraction cho dictionary build.

Modules:
- tokenizer: Pure function line -> tokens
- cancellation: CancellationToken (thread-safe) cho build pipeline
"""

from core.tokenization.tokenizer import tokenize, STRIPPED_CHARS
from core.tokenization.cancellation import CancellationToken

__all__ = [
    "tokenize",
    "STRIPPED_CHARS",
    "CancellationToken",
]
