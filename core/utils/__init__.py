"""
Core Utilities Package

Chua cac utility modules:
- file_utils: Streaming line source, binary detection
- file_scanner: Recursive file discovery
- atomic_counter: Thread-safe counter
"""

from core.utils.atomic_counter import AtomicCounter
from core.utils.file_utils import enumerate_file, is_binary_file
from core.utils.file_scanner import enumerate_files

__all__ = [
    "AtomicCounter",
    "enumerate_file",
    "is_binary_file",
    "enumerate_files",
]
