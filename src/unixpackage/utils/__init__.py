"""
UNIXPackage Utility Modules

File helpers shared by the installation store.
"""

from .atomic_write import atomic_write_text, atomic_write_json

__all__ = [
    "atomic_write_text",
    "atomic_write_json",
]
