"""
Output generators for flat binaries.
"""

from .flat_binary import check_base, resolve_base, write_flat_binary

__all__ = ['check_base', 'resolve_base', 'write_flat_binary']
