"""
Lib: helpers composed from the kernel machinery.
"""
from .furnish import furnish, read_kernel_file, unfurnish

__all__ = ["furnish", "read_kernel_file", "unfurnish"]
