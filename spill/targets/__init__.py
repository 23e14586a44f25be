"""
Spill Target Enumeration
"""

from spill.targets.enumerator import (
    enumerate_targets,
    iter_targets,
    expand_cidr,
    read_target_file,
)

__all__ = [
    "enumerate_targets",
    "iter_targets",
    "expand_cidr",
    "read_target_file",
]
