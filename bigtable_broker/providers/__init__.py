"""Instance-administration providers."""

from .base import InstanceAdminProvider
from .bigtable_provider import BigtableInstanceAdminProvider

__all__ = [
    'InstanceAdminProvider',
    'BigtableInstanceAdminProvider'
]
