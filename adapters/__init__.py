"""
Store Adapters

Per-store behaviour behind one interface, selected by AdapterRegistry.
"""

from .base import AdapterRegistry, BaseAdapter, GenericAdapter, build_registry, CAPABILITIES
from .end import EndAdapter
from .footlocker import FootLockerAdapter
from .mrporter import MrPorterAdapter
from .sns import SnsAdapter

__all__ = [
    'AdapterRegistry',
    'BaseAdapter',
    'GenericAdapter',
    'build_registry',
    'CAPABILITIES',
    'EndAdapter',
    'FootLockerAdapter',
    'MrPorterAdapter',
    'SnsAdapter',
]
