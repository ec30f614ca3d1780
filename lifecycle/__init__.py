# Listing lifecycle: status transitions and the recheck driver
from .tracker import CheckOutcome, LifecycleTracker
from .checker import SaleChecker

__all__ = [
    'CheckOutcome',
    'LifecycleTracker',
    'SaleChecker',
]
