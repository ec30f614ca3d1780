# Core fetching infrastructure
from .retry_handler import RetryExhausted, RetryHandler, calculate_backoff

__all__ = [
    'RetryExhausted',
    'RetryHandler',
    'calculate_backoff',
]
