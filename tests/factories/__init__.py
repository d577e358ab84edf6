"""
Factory Boy Factories for Ignews Models

Import all factories here for easy access in tests.
"""
from tests.factories.subscriptions import (
    CustomerFactory,
    SubscriptionFactory,
)

__all__ = [
    'CustomerFactory',
    'SubscriptionFactory',
]
