"""
Subscription persistence errors.
"""
from apps.core.exceptions import APIException


class SubscriptionError(APIException):
    """Base class for failures while recording a subscription."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        super().__init__(message, status_code=status_code, details=details)


class CustomerNotFoundError(SubscriptionError):
    """No customer is linked to the Stripe customer id."""
    def __init__(self, customer_id: str):
        super().__init__(
            f'No customer linked to Stripe customer {customer_id}',
            status_code=404,
            details={'customer_id': customer_id},
        )


class SubscriptionNotFoundError(SubscriptionError):
    """An update arrived for a subscription that was never created."""
    def __init__(self, subscription_id: str):
        super().__init__(
            f'Subscription {subscription_id} does not exist',
            status_code=404,
            details={'subscription_id': subscription_id},
        )


class SubscriptionSyncError(SubscriptionError):
    """Stripe could not return the subscription."""
