"""
Integration Test Fixtures

Provides real database fixtures using Factory Boy.
"""
import pytest

from tests.factories import CustomerFactory, SubscriptionFactory
from tests.factories.stripe_events import stripe_subscription


@pytest.fixture
def customer(db):
    """A customer already linked to a Stripe customer."""
    return CustomerFactory(email='reader@example.com', stripe_customer_id='cus_1')


@pytest.fixture
def existing_subscription(customer):
    """A subscription created by an earlier checkout."""
    return SubscriptionFactory(id='sub_1', customer=customer, status='active', price_id='price_1')


@pytest.fixture
def stripe_retrieve(mocker):
    """Patch stripe.Subscription.retrieve; tests set return_value as needed."""
    return mocker.patch(
        'apps.subscriptions.services.stripe.Subscription.retrieve',
        return_value=stripe_subscription('sub_1', status='active', price_id='price_1'),
    )
