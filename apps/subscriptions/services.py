"""
Subscription Services - records Stripe subscription state

Called by the Stripe webhook for every relevant billing event:
- checkout.session.completed creates the subscription (is_new=True)
- customer.subscription.updated / deleted refresh an existing one
"""
import logging

import stripe
from django.conf import settings
from django.db import transaction

from .exceptions import (
    CustomerNotFoundError,
    SubscriptionNotFoundError,
    SubscriptionSyncError,
)
from .models import Customer, Subscription

logger = logging.getLogger(__name__)


def retrieve_stripe_subscription(subscription_id: str):
    """Fetch the current subscription object from Stripe."""
    stripe.api_key = settings.STRIPE_API_KEY
    try:
        return stripe.Subscription.retrieve(subscription_id)
    except stripe.StripeError as e:
        logger.error(f'Failed to retrieve Stripe subscription {subscription_id}: {e}')
        raise SubscriptionSyncError(
            f'Could not retrieve subscription {subscription_id} from Stripe',
            details={'subscription_id': subscription_id},
        ) from e


def get_price_id(stripe_subscription) -> str | None:
    """Price of the first subscription item, if any."""
    try:
        items = stripe_subscription['items']['data']
    except KeyError:
        return None
    if not items:
        return None
    return items[0]['price']['id']


def save_subscription(subscription_id: str, customer_id: str, is_new: bool = False) -> Subscription:
    """
    Persist the Stripe subscription for the customer behind ``customer_id``.

    Args:
        subscription_id: Stripe subscription id (sub_...)
        customer_id: Stripe customer id (cus_...)
        is_new: True when the subscription was just created at checkout

    Returns:
        The saved Subscription

    Raises:
        CustomerNotFoundError: no customer is linked to ``customer_id``
        SubscriptionNotFoundError: an update targets an unknown subscription
        SubscriptionSyncError: Stripe did not return the subscription
    """
    try:
        customer = Customer.objects.get(stripe_customer_id=customer_id)
    except Customer.DoesNotExist:
        logger.error(f'No customer found for Stripe customer {customer_id}')
        raise CustomerNotFoundError(customer_id)

    stripe_subscription = retrieve_stripe_subscription(subscription_id)

    fields = {
        'customer': customer,
        'status': stripe_subscription['status'],
        'price_id': get_price_id(stripe_subscription),
    }

    with transaction.atomic():
        if is_new:
            # Stripe may redeliver checkout.session.completed
            subscription, created = Subscription.objects.update_or_create(
                id=subscription_id,
                defaults=fields,
            )
            if not created:
                logger.info(f'Subscription {subscription_id} already recorded, refreshed instead')
        else:
            subscription = (
                Subscription.objects.select_for_update()
                .filter(id=subscription_id)
                .first()
            )
            if subscription is None:
                logger.error(f'Update received for unknown subscription {subscription_id}')
                raise SubscriptionNotFoundError(subscription_id)

            for name, value in fields.items():
                setattr(subscription, name, value)
            subscription.save(update_fields=[*fields, 'updated_at'])

    logger.info(
        f'Subscription {subscription_id} saved for customer {customer.id}: '
        f'status={subscription.status}, price={subscription.price_id}'
    )
    return subscription
