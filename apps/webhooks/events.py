"""
Billing events understood by the Stripe webhook.

Each relevant Stripe event type maps to one parser, and each parser builds
one variant of ``BillingEvent``. The allow-list is the parser table itself,
so an allow-listed type always has a parser.
"""
from collections.abc import Callable
from dataclasses import dataclass
from typing import ClassVar, Union

from .exceptions import UnhandledEventError, WebhookPayloadError

CHECKOUT_SESSION_COMPLETED = 'checkout.session.completed'
SUBSCRIPTION_UPDATED = 'customer.subscription.updated'
SUBSCRIPTION_DELETED = 'customer.subscription.deleted'


@dataclass(frozen=True)
class SubscriptionChanged:
    """An existing subscription was updated or cancelled."""
    event_type: str
    subscription_id: str
    customer_id: str

    is_new: ClassVar[bool] = False


@dataclass(frozen=True)
class CheckoutSessionCompleted:
    """A checkout finished and opened a new subscription."""
    subscription_id: str
    customer_id: str

    event_type: ClassVar[str] = CHECKOUT_SESSION_COMPLETED
    is_new: ClassVar[bool] = True


BillingEvent = Union[SubscriptionChanged, CheckoutSessionCompleted]


def stripe_id(value, field: str) -> str:
    """
    Normalise a Stripe reference to its id.

    References arrive either as an id string or, when expanded, as an
    object carrying ``id``.
    """
    if isinstance(value, dict):
        value = value.get('id')
    if not value or not isinstance(value, str):
        raise WebhookPayloadError(f'Event is missing {field}', details={'field': field})
    return value


def _data_object(event: dict) -> dict:
    obj = (event.get('data') or {}).get('object')
    if not isinstance(obj, dict):
        raise WebhookPayloadError('Event has no data.object')
    return obj


def _parse_subscription(event: dict) -> SubscriptionChanged:
    subscription = _data_object(event)
    return SubscriptionChanged(
        event_type=event['type'],
        subscription_id=stripe_id(subscription.get('id'), 'id'),
        customer_id=stripe_id(subscription.get('customer'), 'customer'),
    )


def _parse_checkout_session(event: dict) -> CheckoutSessionCompleted:
    session = _data_object(event)
    return CheckoutSessionCompleted(
        subscription_id=stripe_id(session.get('subscription'), 'subscription'),
        customer_id=stripe_id(session.get('customer'), 'customer'),
    )


EVENT_PARSERS: dict[str, Callable[[dict], BillingEvent]] = {
    CHECKOUT_SESSION_COMPLETED: _parse_checkout_session,
    SUBSCRIPTION_UPDATED: _parse_subscription,
    SUBSCRIPTION_DELETED: _parse_subscription,
}

RELEVANT_EVENTS = frozenset(EVENT_PARSERS)


def is_relevant(event_type: str | None) -> bool:
    return event_type in RELEVANT_EVENTS


def parse_event(event: dict) -> BillingEvent:
    """
    Build the BillingEvent for a verified Stripe event.

    Raises:
        UnhandledEventError: the event type has no parser
        WebhookPayloadError: the payload lacks the subscription or customer id
    """
    event_type = event.get('type')
    parser = EVENT_PARSERS.get(event_type)
    if parser is None:
        raise UnhandledEventError(event_type)
    return parser(event)
