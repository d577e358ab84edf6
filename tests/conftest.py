"""
Pytest Configuration for the Ignews Backend Tests

Key Features:
- Provides API client fixtures
- Provides Stripe webhook signing helpers bound to the test secret
- Sets up factory_boy for model factories
"""
import pytest
from django.conf import settings
from rest_framework.test import APIClient

from tests.factories.stripe_events import make_event, sign_payload

WEBHOOK_URL = '/api/webhooks'


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Basic API client without authentication."""
    return APIClient()


# =============================================================================
# Stripe Webhook Fixtures
# =============================================================================

@pytest.fixture
def webhook_secret():
    """Webhook secret configured in config.settings.test."""
    return settings.STRIPE_WEBHOOK_SECRET


@pytest.fixture
def post_event(api_client, webhook_secret):
    """
    POST a signed Stripe event to the webhook endpoint.

    Usage:
        response = post_event('invoice.paid', {'id': 'in_1'})
    """
    def _post(event_type: str, data_object: dict, secret: str | None = None):
        payload = make_event(event_type, data_object)
        signature = sign_payload(payload, secret or webhook_secret)
        return api_client.post(
            WEBHOOK_URL,
            data=payload,
            content_type='application/json',
            HTTP_STRIPE_SIGNATURE=signature,
        )

    return _post
