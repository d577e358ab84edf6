"""
Integration Tests for the Stripe Webhook API

Covers the acknowledgment contract of POST /api/webhooks:
1. Method check (405 + Allow: POST)
2. Signature verification (400, collaborator untouched)
3. Relevance filter and dispatch to the persistence collaborator
4. Dispatch failures converted to an error payload
"""
import time

import pytest
from rest_framework import status

from tests.conftest import WEBHOOK_URL
from tests.factories.stripe_events import (
    checkout_session,
    make_event,
    sign_payload,
    subscription_object,
)


@pytest.fixture
def save_subscription(mocker):
    return mocker.patch('apps.webhooks.views.save_subscription')


# =============================================================================
# Method Check
# =============================================================================

class TestMethodNotAllowed:

    @pytest.mark.parametrize('method', ['get', 'put', 'patch', 'delete', 'options', 'head'])
    def test_non_post_methods_return_405(self, api_client, save_subscription, method):
        response = getattr(api_client, method)(WEBHOOK_URL)

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        assert response['Allow'] == 'POST'
        save_subscription.assert_not_called()

    def test_405_body_is_plain_text(self, api_client):
        response = api_client.get(WEBHOOK_URL)

        assert response['Content-Type'].startswith('text/plain')
        assert response.content == b'Method not allowed'


# =============================================================================
# Signature Verification
# =============================================================================

class TestSignatureVerification:

    def test_missing_signature_returns_400(self, api_client, save_subscription):
        payload = make_event('checkout.session.completed', checkout_session())

        response = api_client.post(WEBHOOK_URL, data=payload, content_type='application/json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.content.startswith(b'Webhook Error: ')
        save_subscription.assert_not_called()

    def test_wrong_secret_returns_400(self, post_event, save_subscription):
        response = post_event('checkout.session.completed', checkout_session(), secret='whsec_other')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert b'Webhook Error' in response.content
        save_subscription.assert_not_called()

    def test_tampered_body_returns_400(self, api_client, webhook_secret, save_subscription):
        payload = make_event('checkout.session.completed', checkout_session())
        signature = sign_payload(payload, webhook_secret)
        tampered = payload.replace(b'sub_1', b'sub_9')

        response = api_client.post(
            WEBHOOK_URL,
            data=tampered,
            content_type='application/json',
            HTTP_STRIPE_SIGNATURE=signature,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        save_subscription.assert_not_called()

    def test_stale_timestamp_returns_400(self, api_client, webhook_secret, save_subscription):
        payload = make_event('checkout.session.completed', checkout_session())
        signature = sign_payload(payload, webhook_secret, timestamp=int(time.time()) - 3600)

        response = api_client.post(
            WEBHOOK_URL,
            data=payload,
            content_type='application/json',
            HTTP_STRIPE_SIGNATURE=signature,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        save_subscription.assert_not_called()

    def test_malformed_header_returns_400(self, api_client, save_subscription):
        payload = make_event('checkout.session.completed', checkout_session())

        response = api_client.post(
            WEBHOOK_URL,
            data=payload,
            content_type='application/json',
            HTTP_STRIPE_SIGNATURE='not-a-stripe-signature',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        save_subscription.assert_not_called()

    def test_missing_secret_returns_400(self, post_event, save_subscription, settings):
        settings.STRIPE_WEBHOOK_SECRET = ''

        response = post_event('checkout.session.completed', checkout_session(), secret='whsec_any')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        save_subscription.assert_not_called()


# =============================================================================
# Dispatch
# =============================================================================

class TestDispatch:

    def test_checkout_completed_records_new_subscription(self, post_event, save_subscription):
        response = post_event(
            'checkout.session.completed',
            checkout_session(subscription='sub_1', customer='cus_1'),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'received': True}
        save_subscription.assert_called_once_with('sub_1', 'cus_1', is_new=True)

    def test_subscription_updated_records_change(self, post_event, save_subscription):
        response = post_event(
            'customer.subscription.updated',
            subscription_object(subscription_id='sub_2', customer='cus_2'),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'received': True}
        save_subscription.assert_called_once_with('sub_2', 'cus_2', is_new=False)

    def test_subscription_deleted_records_change(self, post_event, save_subscription):
        response = post_event(
            'customer.subscription.deleted',
            subscription_object(subscription_id='sub_3', customer='cus_3', status='canceled'),
        )

        assert response.json() == {'received': True}
        save_subscription.assert_called_once_with('sub_3', 'cus_3', is_new=False)

    def test_expanded_customer_object_is_accepted(self, post_event, save_subscription):
        post_event(
            'customer.subscription.updated',
            subscription_object(subscription_id='sub_4', customer={'id': 'cus_4', 'object': 'customer'}),
        )

        save_subscription.assert_called_once_with('sub_4', 'cus_4', is_new=False)

    @pytest.mark.parametrize('event_type', ['invoice.paid', 'customer.subscription.created', 'charge.refunded'])
    def test_irrelevant_events_are_acknowledged(self, post_event, save_subscription, event_type):
        response = post_event(event_type, {'id': 'obj_1'})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'received': True}
        save_subscription.assert_not_called()


# =============================================================================
# Dispatch Failures
# =============================================================================

class TestDispatchFailures:

    def test_persistence_failure_returns_error_payload(self, post_event, save_subscription):
        save_subscription.side_effect = RuntimeError('database is down')

        response = post_event('checkout.session.completed', checkout_session())

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {'error': 'Webhook handler failed.'}
        assert save_subscription.call_count == 1

    def test_checkout_without_subscription_returns_error_payload(self, post_event, save_subscription):
        response = post_event(
            'checkout.session.completed',
            checkout_session(subscription=None, customer='cus_1'),
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {'error': 'Webhook handler failed.'}
        save_subscription.assert_not_called()
