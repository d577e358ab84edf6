"""
Webhooks App Tests

Unit tests for event parsing, signature verification, body ingestion and
the webhook view with injected configuration.
"""
import io
import json
from unittest.mock import MagicMock

from django.test import SimpleTestCase
from rest_framework.test import APIRequestFactory

from apps.webhooks.events import (
    RELEVANT_EVENTS,
    CheckoutSessionCompleted,
    SubscriptionChanged,
    is_relevant,
    parse_event,
    stripe_id,
)
from apps.webhooks.exceptions import (
    UnhandledEventError,
    WebhookPayloadError,
    WebhookSignatureError,
)
from apps.webhooks.signature import construct_event, read_raw_body
from apps.webhooks.views import StripeWebhookView
from tests.factories.stripe_events import (
    checkout_session,
    make_event,
    sign_payload,
    subscription_object,
)


class EventParsingTests(SimpleTestCase):
    """Tests for BillingEvent construction."""

    def test_relevant_events(self):
        self.assertEqual(
            RELEVANT_EVENTS,
            {
                'checkout.session.completed',
                'customer.subscription.updated',
                'customer.subscription.deleted',
            },
        )
        self.assertFalse(is_relevant('invoice.paid'))
        self.assertFalse(is_relevant(None))

    def test_checkout_session_completed(self):
        event = json.loads(make_event('checkout.session.completed', checkout_session('sub_1', 'cus_1')))

        billing_event = parse_event(event)

        self.assertEqual(billing_event, CheckoutSessionCompleted(subscription_id='sub_1', customer_id='cus_1'))
        self.assertTrue(billing_event.is_new)

    def test_subscription_updated(self):
        event = json.loads(make_event('customer.subscription.updated', subscription_object('sub_2', 'cus_2')))

        billing_event = parse_event(event)

        self.assertIsInstance(billing_event, SubscriptionChanged)
        self.assertEqual(billing_event.subscription_id, 'sub_2')
        self.assertEqual(billing_event.customer_id, 'cus_2')
        self.assertEqual(billing_event.event_type, 'customer.subscription.updated')
        self.assertFalse(billing_event.is_new)

    def test_subscription_deleted(self):
        event = json.loads(make_event('customer.subscription.deleted', subscription_object('sub_3', 'cus_3')))

        billing_event = parse_event(event)

        self.assertEqual(billing_event.event_type, 'customer.subscription.deleted')
        self.assertFalse(billing_event.is_new)

    def test_event_without_parser_raises(self):
        with self.assertRaises(UnhandledEventError) as ctx:
            parse_event({'type': 'invoice.paid', 'data': {'object': {}}})
        self.assertEqual(ctx.exception.message, 'Unhandled event.')
        self.assertEqual(ctx.exception.status_code, 500)

    def test_missing_data_object_raises(self):
        with self.assertRaises(WebhookPayloadError):
            parse_event({'type': 'customer.subscription.updated', 'data': {}})

    def test_missing_customer_raises(self):
        event = {'type': 'checkout.session.completed', 'data': {'object': {'subscription': 'sub_1'}}}
        with self.assertRaises(WebhookPayloadError) as ctx:
            parse_event(event)
        self.assertEqual(ctx.exception.details, {'field': 'customer'})

    def test_stripe_id_accepts_expanded_objects(self):
        self.assertEqual(stripe_id('cus_1', 'customer'), 'cus_1')
        self.assertEqual(stripe_id({'id': 'cus_1', 'object': 'customer'}, 'customer'), 'cus_1')
        with self.assertRaises(WebhookPayloadError):
            stripe_id({'object': 'customer'}, 'customer')
        with self.assertRaises(WebhookPayloadError):
            stripe_id(42, 'customer')


class ReadRawBodyTests(SimpleTestCase):
    """Tests for raw body accumulation."""

    def test_reads_until_exhausted(self):
        body = b'x' * 10_000
        self.assertEqual(read_raw_body(io.BytesIO(body), chunk_size=1024), body)

    def test_encodes_text_chunks(self):
        self.assertEqual(read_raw_body(io.StringIO('olá'), chunk_size=1), 'olá'.encode('utf-8'))

    def test_empty_stream(self):
        self.assertEqual(read_raw_body(io.BytesIO(b'')), b'')


class ConstructEventTests(SimpleTestCase):
    """Tests for Stripe signature verification."""

    SECRET = 'whsec_unit'

    def setUp(self):
        self.payload = make_event('checkout.session.completed', checkout_session())

    def test_valid_signature(self):
        event = construct_event(self.payload, sign_payload(self.payload, self.SECRET), self.SECRET)
        self.assertEqual(event['type'], 'checkout.session.completed')
        self.assertEqual(event['data']['object']['subscription'], 'sub_1')

    def test_invalid_signature(self):
        with self.assertRaises(WebhookSignatureError) as ctx:
            construct_event(self.payload, sign_payload(self.payload, 'whsec_other'), self.SECRET)
        self.assertEqual(ctx.exception.status_code, 400)

    def test_missing_signature(self):
        with self.assertRaises(WebhookSignatureError):
            construct_event(self.payload, None, self.SECRET)

    def test_missing_secret(self):
        with self.assertRaises(WebhookSignatureError):
            construct_event(self.payload, sign_payload(self.payload, self.SECRET), '')

    def test_non_integer_timestamp(self):
        with self.assertRaises(WebhookSignatureError):
            construct_event(self.payload, 't=abc,v1=deadbeef', self.SECRET)

    def test_signed_non_json_payload(self):
        payload = b'not json'
        with self.assertRaises(WebhookSignatureError):
            construct_event(payload, sign_payload(payload, self.SECRET), self.SECRET)

    def test_signed_non_utf8_payload(self):
        payload = b'\xff\xfe'
        with self.assertRaises(WebhookSignatureError):
            construct_event(payload, 't=1,v1=deadbeef', self.SECRET)


class StripeWebhookViewTests(SimpleTestCase):
    """Tests for the webhook view with injected secret and collaborator."""

    SECRET = 'whsec_injected'

    def setUp(self):
        self.factory = APIRequestFactory()
        self.recorder = MagicMock()
        self.view = StripeWebhookView.as_view(
            webhook_secret=self.SECRET,
            record_subscription=self.recorder,
        )

    def _post(self, payload, secret=None):
        request = self.factory.post(
            '/api/webhooks',
            data=payload,
            content_type='application/json',
            HTTP_STRIPE_SIGNATURE=sign_payload(payload, secret or self.SECRET),
        )
        return self.view(request)

    def test_uses_injected_secret(self):
        payload = make_event('checkout.session.completed', checkout_session('sub_1', 'cus_1'))

        response = self._post(payload)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {'received': True})
        self.recorder.assert_called_once_with('sub_1', 'cus_1', is_new=True)

    def test_settings_secret_is_not_used_when_injected(self):
        payload = make_event('checkout.session.completed', checkout_session())

        response = self._post(payload, secret='whsec_test_secret')

        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.content.startswith(b'Webhook Error: '))
        self.recorder.assert_not_called()

    def test_recorder_failure_is_not_retried(self):
        self.recorder.side_effect = RuntimeError('boom')
        payload = make_event('customer.subscription.updated', subscription_object('sub_2', 'cus_2'))

        response = self._post(payload)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {'error': 'Webhook handler failed.'})
        self.recorder.assert_called_once_with('sub_2', 'cus_2', is_new=False)

    def test_get_is_not_allowed(self):
        response = self.view(self.factory.get('/api/webhooks'))

        self.assertEqual(response.status_code, 405)
        self.assertEqual(response['Allow'], 'POST')
        self.recorder.assert_not_called()
