"""
Subscriptions App Tests

Unit tests for the subscription models and save_subscription.
"""
from unittest.mock import patch

import stripe
from django.test import TestCase, override_settings

from apps.subscriptions.exceptions import (
    CustomerNotFoundError,
    SubscriptionNotFoundError,
    SubscriptionSyncError,
)
from apps.subscriptions.models import Subscription
from apps.subscriptions.services import (
    get_price_id,
    retrieve_stripe_subscription,
    save_subscription,
)
from tests.factories import CustomerFactory, SubscriptionFactory
from tests.factories.stripe_events import stripe_subscription


class SubscriptionModelTests(TestCase):
    """Tests for Customer and Subscription models."""

    def test_str_representation(self):
        subscription = SubscriptionFactory(id='sub_1', status='trialing')
        self.assertEqual(str(subscription), 'sub_1 (trialing)')
        self.assertEqual(str(subscription.customer), subscription.customer.email)

    def test_is_active(self):
        self.assertTrue(SubscriptionFactory(status='active').is_active)
        self.assertFalse(SubscriptionFactory(status='canceled').is_active)


class GetPriceIdTests(TestCase):
    """Tests for price extraction from Stripe subscriptions."""

    def test_first_item_price(self):
        self.assertEqual(get_price_id(stripe_subscription(price_id='price_9')), 'price_9')

    def test_no_items(self):
        self.assertIsNone(get_price_id(stripe_subscription(price_id=None)))
        self.assertIsNone(get_price_id({'id': 'sub_1', 'status': 'active'}))


class RetrieveStripeSubscriptionTests(TestCase):
    """Tests for the Stripe API call."""

    @override_settings(STRIPE_API_KEY='sk_test_override')
    @patch('apps.subscriptions.services.stripe.Subscription.retrieve')
    def test_sets_api_key_and_retrieves(self, mock_retrieve):
        mock_retrieve.return_value = stripe_subscription('sub_1')

        result = retrieve_stripe_subscription('sub_1')

        self.assertEqual(result['id'], 'sub_1')
        self.assertEqual(stripe.api_key, 'sk_test_override')
        mock_retrieve.assert_called_once_with('sub_1')

    @patch('apps.subscriptions.services.stripe.Subscription.retrieve')
    def test_stripe_error_becomes_sync_error(self, mock_retrieve):
        mock_retrieve.side_effect = stripe.APIConnectionError('Stripe is unreachable')

        with self.assertRaises(SubscriptionSyncError) as ctx:
            retrieve_stripe_subscription('sub_1')

        self.assertEqual(ctx.exception.details, {'subscription_id': 'sub_1'})
        self.assertIsInstance(ctx.exception.__cause__, stripe.APIConnectionError)


@patch('apps.subscriptions.services.retrieve_stripe_subscription')
class SaveSubscriptionTests(TestCase):
    """Tests for save_subscription."""

    def setUp(self):
        self.customer = CustomerFactory(stripe_customer_id='cus_1')

    def test_creates_new_subscription(self, mock_retrieve):
        mock_retrieve.return_value = stripe_subscription('sub_1', status='active', price_id='price_1')

        subscription = save_subscription('sub_1', 'cus_1', is_new=True)

        self.assertEqual(subscription.id, 'sub_1')
        self.assertEqual(subscription.customer, self.customer)
        self.assertEqual(subscription.status, 'active')
        self.assertEqual(subscription.price_id, 'price_1')
        self.assertEqual(Subscription.objects.count(), 1)

    def test_new_subscription_is_idempotent(self, mock_retrieve):
        mock_retrieve.return_value = stripe_subscription('sub_1', status='active')

        save_subscription('sub_1', 'cus_1', is_new=True)
        save_subscription('sub_1', 'cus_1', is_new=True)

        self.assertEqual(Subscription.objects.filter(id='sub_1').count(), 1)

    def test_updates_existing_subscription(self, mock_retrieve):
        SubscriptionFactory(id='sub_1', customer=self.customer, status='active', price_id='price_1')
        mock_retrieve.return_value = stripe_subscription('sub_1', status='canceled', price_id='price_1')

        subscription = save_subscription('sub_1', 'cus_1')

        self.assertEqual(subscription.status, 'canceled')
        self.assertEqual(Subscription.objects.get(id='sub_1').status, 'canceled')

    def test_update_can_move_subscription_to_another_customer(self, mock_retrieve):
        other = CustomerFactory(stripe_customer_id='cus_2')
        SubscriptionFactory(id='sub_1', customer=self.customer)
        mock_retrieve.return_value = stripe_subscription('sub_1')

        save_subscription('sub_1', 'cus_2')

        self.assertEqual(Subscription.objects.get(id='sub_1').customer, other)

    def test_update_of_unknown_subscription_raises(self, mock_retrieve):
        mock_retrieve.return_value = stripe_subscription('sub_404')

        with self.assertRaises(SubscriptionNotFoundError) as ctx:
            save_subscription('sub_404', 'cus_1')

        self.assertEqual(ctx.exception.status_code, 404)
        self.assertFalse(Subscription.objects.exists())

    def test_unknown_customer_raises_before_calling_stripe(self, mock_retrieve):
        with self.assertRaises(CustomerNotFoundError) as ctx:
            save_subscription('sub_1', 'cus_missing', is_new=True)

        self.assertEqual(ctx.exception.details, {'customer_id': 'cus_missing'})
        mock_retrieve.assert_not_called()

    def test_sync_error_propagates(self, mock_retrieve):
        mock_retrieve.side_effect = SubscriptionSyncError('Could not retrieve subscription sub_1 from Stripe')

        with self.assertRaises(SubscriptionSyncError):
            save_subscription('sub_1', 'cus_1', is_new=True)

        self.assertFalse(Subscription.objects.exists())
