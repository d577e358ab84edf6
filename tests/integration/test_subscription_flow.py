"""
Integration Tests for the Subscription Flow

Signed Stripe events go through the real persistence collaborator and land
in the database. Only the Stripe API call is mocked.
"""
from rest_framework import status

from apps.subscriptions.models import Subscription
from tests.factories.stripe_events import (
    checkout_session,
    stripe_subscription,
    subscription_object,
)


class TestCheckoutCreatesSubscription:

    def test_checkout_creates_subscription_row(self, post_event, customer, stripe_retrieve):
        response = post_event(
            'checkout.session.completed',
            checkout_session(subscription='sub_1', customer='cus_1'),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'received': True}

        subscription = Subscription.objects.get(id='sub_1')
        assert subscription.customer == customer
        assert subscription.status == 'active'
        assert subscription.price_id == 'price_1'
        stripe_retrieve.assert_called_once_with('sub_1')

    def test_redelivered_checkout_does_not_duplicate(self, post_event, customer, stripe_retrieve):
        post_event('checkout.session.completed', checkout_session(subscription='sub_1', customer='cus_1'))
        post_event('checkout.session.completed', checkout_session(subscription='sub_1', customer='cus_1'))

        assert Subscription.objects.filter(id='sub_1').count() == 1

    def test_unknown_customer_returns_error_payload(self, post_event, db, stripe_retrieve):
        response = post_event(
            'checkout.session.completed',
            checkout_session(subscription='sub_1', customer='cus_missing'),
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {'error': 'Webhook handler failed.'}
        assert not Subscription.objects.exists()
        stripe_retrieve.assert_not_called()


class TestSubscriptionChanges:

    def test_update_refreshes_status_and_price(self, post_event, existing_subscription, stripe_retrieve):
        stripe_retrieve.return_value = stripe_subscription('sub_1', status='past_due', price_id='price_2')

        response = post_event(
            'customer.subscription.updated',
            subscription_object(subscription_id='sub_1', customer='cus_1', status='past_due'),
        )

        assert response.json() == {'received': True}
        existing_subscription.refresh_from_db()
        assert existing_subscription.status == 'past_due'
        assert existing_subscription.price_id == 'price_2'

    def test_delete_marks_subscription_canceled(self, post_event, existing_subscription, stripe_retrieve):
        stripe_retrieve.return_value = stripe_subscription('sub_1', status='canceled')

        post_event(
            'customer.subscription.deleted',
            subscription_object(subscription_id='sub_1', customer='cus_1', status='canceled'),
        )

        existing_subscription.refresh_from_db()
        assert existing_subscription.status == 'canceled'
        assert not existing_subscription.is_active

    def test_update_for_unknown_subscription_returns_error_payload(self, post_event, customer, stripe_retrieve):
        response = post_event(
            'customer.subscription.updated',
            subscription_object(subscription_id='sub_unknown', customer='cus_1'),
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {'error': 'Webhook handler failed.'}
        assert not Subscription.objects.filter(id='sub_unknown').exists()
