"""
Webhook URL Configuration

Routes:
- POST /api/webhooks - Stripe webhook events
"""
from django.urls import path

from .views import StripeWebhookView

urlpatterns = [
    # Stripe webhook (public, signature-verified)
    path('', StripeWebhookView.as_view(), name='stripe_webhook'),
]
