"""
Webhook Views - Stripe billing webhook

Endpoints:
- POST /api/webhooks - Handle Stripe subscription events
"""
import logging

from django.conf import settings
from django.http import HttpResponse
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.subscriptions.services import save_subscription

from .events import is_relevant, parse_event
from .exceptions import WebhookSignatureError
from .signature import SIGNATURE_HEADER, construct_event, read_raw_body

logger = logging.getLogger(__name__)

HANDLER_FAILED_MESSAGE = 'Webhook handler failed.'


@method_decorator(csrf_exempt, name='dispatch')
class StripeWebhookView(APIView):
    """
    POST /api/webhooks - Handle Stripe webhook events

    This endpoint receives webhooks from Stripe for checkout and subscription
    events. No authentication required (public webhook endpoint).
    Webhook signature verification is used for security.

    ``webhook_secret`` and ``record_subscription`` can be passed to
    ``as_view()``; they default to ``settings.STRIPE_WEBHOOK_SECRET`` and
    ``save_subscription``.
    """

    # Disable authentication for webhook
    authentication_classes = []
    permission_classes = []

    http_method_names = ['post']

    webhook_secret = None
    record_subscription = None

    def get_webhook_secret(self) -> str:
        if self.webhook_secret is not None:
            return self.webhook_secret
        return settings.STRIPE_WEBHOOK_SECRET

    def get_recorder(self):
        return self.record_subscription or save_subscription

    def http_method_not_allowed(self, request, *args, **kwargs):
        logger.warning(f'Method {request.method} not allowed on {request.path}')
        response = HttpResponse('Method not allowed', status=status.HTTP_405_METHOD_NOT_ALLOWED,
                                content_type='text/plain')
        response['Allow'] = 'POST'
        return response

    def post(self, request):
        """Handle Stripe webhook events."""
        # Read the raw stream; request.data would re-serialize the payload
        payload = read_raw_body(request)
        signature = request.META.get(SIGNATURE_HEADER)

        try:
            event = construct_event(
                payload,
                signature,
                self.get_webhook_secret(),
                tolerance=settings.STRIPE_WEBHOOK_TOLERANCE,
            )
        except WebhookSignatureError as e:
            logger.warning(f'Webhook signature verification failed: {e.message}')
            return HttpResponse(
                f'Webhook Error: {e.message}',
                status=e.status_code,
                content_type='text/plain',
            )

        event_type = event.get('type')

        if not is_relevant(event_type):
            logger.info(f'Ignoring Stripe event: {event_type}')
            return Response({'received': True})

        logger.info(f'Received Stripe webhook: {event_type} ({event.get("id")})')
        logger.debug(f'Stripe event payload: {event}')

        try:
            billing_event = parse_event(event)
            self.get_recorder()(
                billing_event.subscription_id,
                billing_event.customer_id,
                is_new=billing_event.is_new,
            )
        except Exception as e:
            logger.error(f'{HANDLER_FAILED_MESSAGE} {event_type}: {e}', exc_info=True)
            return Response(
                {'error': HANDLER_FAILED_MESSAGE},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response({'received': True})
