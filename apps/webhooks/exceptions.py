"""
Webhook errors.

Signature failures are client errors (400) and end the request. Everything
raised while dispatching a verified event is a server-side failure.
"""
from apps.core.exceptions import AuthenticationError, InternalError


class WebhookSignatureError(AuthenticationError):
    """The payload could not be verified against the webhook secret."""
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class WebhookError(InternalError):
    """A verified event could not be dispatched."""


class WebhookPayloadError(WebhookError):
    """A relevant event is missing the fields its handler needs."""


class UnhandledEventError(WebhookError):
    """An event type reached dispatch without a parser."""
    def __init__(self, event_type: str):
        super().__init__('Unhandled event.', details={'event_type': event_type})
