"""
Stripe webhook signature verification.

Verification runs over the exact bytes Stripe sent, so the body is read
straight from the request stream instead of going through a parser.
"""
import json
import logging

import stripe

from .exceptions import WebhookSignatureError

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = 'HTTP_STRIPE_SIGNATURE'

_CHUNK_SIZE = 64 * 1024


def read_raw_body(stream, chunk_size: int = _CHUNK_SIZE) -> bytes:
    """Accumulate chunks from ``stream`` until it is exhausted."""
    chunks = []
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        if isinstance(chunk, str):
            chunk = chunk.encode('utf-8')
        chunks.append(chunk)
    return b''.join(chunks)


def construct_event(payload: bytes, signature: str | None, secret: str | None, tolerance: int = 300) -> dict:
    """
    Verify a Stripe webhook payload and decode the event.

    Args:
        payload: Raw request body
        signature: Value of the Stripe-Signature header
        secret: Webhook signing secret (whsec_...)
        tolerance: Maximum age of the signed timestamp, in seconds

    Returns:
        The decoded event

    Raises:
        WebhookSignatureError: missing header or secret, bad signature,
            stale timestamp, or a body that is not UTF-8 JSON
    """
    if not secret:
        logger.error('STRIPE_WEBHOOK_SECRET not configured')
        raise WebhookSignatureError('Webhook secret is not configured')

    if not signature:
        raise WebhookSignatureError('No Stripe signature provided')

    try:
        body = payload.decode('utf-8')
    except UnicodeDecodeError:
        raise WebhookSignatureError('Payload is not valid UTF-8')

    try:
        stripe.WebhookSignature.verify_header(body, signature, secret, tolerance)
    except stripe.SignatureVerificationError as e:
        raise WebhookSignatureError(str(e.user_message or e))
    except ValueError:
        # t=<non-integer> in the header
        raise WebhookSignatureError('Unable to extract timestamp and signatures from header')

    try:
        event = json.loads(body)
    except ValueError:
        raise WebhookSignatureError('Payload is not valid JSON')

    if not isinstance(event, dict) or 'type' not in event:
        raise WebhookSignatureError('Payload is not a Stripe event')

    return event
