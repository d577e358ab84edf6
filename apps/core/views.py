"""
Core Views for the Ignews Backend

Contains the health check endpoint.
"""
from django.conf import settings
from django.db import connection
from django.http import JsonResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """
    Health check endpoint for deployment verification.

    Returns:
        - 200: Service is healthy
        - 503: Service is unhealthy (database connection failed)

    Response includes:
        - status: 'healthy' or 'unhealthy'
        - database: 'connected' or error message
        - stripe_webhooks: 'configured' when a webhook secret is set
    """
    response_data = {
        'status': 'healthy',
        'service': 'ignews-backend',
        'database': 'unknown',
        'stripe_webhooks': 'configured' if settings.STRIPE_WEBHOOK_SECRET else 'missing_secret',
    }

    # Check database connection
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        response_data['database'] = 'connected'
    except Exception as e:
        response_data['status'] = 'unhealthy'
        response_data['database'] = f'error: {str(e)}'
        return JsonResponse(response_data, status=503)

    return JsonResponse(response_data)
