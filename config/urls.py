"""
URL Configuration for the Ignews Backend

API routes are prefixed with /api/; the site pages are served at the root.
"""
from django.contrib import admin
from django.urls import include, path

from apps.core.views import health_check

urlpatterns = [
    # Django Admin
    path('admin/', admin.site.urls),

    # Health check endpoint (public)
    path('api/health', health_check, name='health_check'),

    # Webhooks (Stripe)
    path('api/webhooks', include('apps.webhooks.urls')),

    # Site pages (header navigation)
    path('', include('apps.navigation.urls')),
]
