"""
Django Admin Configuration for subscriptions.
"""
from django.contrib import admin

from .models import Customer, Subscription


class SubscriptionInline(admin.TabularInline):
    model = Subscription
    extra = 0
    fields = ['id', 'status', 'price_id', 'updated_at']
    readonly_fields = ['id', 'status', 'price_id', 'updated_at']
    can_delete = False


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    """Admin interface for customers."""
    list_display = ['email', 'stripe_customer_id', 'created_at']
    search_fields = ['email', 'stripe_customer_id']
    readonly_fields = ['id', 'created_at', 'updated_at']
    ordering = ['-created_at']
    inlines = [SubscriptionInline]


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    """Admin interface for subscriptions. Rows are written by the Stripe webhook."""
    list_display = ['id', 'customer', 'status', 'price_id', 'updated_at']
    list_filter = ['status']
    search_fields = ['id', 'customer__email', 'customer__stripe_customer_id']
    readonly_fields = ['id', 'created_at', 'updated_at']
    ordering = ['-updated_at']
