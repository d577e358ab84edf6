"""
Subscription Models for the Ignews Backend

Customers are linked to Stripe through ``stripe_customer_id``; each
Subscription row mirrors the Stripe subscription with the same id.
"""
import uuid

from django.db import models


class Customer(models.Model):
    """
    A site user who can hold a Stripe subscription.
    Maps to: public.customers
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    stripe_customer_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customers'
        ordering = ['-created_at']

    def __str__(self):
        return self.email


class Subscription(models.Model):
    """
    A Stripe subscription owned by a customer.
    Maps to: public.subscriptions
    """
    STATUS_CHOICES = [
        ('incomplete', 'Incomplete'),
        ('incomplete_expired', 'Incomplete Expired'),
        ('trialing', 'Trialing'),
        ('active', 'Active'),
        ('past_due', 'Past Due'),
        ('canceled', 'Canceled'),
        ('unpaid', 'Unpaid'),
        ('paused', 'Paused'),
    ]

    # Stripe subscription id (sub_...)
    id = models.CharField(max_length=255, primary_key=True)
    customer = models.ForeignKey(
        Customer,
        on_delete=models.CASCADE,
        related_name='subscriptions'
    )
    status = models.CharField(max_length=50, choices=STATUS_CHOICES)
    price_id = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'subscriptions'
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.id} ({self.status})'

    @property
    def is_active(self) -> bool:
        return self.status == 'active'
