"""
Notification system for the Diván Japonés backend.

This module handles:
- Composing subscriber emails for new articles, activities and magazines
- Sending email via Resend or SMTP
- Broadcasting to all newsletter subscribers (BCC)
- Flushing pending notifications on a schedule or on demand
"""

from .dispatcher import dispatch_broadcast, notify_subscription
from .flush_pending import flush_pending_notifications
from .scheduler import NotificationScheduler

__all__ = [
    'dispatch_broadcast',
    'notify_subscription',
    'flush_pending_notifications',
    'NotificationScheduler',
]
