"""
Notification service layer.

- creation      → lifecycle hooks for posting works, chapters, series
- mailers       → send() by kind, one helper per email kind (in-app copy + email)
- subscriptions → subscription mail queue and its batched delivery
"""

# =====================================================
# CREATION LIFECYCLE
# =====================================================
from .creation import (
    on_create,
    on_before_update,
    on_after_save,
)

# =====================================================
# MAIL
# =====================================================
from .mailers import send

# =====================================================
# SUBSCRIPTION QUEUE
# =====================================================
from .subscriptions import (
    queue_subscription,
    deliver_subscription_mail,
)

# =====================================================
# PUBLIC EXPORTS
# =====================================================
__all__ = [
    # Creation lifecycle
    "on_create",
    "on_before_update",
    "on_after_save",

    # Mail
    "send",

    # Subscription queue
    "queue_subscription",
    "deliver_subscription_mail",
]
