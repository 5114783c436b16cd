from app.models.account import Account, SubscriptionTier

__all__ = [
    "Account",
    "SubscriptionTier",
]
