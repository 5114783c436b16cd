import enum

from sqlalchemy import Column, Integer, String, DateTime

from app.db.base import Base


class SubscriptionTier(str, enum.Enum):
    FREE = "free"
    PRO = "pro"


class Account(Base):
    """One record per user, keyed by the email address exactly as supplied."""

    __tablename__ = "accounts"

    email = Column(String(320), primary_key=True)
    password_hash = Column(String, nullable=False)  # Never returned to callers
    subscription_tier = Column(String(16), nullable=False, default=SubscriptionTier.FREE.value)
    monthly_search_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_reset_at = Column(DateTime(timezone=True), nullable=False)
    # Set when a checkout completes (Stripe customer / subscription ids)
    external_payment_id = Column(String, nullable=True)
    external_subscription_id = Column(String, nullable=True)
    upgraded_at = Column(DateTime(timezone=True), nullable=True)
    last_payment_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def tier(self) -> SubscriptionTier:
        try:
            return SubscriptionTier(self.subscription_tier)
        except ValueError:
            return SubscriptionTier.FREE

    def __repr__(self) -> str:
        return f"<Account {self.email} tier={self.subscription_tier} searches={self.monthly_search_count}>"
