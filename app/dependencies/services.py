from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.services.credential_store import AccountStore
from app.services.nih_reporter import NihReporterClient
from app.services.payments import StripePayments
from app.services.results_email import ResultsMailer


def get_account_store(db: Session = Depends(get_db)) -> AccountStore:
    return AccountStore(db)


def get_search_client(settings: Settings = Depends(get_settings)) -> NihReporterClient:
    return NihReporterClient(settings.NIH_REPORTER_URL, timeout=settings.NIH_REQUEST_TIMEOUT)


def get_results_mailer(settings: Settings = Depends(get_settings)) -> ResultsMailer:
    return ResultsMailer(
        api_key=settings.RESEND_API_KEY,
        sender_email=settings.SENDER_EMAIL,
        sender_name=settings.SENDER_NAME,
    )


def get_payments(settings: Settings = Depends(get_settings)) -> StripePayments:
    return StripePayments(
        secret_key=settings.STRIPE_SECRET_KEY,
        price_id=settings.STRIPE_PRICE_ID,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        frontend_url=settings.FRONTEND_URL,
    )
