"""
Action dispatch endpoint used by the frontend: register, login, search, upgrade, reset.
"""
import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from app.core.errors import InvalidCredentials, InvalidInput, NotFound
from app.dependencies.services import get_account_store, get_payments, get_results_mailer, get_search_client
from app.schemas.actions import (
    AccountResponse,
    LoginAction,
    RegisterAction,
    ResetAction,
    SearchAction,
    SearchResponse,
    UpgradeAction,
    UpgradeResponse,
    account_action_adapter,
)
from app.services import account_service, search_gateway
from app.services.account_service import public_view
from app.services.credential_store import AccountStore
from app.services.nih_reporter import NihReporterClient
from app.services.payments import StripePayments
from app.services.results_email import ResultsMailer

logger = logging.getLogger(__name__)

router = APIRouter()


class ActionContext:
    """Collaborators available to every action handler for one request."""

    def __init__(
        self,
        store: AccountStore,
        client: NihReporterClient,
        mailer: ResultsMailer,
        payments: StripePayments,
    ):
        self.store = store
        self.client = client
        self.mailer = mailer
        self.payments = payments


def _register(action: RegisterAction, ctx: ActionContext) -> dict:
    account = account_service.register(ctx.store, action.email, action.password)
    return AccountResponse(message="Registration successful", user=public_view(account)).model_dump()


def _login(action: LoginAction, ctx: ActionContext) -> dict:
    try:
        account = account_service.authenticate(ctx.store, action.email, action.password)
    except NotFound:
        # Same answer as a wrong password so emails cannot be enumerated
        raise InvalidCredentials()
    return AccountResponse(message="Login successful", user=public_view(account)).model_dump()


def _search(action: SearchAction, ctx: ActionContext) -> dict:
    outcome = search_gateway.search(ctx.store, ctx.client, ctx.mailer, action.email, action.criteria)
    count = len(outcome.projects)
    if outcome.warning:
        message = (
            f"Search completed! {count} results found "
            "(email delivery failed - please check your email configuration)"
        )
    else:
        message = f"Search completed! {count} results sent to your email"
    response = SearchResponse(
        message=message,
        user=public_view(outcome.account),
        results_count=count,
        warning=outcome.warning,
    )
    if outcome.warning is None:
        return response.model_dump(exclude={"warning"})
    return response.model_dump()


def _upgrade(action: UpgradeAction, ctx: ActionContext) -> dict:
    checkout_url = account_service.begin_upgrade(ctx.store, ctx.payments, action.email)
    return UpgradeResponse(checkout_url=checkout_url).model_dump()


def _reset(action: ResetAction, ctx: ActionContext) -> dict:
    account = account_service.reset_counter(ctx.store, action.email)
    return AccountResponse(message="Search counter reset successfully", user=public_view(account)).model_dump()


# One handler per action variant; adding a variant to AccountAction needs an entry here
ACTION_HANDLERS = {
    RegisterAction: _register,
    LoginAction: _login,
    SearchAction: _search,
    UpgradeAction: _upgrade,
    ResetAction: _reset,
}


@router.post("/search")
async def dispatch_action(
    request: Request,
    store: AccountStore = Depends(get_account_store),
    client: NihReporterClient = Depends(get_search_client),
    mailer: ResultsMailer = Depends(get_results_mailer),
    payments: StripePayments = Depends(get_payments),
):
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidInput("Invalid request body")

    try:
        action = account_action_adapter.validate_python(body)
    except ValidationError as e:
        if any(err["type"] in ("union_tag_invalid", "union_tag_not_found") for err in e.errors()):
            raise InvalidInput("Invalid action")
        raise InvalidInput("Invalid request body")

    handler = ACTION_HANDLERS[type(action)]
    ctx = ActionContext(store=store, client=client, mailer=mailer, payments=payments)
    # Handlers block on the database, NIH RePORTER and Resend
    return await run_in_threadpool(handler, action, ctx)


@router.get("/search")
def dispatch_action_wrong_method():
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={"error": "Use POST method"},
    )
