from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class RegisterAction(BaseModel):
    action: Literal["register"]
    email: Optional[str] = None
    password: Optional[str] = None


class LoginAction(BaseModel):
    action: Literal["login"]
    email: Optional[str] = None
    password: Optional[str] = None


class SearchAction(BaseModel):
    action: Literal["search"]
    email: Optional[str] = None
    criteria: Optional[dict] = None


class UpgradeAction(BaseModel):
    action: Literal["upgrade"]
    email: Optional[str] = None


class ResetAction(BaseModel):
    action: Literal["reset"]
    email: Optional[str] = None


AccountAction = Annotated[
    Union[RegisterAction, LoginAction, SearchAction, UpgradeAction, ResetAction],
    Field(discriminator="action"),
]

account_action_adapter = TypeAdapter(AccountAction)


class AccountView(BaseModel):
    email: str
    subscription_tier: str
    monthly_search_count: int
    created_at: Optional[str] = None
    last_reset_at: Optional[str] = None
    external_payment_id: Optional[str] = None
    external_subscription_id: Optional[str] = None
    upgraded_at: Optional[str] = None
    last_payment_at: Optional[str] = None


class AccountResponse(BaseModel):
    success: bool = True
    message: str
    user: AccountView


class SearchResponse(AccountResponse):
    results_count: int
    warning: Optional[str] = None


class UpgradeResponse(BaseModel):
    success: bool = True
    checkout_url: str


class ProjectSearchRequest(BaseModel):
    """Body of the ungated passthrough search."""

    criteria: Optional[dict] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    sort_field: Optional[str] = None
    sort_order: Optional[str] = None
