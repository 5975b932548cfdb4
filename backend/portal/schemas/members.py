"""Pydantic schemas for member accounts and login."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SubscriptionStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRING = "Expiring"
    TRIAL = "Trial"


class MemberAccount(BaseModel):
    """Authenticated member account (pharmacy/team).

    Created on successful login, held in the local store for the session and
    removed on logout.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    pharmacy_name: str = Field(default="", alias="pharmacyName")
    email: str
    subscription_status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE, alias="subscriptionStatus"
    )
    last_login_iso: str = Field(alias="lastLoginISO")


class LoginPayload(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    token: str
    member: MemberAccount
