"""Pydantic schemas for ability introspection and checks."""

from pydantic import BaseModel, Field


class UserAbilities(BaseModel):
    user_id: int
    is_super_user: bool
    roles: list[str]
    direct_actions: list[str]
    actions: list[str]


class AbilityCheckRequest(BaseModel):
    actions: list[str] = Field(..., min_length=1)


class AbilityCheckResponse(BaseModel):
    granted: bool
    outcome: str
    missing: list[str] = []
