"""Ability introspection router.

Endpoints:
    GET  /api/abilities/me      Effective abilities of the current user
    POST /api/abilities/check   Check a list of abilities for the current user
"""

from fastapi import APIRouter, Depends

from abilities.auth.abilities import possessed_actions
from abilities.auth.deps import RequestAbilities, get_abilities
from abilities.middleware.exceptions import NoUserError
from abilities.schemas.abilities import (
    AbilityCheckRequest,
    AbilityCheckResponse,
    UserAbilities,
)

router = APIRouter()


@router.get("/me", response_model=UserAbilities)
async def my_abilities(abilities: RequestAbilities = Depends(get_abilities)):
    """List what the current user can do.

    For the super-user `actions` still lists real grants only; the
    `is_super_user` flag is what lets them through every check.
    """
    user = abilities.current_user
    if user is None:
        raise NoUserError()

    return UserAbilities(
        user_id=user.id,
        is_super_user=user.id == abilities.checker.super_user_id,
        roles=sorted(role.name for role in user.roles),
        direct_actions=sorted(act.name for act in user.actions),
        actions=sorted(possessed_actions(user)),
    )


@router.post("/check", response_model=AbilityCheckResponse)
async def check_abilities(
    body: AbilityCheckRequest,
    abilities: RequestAbilities = Depends(get_abilities),
):
    """Report whether the current user holds ALL requested abilities.

    Never answers 401/403: a missing user or ability is reported in the body.
    """
    result = abilities.evaluate(*body.actions)
    return AbilityCheckResponse(
        granted=result.granted,
        outcome=result.outcome.value,
        missing=list(result.missing),
    )
