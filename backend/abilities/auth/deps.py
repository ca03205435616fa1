"""FastAPI dependencies for ability checks.

Dependencies:
  get_current_user_id    → user id the host's auth layer put on request.state
  get_current_user       → that user, loaded with grants (or None)
  get_ability_checker    → AbilityChecker configured from settings
  get_abilities          → RequestAbilities bound to the current request
  require_abilities(...) → restrict to users holding ALL listed abilities

Authentication is the host's job. Set `request.state.user_id` in your own
middleware, or override `get_current_user_id` via `app.dependency_overrides`.
"""

from collections.abc import Sequence

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from abilities.auth.abilities import (
    USE_AMBIENT,
    AbilityChecker,
    ExplicitUser,
    GrantResult,
    Subject,
    UserLike,
)
from abilities.config import settings
from abilities.database import get_db
from abilities.models.user import User
from abilities.services.grants import load_user


# ── Ambient user ────────────────────────────────────────────

async def get_current_user_id(request: Request) -> int | None:
    """Return the authenticated user id for this request, if any."""
    return getattr(request.state, "user_id", None)


async def get_current_user(
    user_id: int | None = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Load the current user with direct actions, roles and role actions.

    Returns None when nobody is logged in or the id no longer exists; the
    ability check turns that into NoUserError.
    """
    if user_id is None:
        return None
    return await load_user(db, user_id)


def get_ability_checker() -> AbilityChecker:
    return AbilityChecker.from_settings(settings)


# ── Request-bound checks ────────────────────────────────────

class RequestAbilities:
    """Ability checks bound to one request's current user.

    Usage:
        @router.delete("/foo")
        async def delete_foo(abilities: RequestAbilities = Depends(get_abilities)):
            abilities.assert_user_ability("delete_foo")
            ...

    Pass `user=` to check someone other than the current user.
    """

    def __init__(self, checker: AbilityChecker, current_user: User | None):
        self.checker = checker
        self.current_user = current_user

    def _subject(self, user: UserLike | None) -> Subject:
        return USE_AMBIENT if user is None else ExplicitUser(user)

    def _current(self) -> User | None:
        return self.current_user

    def evaluate(self, *actions: str, user: UserLike | None = None) -> GrantResult:
        return self.checker.evaluate(self._subject(user), actions, self._current)

    def assert_user_ability(self, *actions: str, user: UserLike | None = None) -> GrantResult:
        return self.checker.assert_ability(self._subject(user), actions, self._current)

    def check_user_ability(self, *actions: str, user: UserLike | None = None) -> bool:
        return self.checker.check_ability(self._subject(user), actions, self._current)


async def get_abilities(
    checker: AbilityChecker = Depends(get_ability_checker),
    user: User | None = Depends(get_current_user),
) -> RequestAbilities:
    return RequestAbilities(checker, user)


# ── Ability-based access control ────────────────────────────

def require_abilities(*actions: str):
    """Dependency factory: restrict to users who hold ALL listed abilities.

    The super-user always passes. Missing user → 401, missing ability → 403
    (via the handlers in abilities.middleware.exceptions).

    Usage:
        @router.post("/foo/delete-all")
        async def delete_all(user: User = Depends(require_abilities("delete_foo"))):
            ...
    """
    required: Sequence[str] = tuple(actions)
    if not required:
        raise ValueError("require_abilities() needs at least one action name")

    async def _check(abilities: RequestAbilities = Depends(get_abilities)) -> User:
        abilities.assert_user_ability(*required)
        return abilities.current_user

    return _check
