"""Ability-based authorization: the core check.

A user *possesses* an action when its name appears in the user's direct
grants or in the grants of any role the user belongs to. A check passes only
if EVERY required action is possessed; the configured super-user passes every
check regardless of grants.

Callers say whose abilities to check with a tagged value instead of passing
"maybe a user" positionally:
  - ExplicitUser(user)  check this user
  - USE_AMBIENT         ask the resolver for the current request's user

`evaluate()` does the work once and returns a GrantResult. The two public
entry points map that result differently:
  - assert_ability()  raises NoUserError / DeniedError
  - check_ability()   returns a bool

Usage:
    checker = AbilityChecker.from_settings(settings)
    checker.assert_ability(ExplicitUser(user), ["delete_foo"])
    if checker.check_ability(USE_AMBIENT, ["edit_bar"], resolver=lambda: current):
        ...
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, Union

from abilities.middleware.exceptions import DeniedError, NoUserError

logger = logging.getLogger(__name__)

DEFAULT_SUPER_USER_ID = 1


# ── Collaborator protocols ──────────────────────────────────

class ActionLike(Protocol):
    name: str


class RoleLike(Protocol):
    @property
    def actions(self) -> Iterable[ActionLike]: ...


class UserLike(Protocol):
    @property
    def id(self) -> Any: ...

    @property
    def actions(self) -> Iterable[ActionLike]: ...

    @property
    def roles(self) -> Iterable[RoleLike]: ...


CurrentUserResolver = Callable[[], "UserLike | None"]


# ── Whose abilities ─────────────────────────────────────────

@dataclass(frozen=True)
class ExplicitUser:
    user: UserLike


class UseAmbient:
    """Marker: resolve the user from the ambient request context."""

    _instance: UseAmbient | None = None

    def __new__(cls) -> UseAmbient:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "USE_AMBIENT"


USE_AMBIENT = UseAmbient()

Subject = Union[ExplicitUser, UseAmbient]


# ── Result ──────────────────────────────────────────────────

class Outcome(str, enum.Enum):
    SUPER_USER = "super_user"
    GRANTED = "granted"
    NO_USER = "no_user"
    DENIED = "denied"


@dataclass(frozen=True)
class GrantResult:
    outcome: Outcome
    actions: tuple[str, ...]
    user_id: Any = None
    missing: tuple[str, ...] = field(default=())

    @property
    def granted(self) -> bool:
        return self.outcome in (Outcome.SUPER_USER, Outcome.GRANTED)


# ── Possession ──────────────────────────────────────────────

def possessed_actions(user: UserLike) -> set[str]:
    """Names of every action the user holds directly or through a role."""
    names = {act.name for act in user.actions}
    for role in user.roles:
        names.update(act.name for act in role.actions)
    return names


def _validate_actions(actions: Sequence[str]) -> tuple[str, ...]:
    if isinstance(actions, str):
        raise TypeError(
            f"actions must be a sequence of action names, not a string: {actions!r}"
        )
    required = tuple(actions)
    if not required:
        raise ValueError("At least one action is required for an ability check")
    for name in required:
        if not isinstance(name, str):
            raise TypeError(f"Action names must be strings, got {name!r}")
    return required


# ── Checker ─────────────────────────────────────────────────

class AbilityChecker:
    """Grants or denies a list of required actions for one user."""

    def __init__(self, super_user_id: Any = DEFAULT_SUPER_USER_ID, debug: bool = False):
        self.super_user_id = super_user_id
        self.debug = debug

    @classmethod
    def from_settings(cls, settings) -> AbilityChecker:
        return cls(super_user_id=settings.super_user_id, debug=settings.debug)

    def evaluate(
        self,
        subject: Subject,
        actions: Sequence[str],
        resolver: CurrentUserResolver | None = None,
    ) -> GrantResult:
        """Evaluate the check without raising for NO_USER or DENIED.

        Raises TypeError / ValueError for malformed `actions` or `subject`.
        """
        required = _validate_actions(actions)
        user = self._resolve(subject, resolver)

        if user is None:
            return GrantResult(Outcome.NO_USER, required)

        if user.id == self.super_user_id:
            self._log("granted", required)
            return GrantResult(Outcome.SUPER_USER, required, user_id=user.id)

        possessed = possessed_actions(user)
        missing = tuple(name for name in required if name not in possessed)

        if missing:
            self._log("denied", required)
            return GrantResult(Outcome.DENIED, required, user_id=user.id, missing=missing)

        self._log("granted", required)
        return GrantResult(Outcome.GRANTED, required, user_id=user.id)

    def assert_ability(
        self,
        subject: Subject,
        actions: Sequence[str],
        resolver: CurrentUserResolver | None = None,
    ) -> GrantResult:
        """Return the result if granted, else raise NoUserError / DeniedError."""
        result = self.evaluate(subject, actions, resolver)
        if result.outcome is Outcome.NO_USER:
            raise NoUserError()
        if result.outcome is Outcome.DENIED:
            raise DeniedError(result.actions, result.missing)
        return result

    def check_ability(
        self,
        subject: Subject,
        actions: Sequence[str],
        resolver: CurrentUserResolver | None = None,
    ) -> bool:
        """Same check as assert_ability(), reported as a boolean."""
        return self.evaluate(subject, actions, resolver).granted

    # ── Internals ───────────────────────────────────────────

    @staticmethod
    def _resolve(
        subject: Subject, resolver: CurrentUserResolver | None
    ) -> UserLike | None:
        if isinstance(subject, ExplicitUser):
            return subject.user
        if isinstance(subject, UseAmbient):
            return resolver() if resolver is not None else None
        raise TypeError(
            f"subject must be ExplicitUser(...) or USE_AMBIENT, got {subject!r}"
        )

    def _log(self, verdict: str, actions: tuple[str, ...]) -> None:
        if self.debug:
            logger.debug(f"Ability {verdict}: {', '.join(actions)}")
