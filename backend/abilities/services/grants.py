"""Read and edit ability grants.

Roles and actions are meant to be managed by the application itself (an
admin creates an 'editor' role, gives it 'edit_post' and 'delete_post', and
adds users to it), so these helpers cover the grant tables:

  load_user()                 user with direct actions, roles and role actions
  get_or_create_action()      find an action by name, creating it if needed
  get_or_create_role()        same for roles
  grant_user_action()         direct user → action grant
  revoke_user_action()
  grant_role_action()         role → action grant
  add_user_role()             user → role membership
  remove_user_role()

Every helper is idempotent. They flush so new ids are available but never
commit; the session dependency commits with the enclosing request.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from abilities.models import Action, Role, User

logger = logging.getLogger(__name__)


async def load_user(db: AsyncSession, user_id: int) -> User | None:
    """Load a user with every collection the ability check reads."""
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .options(
            selectinload(User.actions),
            selectinload(User.roles).selectinload(Role.actions),
        )
    )
    return result.scalar_one_or_none()


async def get_or_create_action(
    db: AsyncSession, name: str, description: str | None = None
) -> Action:
    result = await db.execute(select(Action).where(Action.name == name))
    action = result.scalar_one_or_none()
    if action is None:
        action = Action(name=name, description=description, users=[], roles=[])
        db.add(action)
        await db.flush()
        logger.info(f"Created action {name!r}")
    return action


async def get_or_create_role(db: AsyncSession, name: str) -> Role:
    result = await db.execute(select(Role).where(Role.name == name))
    role = result.scalar_one_or_none()
    if role is None:
        role = Role(name=name, actions=[], users=[])
        db.add(role)
        await db.flush()
        logger.info(f"Created role {name!r}")
    return role


async def grant_user_action(db: AsyncSession, user: User, action_name: str) -> Action:
    action = await get_or_create_action(db, action_name)
    if action not in user.actions:
        user.actions.append(action)
        await db.flush()
    return action


async def revoke_user_action(db: AsyncSession, user: User, action_name: str) -> bool:
    """Remove a direct grant. Returns False if the user never held it directly.

    Grants held through roles are untouched.
    """
    for action in list(user.actions):
        if action.name == action_name:
            user.actions.remove(action)
            await db.flush()
            return True
    return False


async def grant_role_action(db: AsyncSession, role: Role, action_name: str) -> Action:
    action = await get_or_create_action(db, action_name)
    if action not in role.actions:
        role.actions.append(action)
        await db.flush()
    return action


async def add_user_role(db: AsyncSession, user: User, role_name: str) -> Role:
    role = await get_or_create_role(db, role_name)
    if role not in user.roles:
        user.roles.append(role)
        await db.flush()
    return role


async def remove_user_role(db: AsyncSession, user: User, role_name: str) -> bool:
    for role in list(user.roles):
        if role.name == role_name:
            user.roles.remove(role)
            await db.flush()
            return True
    return False
