"""Aggregate model imports so `Base.metadata` sees every table."""

from abilities.models.action import Action
from abilities.models.role import Role, role_actions
from abilities.models.user import User, user_actions, user_roles

__all__ = [
    "Action",
    "Role",
    "User",
    "role_actions",
    "user_actions",
    "user_roles",
]
