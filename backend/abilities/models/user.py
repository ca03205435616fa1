"""User: the subject of ability checks.

Only the columns the checker needs are modelled here. Host applications that
keep richer user records can map their own table onto `users` or satisfy the
`UserLike` protocol in `abilities.auth.abilities` directly.

Grants:
  - `actions`  direct user → action grants (user_actions)
  - `roles`    role memberships (user_roles), each role carrying its actions
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from abilities.database import Base

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)

user_actions = Table(
    "user_actions",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("action_id", Integer, ForeignKey("actions.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        String(128), unique=True, nullable=False, index=True
    )

    actions = relationship(
        "Action", secondary=user_actions, back_populates="users", lazy="selectin"
    )
    roles = relationship(
        "Role", secondary=user_roles, back_populates="users", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.username!r}>"
