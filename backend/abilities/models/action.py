"""Action: a named ability a user can hold directly or through a role.

Names are compared by exact string equality, so `delete_foo` and
`Delete_Foo` are different abilities.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from abilities.database import Base


class Action(Base):
    __tablename__ = "actions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(128), unique=True, nullable=False, index=True
    )
    description: Mapped[str | None] = mapped_column(Text)

    users = relationship(
        "User", secondary="user_actions", back_populates="actions", lazy="selectin"
    )
    roles = relationship(
        "Role", secondary="role_actions", back_populates="actions", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Action {self.name!r}>"
