"""User and user group repositories.

``deleted`` filters follow one convention: ``False`` active only, ``True``
soft deleted only, ``None`` either.
"""

from typing import List, Optional

from sqlalchemy import func, select

from hospital.db.base import User as DbUser
from hospital.db.base import UserGroup as DbUserGroup
from hospital.domain.entities import User as DomainUser
from hospital.domain.entities import UserGroup as DomainUserGroup
from hospital.domain.interfaces import IUserGroupRepository, IUserRepository

from .base_repo import SqlAlchemyEntityStore


class UserRepository(SqlAlchemyEntityStore, IUserRepository):
    """Repository for User persistence operations."""

    model = DbUser
    entity = DomainUser
    entity_name = "User"
    fields = ("group_code", "description", "deleted")

    def get_by_name(
        self, user_name: str, deleted: Optional[bool] = False
    ) -> Optional[DomainUser]:
        stmt = select(DbUser).where(DbUser.user_name == user_name)
        if deleted is not None:
            stmt = stmt.where(DbUser.deleted.is_(deleted))
        return self._to_domain(self.db.scalars(stmt).first())

    def get_all(self, group_code: Optional[str] = None) -> List[DomainUser]:
        stmt = select(DbUser).order_by(DbUser.user_name)
        if group_code is not None:
            stmt = stmt.where(DbUser.group_code == group_code)
        return [self._to_domain(row) for row in self.db.scalars(stmt)]

    def exists(self, user_name: str) -> bool:
        return self.db.get(DbUser, user_name) is not None

    def count_active(self) -> int:
        stmt = select(func.count()).select_from(DbUser).where(DbUser.deleted.is_(False))
        return self.db.scalar(stmt) or 0

    def delete(self, user_name: str) -> bool:
        row = self.db.get(DbUser, user_name)
        if row is None:
            return False
        self.db.delete(row)
        self.db.flush()
        return True


class UserGroupRepository(SqlAlchemyEntityStore, IUserGroupRepository):
    """Repository for UserGroup persistence operations."""

    model = DbUserGroup
    entity = DomainUserGroup
    entity_name = "UserGroup"
    fields = ("description", "deleted")

    def get_by_code(
        self, code: str, deleted: Optional[bool] = False
    ) -> Optional[DomainUserGroup]:
        stmt = select(DbUserGroup).where(DbUserGroup.code == code)
        if deleted is not None:
            stmt = stmt.where(DbUserGroup.deleted.is_(deleted))
        return self._to_domain(self.db.scalars(stmt).first())

    def get_all(self) -> List[DomainUserGroup]:
        stmt = select(DbUserGroup).order_by(DbUserGroup.code)
        return [self._to_domain(row) for row in self.db.scalars(stmt)]

    def exists(self, code: str) -> bool:
        return self.db.get(DbUserGroup, code) is not None

    def count_active(self) -> int:
        stmt = (
            select(func.count())
            .select_from(DbUserGroup)
            .where(DbUserGroup.deleted.is_(False))
        )
        return self.db.scalar(stmt) or 0

    def delete(self, code: str) -> bool:
        row = self.db.get(DbUserGroup, code)
        if row is None:
            return False
        self.db.delete(row)
        self.db.flush()
        return True
