"""
Menu service - users, user groups, permissions and menu composition.

Users and groups are soft deleted by updating them with ``deleted=True``;
``delete_user``/``delete_group`` remove the row and refuse records that
are already soft deleted.
"""

import logging
from typing import Iterable, List, Optional

from hospital.core.exceptions import AlreadySoftDeleted, NotFound
from hospital.domain.entities import (
    Permission,
    User,
    UserGroup,
    UserMenuItem,
    UserPermissions,
)
from hospital.repositories.menu_repo import GroupPermissionRepository, MenuRepository
from hospital.repositories.user_repo import UserGroupRepository, UserRepository
from hospital.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

USER_ALREADY_SOFT_DELETED = "The user is already soft deleted."
GROUP_ALREADY_SOFT_DELETED = "The group is already soft deleted."


class MenuService:
    def __init__(self, uow: Optional[UnitOfWork] = None) -> None:
        self.uow = uow or UnitOfWork()

    # ------------------- users -------------------

    def get_users(self) -> List[User]:
        with self.uow.transaction() as tx:
            return UserRepository(tx.session).get_all()

    def get_users_in_group(self, group_code: str) -> List[User]:
        with self.uow.transaction() as tx:
            return UserRepository(tx.session).get_all(group_code=group_code)

    def get_user_by_name(
        self, user_name: str, with_soft_deleted: bool = False
    ) -> Optional[User]:
        deleted = None if with_soft_deleted else False
        with self.uow.transaction() as tx:
            return UserRepository(tx.session).get_by_name(user_name, deleted=deleted)

    def get_user_by_name_and_is_deleted(self, user_name: str) -> Optional[User]:
        """Return the user only if it is soft deleted."""
        with self.uow.transaction() as tx:
            return UserRepository(tx.session).get_by_name(user_name, deleted=True)

    def get_user_info(self, user_name: str) -> Optional[str]:
        user = self.get_user_by_name(user_name)
        if user is None:
            raise NotFound("User", user_name, "User not found.")
        return user.description

    def count_active_users(self) -> int:
        with self.uow.transaction() as tx:
            return UserRepository(tx.session).count_active()

    def count_active_groups(self) -> int:
        with self.uow.transaction() as tx:
            return UserGroupRepository(tx.session).count_active()

    def is_user_name_present(self, user_name: str) -> bool:
        with self.uow.transaction() as tx:
            return UserRepository(tx.session).exists(user_name)

    def is_group_name_present(self, group_code: str) -> bool:
        with self.uow.transaction() as tx:
            return UserGroupRepository(tx.session).exists(group_code)

    def new_user(self, user: User) -> User:
        with self.uow.transaction() as tx:
            return UserRepository(tx.session).save_all([user])[0]

    def update_user(self, user: User) -> User:
        with self.uow.transaction() as tx:
            users = UserRepository(tx.session)
            if not users.exists(user.user_name):
                raise NotFound("User", user.user_name)
            return users.save_all([user])[0]

    def delete_user(self, user: User) -> None:
        with self.uow.transaction() as tx:
            users = UserRepository(tx.session)
            if users.get_by_name(user.user_name, deleted=True) is not None:
                raise AlreadySoftDeleted(USER_ALREADY_SOFT_DELETED)
            users.delete(user.user_name)

    # ------------------- groups -------------------

    def get_user_groups(self) -> List[UserGroup]:
        with self.uow.transaction() as tx:
            return UserGroupRepository(tx.session).get_all()

    def find_group_by_code(
        self, code: str, with_soft_deleted: bool = False
    ) -> Optional[UserGroup]:
        deleted = None if with_soft_deleted else False
        with self.uow.transaction() as tx:
            return UserGroupRepository(tx.session).get_by_code(code, deleted=deleted)

    def find_group_by_code_and_is_deleted(self, code: str) -> Optional[UserGroup]:
        with self.uow.transaction() as tx:
            return UserGroupRepository(tx.session).get_by_code(code, deleted=True)

    def new_user_group(
        self, group: UserGroup, permissions: Optional[Iterable[Permission]] = None
    ) -> UserGroup:
        with self.uow.transaction() as tx:
            saved = UserGroupRepository(tx.session).save_all([group])[0]
            permissions = list(permissions or [])
            if permissions:
                GroupPermissionRepository(tx.session).replace_for_group(
                    saved.code, permissions
                )
            return saved

    def update_user_group(
        self, group: UserGroup, permissions: Optional[Iterable[Permission]] = None
    ) -> UserGroup:
        """Update description and deleted flag; a non-empty ``permissions``
        list replaces the group's permission assignments."""
        with self.uow.transaction() as tx:
            groups = UserGroupRepository(tx.session)
            current = groups.get_by_code(group.code, deleted=None)
            if current is None:
                raise NotFound("UserGroup", group.code)
            if current.deleted and group.deleted:
                raise AlreadySoftDeleted(GROUP_ALREADY_SOFT_DELETED)
            saved = groups.save_all([group])[0]
            permissions = list(permissions or [])
            if permissions:
                GroupPermissionRepository(tx.session).replace_for_group(
                    saved.code, permissions
                )
            return saved

    def delete_group(self, group: UserGroup) -> None:
        with self.uow.transaction() as tx:
            groups = UserGroupRepository(tx.session)
            if groups.get_by_code(group.code, deleted=True) is not None:
                raise AlreadySoftDeleted(GROUP_ALREADY_SOFT_DELETED)
            MenuRepository(tx.session).replace_group_menu(group.code, [])
            GroupPermissionRepository(tx.session).replace_for_group(group.code, [])
            groups.delete(group.code)

    # ------------------- menus & permissions -------------------

    def get_menu(self, user: User) -> List[UserMenuItem]:
        """Menu items of the user's group, ordered by position."""
        with self.uow.transaction() as tx:
            return MenuRepository(tx.session).get_user_menu(user.user_name)

    def get_group_menu(self, group: UserGroup) -> List[UserMenuItem]:
        """Every menu item, active where the group has an active assignment."""
        with self.uow.transaction() as tx:
            return MenuRepository(tx.session).get_group_menu(group.code)

    def set_group_menu(self, group: UserGroup, items: Iterable[UserMenuItem]) -> bool:
        with self.uow.transaction() as tx:
            count = MenuRepository(tx.session).replace_group_menu(group.code, items)
        logger.info(
            "Group menu replaced",
            extra={"context": {"group_code": group.code, "items": count}},
        )
        return True

    def save_menu_items(self, items: Iterable[UserMenuItem]) -> None:
        with self.uow.transaction() as tx:
            MenuRepository(tx.session).save_menu_items(items)

    def get_group_permissions(self, group: UserGroup) -> List[Permission]:
        with self.uow.transaction() as tx:
            return GroupPermissionRepository(tx.session).get_for_group(group.code)

    def get_user_permissions(self, user: User) -> UserPermissions:
        with self.uow.transaction() as tx:
            current = UserRepository(tx.session).get_by_name(user.user_name)
            if current is None:
                raise NotFound("User", user.user_name, "User not found.")
            permissions = GroupPermissionRepository(tx.session).get_for_group(
                current.group_code
            )
        return UserPermissions(
            user_name=current.user_name,
            group_code=current.group_code,
            permissions=permissions,
        )
