"""Menu and permission assignment repositories.

A user's menu is the set of items assigned to the user's group. A group's
menu lists every item and marks the ones the group has active.
"""

from typing import Iterable, List, Optional

from sqlalchemy import and_, delete, select

from hospital.db.base import GroupMenu as DbGroupMenu
from hospital.db.base import GroupPermission as DbGroupPermission
from hospital.db.base import MenuItem as DbMenuItem
from hospital.db.base import Permission as DbPermission
from hospital.db.base import User as DbUser
from hospital.domain.entities import Permission as DomainPermission
from hospital.domain.entities import UserMenuItem
from hospital.domain.interfaces import IGroupPermissionRepository, IMenuRepository


def _menu_item(row: DbMenuItem, active: Optional[bool]) -> UserMenuItem:
    return UserMenuItem(
        code=row.code,
        button_label=row.button_label,
        alt_label=row.alt_label,
        tooltip=row.tooltip,
        shortcut=row.shortcut,
        submenu=row.submenu,
        handler=row.handler,
        is_submenu=row.is_submenu,
        position=row.position,
        active=bool(active),
    )


class MenuRepository(IMenuRepository):
    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_user_menu(self, user_name: str) -> List[UserMenuItem]:
        stmt = (
            select(DbMenuItem, DbGroupMenu.active)
            .join(DbGroupMenu, DbGroupMenu.menu_item_code == DbMenuItem.code)
            .join(DbUser, DbUser.group_code == DbGroupMenu.group_code)
            .where(DbUser.user_name == user_name)
            .order_by(DbMenuItem.position, DbMenuItem.code)
        )
        return [_menu_item(item, active) for item, active in self.db.execute(stmt)]

    def get_group_menu(self, group_code: str) -> List[UserMenuItem]:
        stmt = (
            select(DbMenuItem, DbGroupMenu.active)
            .outerjoin(
                DbGroupMenu,
                and_(
                    DbGroupMenu.menu_item_code == DbMenuItem.code,
                    DbGroupMenu.group_code == group_code,
                ),
            )
            .order_by(DbMenuItem.position, DbMenuItem.code)
        )
        return [_menu_item(item, active) for item, active in self.db.execute(stmt)]

    def replace_group_menu(self, group_code: str, items: Iterable[UserMenuItem]) -> int:
        self.db.execute(delete(DbGroupMenu).where(DbGroupMenu.group_code == group_code))
        count = 0
        for item in items:
            self.db.add(
                DbGroupMenu(
                    group_code=group_code,
                    menu_item_code=item.code,
                    active=bool(item.active),
                )
            )
            count += 1
        self.db.flush()
        return count

    def save_menu_items(self, items: Iterable[UserMenuItem]) -> None:
        """Insert or update menu item definitions (assignment flags ignored)."""
        for item in items:
            row = self.db.get(DbMenuItem, item.code)
            if row is None:
                row = DbMenuItem(code=item.code)
                self.db.add(row)
            row.button_label = item.button_label
            row.alt_label = item.alt_label
            row.tooltip = item.tooltip
            row.shortcut = item.shortcut
            row.submenu = item.submenu
            row.handler = item.handler
            row.is_submenu = item.is_submenu
            row.position = item.position
        self.db.flush()


class GroupPermissionRepository(IGroupPermissionRepository):
    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_for_group(self, group_code: str) -> List[DomainPermission]:
        stmt = (
            select(DbPermission)
            .join(DbGroupPermission, DbGroupPermission.permission_id == DbPermission.id)
            .where(DbGroupPermission.group_code == group_code)
            .order_by(DbPermission.name)
        )
        return [self._to_domain(row) for row in self.db.scalars(stmt)]

    def replace_for_group(
        self, group_code: str, permissions: Iterable[DomainPermission]
    ) -> int:
        self.db.execute(
            delete(DbGroupPermission).where(DbGroupPermission.group_code == group_code)
        )
        count = 0
        for permission in permissions:
            row = self._resolve(permission)
            self.db.add(DbGroupPermission(group_code=group_code, permission_id=row.id))
            count += 1
        self.db.flush()
        return count

    def _resolve(self, permission: DomainPermission) -> DbPermission:
        """Find the permission row by id or name, creating it when unknown."""
        row = None
        if permission.id is not None:
            row = self.db.get(DbPermission, permission.id)
        if row is None:
            row = self.db.scalars(
                select(DbPermission).where(DbPermission.name == permission.name)
            ).first()
        if row is None:
            row = DbPermission(name=permission.name, description=permission.description)
            self.db.add(row)
            self.db.flush()
        return row

    @staticmethod
    def _to_domain(row: DbPermission) -> DomainPermission:
        return DomainPermission(name=row.name, description=row.description, id=row.id)
