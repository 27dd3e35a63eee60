"""
Abstract interfaces for repositories following Interface Segregation Principle.

The merge workflow depends only on these contracts: a narrow entity store
per entity kind plus a few read-only precondition queries.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

from .entities import (
    Exam,
    ExamRow,
    ExamType,
    Patient,
    Permission,
    User,
    UserGroup,
    UserMenuItem,
)

T = TypeVar("T")


class IEntityStore(ABC, Generic[T]):
    """Key-addressed persistence for one entity kind."""

    @abstractmethod
    def load(self, key: Any) -> T:
        """Load an entity by key. Raises NotFound when absent."""
        pass

    @abstractmethod
    def save_all(self, entities: Iterable[T]) -> List[T]:
        """Insert or update the given entities."""
        pass

    @abstractmethod
    def update_where(self, predicate: Dict[str, Any], patch: Dict[str, Any]) -> int:
        """Apply ``patch`` to every row matching ``predicate`` (equality on
        columns). Returns the number of rows changed."""
        pass


class IPatientRepository(IEntityStore[Patient]):
    """Patient store with the lookups the services need."""

    @abstractmethod
    def get_by_code(
        self, code: int, include_deleted: bool = False
    ) -> Optional[Patient]:
        """Get patient by code; deleted patients only when requested."""
        pass

    @abstractmethod
    def get_active(self) -> List[Patient]:
        """Get all patients that are not soft deleted."""
        pass

    @abstractmethod
    def lock_for_merge(self, codes: Iterable[int]) -> List[Patient]:
        """Load and row-lock the given patients for the current transaction."""
        pass


class IPatientHistoryStore(ABC):
    """A category of patient-scoped records that follows the patient on merge."""

    category: str = ""

    @abstractmethod
    def count_for_patient(self, patient_code: int) -> int:
        pass

    @abstractmethod
    def reassign_patient(self, from_code: int, to_code: int) -> int:
        """Repoint every record of ``from_code`` to ``to_code``."""
        pass


class IBillReader(ABC):
    @abstractmethod
    def has_pending_bills(self, patient_code: int) -> bool:
        pass


class IAdmissionReader(ABC):
    @abstractmethod
    def has_open_admission(self, patient_code: int) -> bool:
        pass


class IExamTypeRepository(IEntityStore[ExamType]):
    @abstractmethod
    def get_all(self) -> List[ExamType]:
        pass


class IExamRepository(IEntityStore[Exam]):
    @abstractmethod
    def find_by_code(self, code: str) -> Optional[Exam]:
        pass

    @abstractmethod
    def exists(self, code: str) -> bool:
        pass

    @abstractmethod
    def search(
        self,
        description: Optional[str] = None,
        exam_type_description: Optional[str] = None,
    ) -> List[Exam]:
        pass

    @abstractmethod
    def delete(self, code: str) -> bool:
        pass


class IExamRowRepository(ABC):
    @abstractmethod
    def get_by_exam(self, exam_code: str) -> List[ExamRow]:
        """Rows of an exam ordered by description."""
        pass

    @abstractmethod
    def save_all(self, rows: Iterable[ExamRow]) -> List[ExamRow]:
        pass

    @abstractmethod
    def delete_all(self, rows: Iterable[ExamRow]) -> int:
        pass

    @abstractmethod
    def delete_by_exam(self, exam_code: str) -> int:
        pass


class IUserRepository(IEntityStore[User]):
    @abstractmethod
    def get_by_name(
        self, user_name: str, deleted: Optional[bool] = False
    ) -> Optional[User]:
        """``deleted=None`` matches regardless of the soft-delete flag."""
        pass

    @abstractmethod
    def get_all(self, group_code: Optional[str] = None) -> List[User]:
        pass

    @abstractmethod
    def exists(self, user_name: str) -> bool:
        pass

    @abstractmethod
    def count_active(self) -> int:
        pass

    @abstractmethod
    def delete(self, user_name: str) -> bool:
        pass


class IUserGroupRepository(IEntityStore[UserGroup]):
    @abstractmethod
    def get_by_code(
        self, code: str, deleted: Optional[bool] = False
    ) -> Optional[UserGroup]:
        pass

    @abstractmethod
    def get_all(self) -> List[UserGroup]:
        pass

    @abstractmethod
    def exists(self, code: str) -> bool:
        pass

    @abstractmethod
    def count_active(self) -> int:
        pass

    @abstractmethod
    def delete(self, code: str) -> bool:
        pass


class IMenuRepository(ABC):
    @abstractmethod
    def get_user_menu(self, user_name: str) -> List[UserMenuItem]:
        pass

    @abstractmethod
    def get_group_menu(self, group_code: str) -> List[UserMenuItem]:
        pass

    @abstractmethod
    def replace_group_menu(self, group_code: str, items: Iterable[UserMenuItem]) -> int:
        pass


class IGroupPermissionRepository(ABC):
    @abstractmethod
    def get_for_group(self, group_code: str) -> List[Permission]:
        pass

    @abstractmethod
    def replace_for_group(
        self, group_code: str, permissions: Iterable[Permission]
    ) -> int:
        pass
