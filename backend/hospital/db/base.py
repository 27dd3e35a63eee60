from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .session import Base


class TimestampMixin:
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )


# ------------------- PATIENTS -------------------
class Patient(TimestampMixin, Base):
    """Patient identity. Soft deleted rows stay addressable by code."""

    __tablename__ = "patients"

    code: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    second_name: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    sex: Mapped[str] = mapped_column(String(1), nullable=False)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    age: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    age_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    next_kin: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    telephone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    mother_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # 'A' alive, 'D' dead, 'U' unknown
    mother: Mapped[str] = mapped_column(String(1), nullable=False, default="U")
    father_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    father: Mapped[str] = mapped_column(String(1), nullable=False, default="U")
    blood_type: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    # 'Y', 'N', 'U'
    has_insurance: Mapped[str] = mapped_column(String(1), nullable=False, default="U")
    parent_together: Mapped[str] = mapped_column(
        String(1), nullable=False, default="U"
    )
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )

    def __repr__(self):
        return f"<Patient(code={self.code}, name='{self.name}', deleted={self.deleted})>"


class Visit(Base):
    """Scheduled or completed visit of a patient."""

    __tablename__ = "visits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_code: Mapped[int] = mapped_column(
        Integer, ForeignKey("patients.code"), nullable=False, index=True
    )
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    ward_code: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    service: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sms: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    patient: Mapped["Patient"] = relationship("Patient")

    def __repr__(self):
        return f"<Visit(id={self.id}, patient_code={self.patient_code})>"


class PatientExamination(Base):
    """Vital signs and measurements recorded for a patient."""

    __tablename__ = "patient_examinations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_code: Mapped[int] = mapped_column(
        Integer, ForeignKey("patients.code"), nullable=False, index=True
    )
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    temperature: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(4, 1), nullable=True
    )
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    patient: Mapped["Patient"] = relationship("Patient")


class Admission(Base):
    """Ward admission. Open while admitted, not deleted and not discharged."""

    __tablename__ = "admissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_code: Mapped[int] = mapped_column(
        Integer, ForeignKey("patients.code"), nullable=False, index=True
    )
    ward_code: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    admission_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    discharge_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    admitted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    patient: Mapped["Patient"] = relationship("Patient")


class Bill(Base):
    """Patient bill. Status 'O' open (pending), 'C' closed, 'D' deleted."""

    __tablename__ = "bills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_code: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("patients.code"), nullable=True, index=True
    )
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[str] = mapped_column(String(1), nullable=False, default="O")
    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )

    patient: Mapped[Optional["Patient"]] = relationship("Patient")


# ------------------- EXAMS -------------------
class ExamType(TimestampMixin, Base):
    __tablename__ = "exam_types"

    code: Mapped[str] = mapped_column(String(2), primary_key=True)
    description: Mapped[str] = mapped_column(String(50), nullable=False)


class Exam(TimestampMixin, Base):
    __tablename__ = "exams"

    code: Mapped[str] = mapped_column(String(10), primary_key=True)
    description: Mapped[str] = mapped_column(String(100), nullable=False)
    exam_type_code: Mapped[str] = mapped_column(
        String(2), ForeignKey("exam_types.code"), nullable=False
    )
    # 1 single result from a list, 2 multiple results, 3 free text
    procedure: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    default_result: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    exam_type: Mapped["ExamType"] = relationship("ExamType", lazy="joined")


class ExamRow(Base):
    __tablename__ = "exam_rows"

    code: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    exam_code: Mapped[str] = mapped_column(
        String(10), ForeignKey("exams.code"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(String(50), nullable=False)


# ------------------- USERS & MENUS -------------------
class UserGroup(TimestampMixin, Base):
    __tablename__ = "user_groups"

    code: Mapped[str] = mapped_column(String(50), primary_key=True)
    description: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    users: Mapped[List["User"]] = relationship("User", back_populates="group")


class User(TimestampMixin, Base):
    __tablename__ = "users"

    user_name: Mapped[str] = mapped_column(String(50), primary_key=True)
    group_code: Mapped[str] = mapped_column(
        String(50), ForeignKey("user_groups.code"), nullable=False, index=True
    )
    description: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    group: Mapped["UserGroup"] = relationship("UserGroup", back_populates="users")


class MenuItem(Base):
    __tablename__ = "menu_items"

    code: Mapped[str] = mapped_column(String(50), primary_key=True)
    button_label: Mapped[str] = mapped_column(String(50), nullable=False)
    alt_label: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    tooltip: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    shortcut: Mapped[Optional[str]] = mapped_column(String(1), nullable=True)
    submenu: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    handler: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_submenu: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class GroupMenu(Base):
    __tablename__ = "group_menus"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_code: Mapped[str] = mapped_column(
        String(50), ForeignKey("user_groups.code"), nullable=False, index=True
    )
    menu_item_code: Mapped[str] = mapped_column(
        String(50), ForeignKey("menu_items.code"), nullable=False
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("group_code", "menu_item_code", name="uq_group_menu_item"),
    )


class Permission(Base):
    __tablename__ = "permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class GroupPermission(Base):
    __tablename__ = "group_permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_code: Mapped[str] = mapped_column(
        String(50), ForeignKey("user_groups.code"), nullable=False, index=True
    )
    permission_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("permissions.id"), nullable=False
    )

    permission: Mapped["Permission"] = relationship("Permission", lazy="joined")

    __table_args__ = (
        UniqueConstraint("group_code", "permission_id", name="uq_group_permission"),
    )
