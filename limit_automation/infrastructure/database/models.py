"""SQLAlchemy ORM models for credit-limit entities."""

from datetime import date, datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _uuid_pk() -> Mapped[str]:
    return mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )


class ClientModel(Base):
    """Insured client."""

    __tablename__ = "clients"

    id: Mapped[str] = _uuid_pk()
    client_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_auto_approve_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    insurer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    risk_analyst_id: Mapped[str | None] = mapped_column(String(255), nullable=True)


class DebtorModel(Base):
    """Buyer the client trades with on credit."""

    __tablename__ = "debtors"

    id: Mapped[str] = _uuid_pk()
    debtor_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    entity_name: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    abn: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    acn: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    registration_number: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    country_code: Mapped[str | None] = mapped_column(String(3), nullable=True)


class ClientDebtorModel(Base):
    """Active credit-limit record for a client/debtor pair."""

    __tablename__ = "client_debtors"
    __table_args__ = (UniqueConstraint("client_id", "debtor_id"),)

    id: Mapped[str] = _uuid_pk()
    client_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("clients.id"), nullable=False
    )
    debtor_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("debtors.id"), nullable=False
    )
    credit_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_endorsed_limit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    active_application_id: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)
    expiry_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class ApplicationModel(Base):
    """Persisted credit application."""

    __tablename__ = "applications"

    id: Mapped[str] = _uuid_pk()
    application_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    client_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("clients.id"), nullable=False, index=True
    )
    debtor_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("debtors.id"), nullable=False, index=True
    )
    client_debtor_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("client_debtors.id"), nullable=False, index=True
    )
    stage: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="DRAFT")
    credit_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    accepted_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    blockers: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_auto_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    approval_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    expiry_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    is_extended_payment_terms: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    extended_payment_terms_details: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_passed_overdue_amount: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    passed_overdue_details: Mapped[str] = mapped_column(Text, nullable=False, default="")
    outstanding_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    order_on_hand: Mapped[int | None] = mapped_column(Integer, nullable=True)
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_by_type: Mapped[str] = mapped_column(String(50), nullable=False, default="system")
    created_by_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
    )


class DebtorDirectorModel(Base):
    """Stakeholder disclosed against a debtor, unique per natural key."""

    __tablename__ = "debtor_directors"

    id: Mapped[str] = _uuid_pk()
    debtor_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("debtors.id"), nullable=False, index=True
    )
    natural_key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str | None] = mapped_column(String(20), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    driver_licence_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    entity_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    entity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    abn: Mapped[str | None] = mapped_column(String(50), nullable=True)
    acn: Mapped[str | None] = mapped_column(String(50), nullable=True)
    registration_number: Mapped[str | None] = mapped_column(String(100), nullable=True)


class PolicyModel(Base):
    """Insurance policy held by a client."""

    __tablename__ = "policies"

    id: Mapped[str] = _uuid_pk()
    client_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("clients.id"), nullable=False, index=True
    )
    product: Mapped[str] = mapped_column(String(255), nullable=False)
    inception_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expiry_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    discretionary_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    excess: Mapped[int | None] = mapped_column(Integer, nullable=True)


class TaskModel(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = _uuid_pk()
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False, index=True)
    created_by_type: Mapped[str] = mapped_column(String(50), nullable=False)
    created_by_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    assignee_type: Mapped[str] = mapped_column(String(50), nullable=False)
    assignee_id: Mapped[str] = mapped_column(String(255), nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
    )


class NotificationModel(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = _uuid_pk()
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user_type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
    )


class AuditLogModel(Base):
    __tablename__ = "audit_logs"

    id: Mapped[str] = _uuid_pk()
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_ref_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False, index=True)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    user_type: Mapped[str] = mapped_column(String(50), nullable=False)
    user_ref_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
    )


class SequenceModel(Base):
    """Organization-wide counters used to mint application and debtor codes."""

    __tablename__ = "sequences"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
