"""SQLAlchemy models for the application."""

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from rentevent.db.base import Base


class Role(enum.Enum):
    CUSTOMER = "customer"
    PROVIDER = "provider"
    ADMIN = "admin"


class Gender(enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ServiceState(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


def enum_column(enum_cls: type) -> SQLEnum:
    """Enum column persisted by member name, never by value or ordinal."""
    return SQLEnum(
        enum_cls,
        native_enum=False,
        length=32,
        validate_strings=True,
        name=enum_cls.__name__.lower(),
    )


class Customer(Base):
    """Customer profile plus login credentials.

    The owned collections are deleted together with the customer and any
    child removed from a collection is deleted as an orphan.
    """
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Login identifier; always the customer's email address
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    firstname: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    lastname: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    nationality: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    gender: Mapped[Optional[Gender]] = mapped_column(enum_column(Gender), nullable=True)
    role: Mapped[Role] = mapped_column(enum_column(Role), nullable=False, default=Role.CUSTOMER)

    invoices: Mapped[List["Invoice"]] = relationship(
        back_populates="customer", cascade="all, delete-orphan", lazy="selectin"
    )
    cards: Mapped[List["Card"]] = relationship(
        back_populates="customer", cascade="all, delete-orphan", lazy="selectin"
    )
    events: Mapped[List["Event"]] = relationship(
        back_populates="customer", cascade="all, delete-orphan", lazy="selectin"
    )
    security_questions: Mapped[List["SecurityQuestion"]] = relationship(
        back_populates="customer", cascade="all, delete-orphan", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, username={self.username}, role={self.role})>"


class Provider(Base):
    """Company offering services for rent."""
    __tablename__ = "providers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False, unique=True, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    services: Mapped[List["Service"]] = relationship(
        back_populates="provider",
        cascade="all, delete-orphan",
        order_by="Service.id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Provider(id={self.id}, name={self.name})>"


class Service(Base):
    """Rentable service in the catalog."""
    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("cost >= 0", name="ck_services_cost_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # SERV-<8 hex>; written once at creation
    code: Mapped[str] = mapped_column(String(13), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    type: Mapped[str] = mapped_column(String(80), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    state: Mapped[ServiceState] = mapped_column(enum_column(ServiceState), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    customization: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    provider_id: Mapped[int] = mapped_column(
        ForeignKey("providers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        nullable=False
    )

    provider: Mapped[Provider] = relationship(back_populates="services", lazy="selectin")
    # First element is the primary image
    images: Mapped[List["Image"]] = relationship(
        back_populates="service",
        cascade="all, delete-orphan",
        order_by="[Image.position, Image.id]",
        lazy="selectin",
    )
    events: Mapped[List["Event"]] = relationship(back_populates="service", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, code={self.code}, name={self.name})>"


class Image(Base):
    """Image asset held by the external image store."""
    __tablename__ = "images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    public_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    tag: Mapped[str] = mapped_column(String(40), nullable=False)
    # 0 for the primary image, attached images count up from 1
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    service_id: Mapped[int] = mapped_column(
        ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        nullable=False
    )

    service: Mapped[Service] = relationship(back_populates="images")

    def __repr__(self) -> str:
        return f"<Image(id={self.id}, public_id={self.public_id}, tag={self.tag})>"


class Event(Base):
    """Customer event that may book a catalog service."""
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    event_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("services.id", ondelete="SET NULL"), nullable=True, index=True
    )

    customer: Mapped[Customer] = relationship(back_populates="events")
    service: Mapped[Optional[Service]] = relationship(back_populates="events")


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    number: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        nullable=False
    )
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )

    customer: Mapped[Customer] = relationship(back_populates="invoices")


class Card(Base):
    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    holder_name: Mapped[str] = mapped_column(String(150), nullable=False)
    # Only the last four digits are ever stored
    last_four: Mapped[str] = mapped_column(String(4), nullable=False)
    expiry: Mapped[str] = mapped_column(String(7), nullable=False)  # MM/YYYY
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )

    customer: Mapped[Customer] = relationship(back_populates="cards")


class SecurityQuestion(Base):
    __tablename__ = "security_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question: Mapped[str] = mapped_column(String(255), nullable=False)
    answer: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )

    customer: Mapped[Customer] = relationship(back_populates="security_questions")
