import uuid
from datetime import datetime, time
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    DECIMAL,
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKeyConstraint,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

Base = declarative_base()
metadata = Base.metadata

DEFAULT_WORK_DAYS = ["mon", "tue", "wed", "thu", "fri", "sat"]


def new_id():
    return str(uuid.uuid4())


def default_work_days():
    return list(DEFAULT_WORK_DAYS)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (Index("users_email", "email", unique=True),)

    id = mapped_column(String(36), primary_key=True, default=new_id)
    email = mapped_column(String(255))
    password_hash = mapped_column(LargeBinary(72))
    first_name = mapped_column(String(100))
    last_name = mapped_column(String(100))
    phone = mapped_column(String(20))
    role = mapped_column(String(20), nullable=False, default="owner")
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    barbershop: Mapped[Optional["Barbershop"]] = relationship(
        "Barbershop", uselist=False, back_populates="owner"
    )


class Barbershop(Base):
    __tablename__ = "barbershops"
    __table_args__ = (
        ForeignKeyConstraint(["owner_id"], ["users.id"], name="fk_shop_owner"),
        # One tenant per owner; the resolver relies on this to stay race-free
        Index("barbershops_owner_id", "owner_id", unique=True),
        Index("barbershops_slug", "slug", unique=True),
        {"comment": "Tenants. One barbershop per owner account."},
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    owner_id = mapped_column(String(36), nullable=False)
    name = mapped_column(String(255), nullable=False)
    slug = mapped_column(String(100), nullable=False)
    description = mapped_column(Text)
    address = mapped_column(Text)
    phone = mapped_column(String(20))
    email = mapped_column(String(255))
    logo_url = mapped_column(String(512))
    cover_url = mapped_column(String(512))
    primary_color = mapped_column(String(7), default="#0066FF")
    opening_time = mapped_column(Time, default=time(9, 0))
    closing_time = mapped_column(Time, default=time(19, 0))
    work_days = mapped_column(JSON, default=default_work_days)
    subscription_plan = mapped_column(String(50), default="basic")
    subscription_status = mapped_column(String(20), default="active")
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    owner: Mapped["User"] = relationship("User", back_populates="barbershop")
    barbers: Mapped[List["Barber"]] = relationship(
        "Barber", uselist=True, back_populates="barbershop"
    )
    services: Mapped[List["Service"]] = relationship(
        "Service", uselist=True, back_populates="barbershop"
    )
    clients: Mapped[List["Client"]] = relationship(
        "Client", uselist=True, back_populates="barbershop"
    )
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", uselist=True, back_populates="barbershop"
    )


class Barber(Base):
    __tablename__ = "barbers"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_barber_shop"
        ),
        ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_barber_user"),
        Index("barbers_barbershop_id", "barbershop_id"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    user_id = mapped_column(String(36))
    name = mapped_column(String(255), nullable=False)
    email = mapped_column(String(255))
    phone = mapped_column(String(20))
    photo_url = mapped_column(String(512))
    bio = mapped_column(Text)
    commission_rate = mapped_column(DECIMAL(5, 2), default=Decimal("50.00"))
    is_active = mapped_column(Boolean, nullable=False, default=True)
    work_start_time = mapped_column(Time, default=time(9, 0))
    work_end_time = mapped_column(Time, default=time(19, 0))
    work_days = mapped_column(JSON, default=default_work_days)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    barbershop: Mapped["Barbershop"] = relationship(
        "Barbershop", back_populates="barbers"
    )
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", uselist=True, back_populates="barber"
    )


class ServiceCategory(Base):
    __tablename__ = "service_categories"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_category_shop"
        ),
        Index("service_categories_barbershop_id", "barbershop_id"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    name = mapped_column(String(100), nullable=False)
    description = mapped_column(Text)
    sort_order = mapped_column(Integer, default=0)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)

    services: Mapped[List["Service"]] = relationship(
        "Service", uselist=True, back_populates="category"
    )


class Service(Base):
    __tablename__ = "services"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_service_shop"
        ),
        ForeignKeyConstraint(
            ["category_id"], ["service_categories.id"], name="fk_service_category"
        ),
        Index("services_barbershop_id", "barbershop_id"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    category_id = mapped_column(String(36))
    name = mapped_column(String(255), nullable=False)
    description = mapped_column(Text)
    price = mapped_column(DECIMAL(10, 2), nullable=False)
    duration = mapped_column(Integer, nullable=False)  # minutes
    is_combo = mapped_column(Boolean, nullable=False, default=False)
    is_active = mapped_column(Boolean, nullable=False, default=True)
    image_url = mapped_column(String(512))
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    barbershop: Mapped["Barbershop"] = relationship(
        "Barbershop", back_populates="services"
    )
    category: Mapped[Optional["ServiceCategory"]] = relationship(
        "ServiceCategory", back_populates="services"
    )
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", uselist=True, back_populates="service"
    )


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_client_shop"
        ),
        ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_client_user"),
        Index("clients_barbershop_id", "barbershop_id", "created_at"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    user_id = mapped_column(String(36))
    name = mapped_column(String(255), nullable=False)
    email = mapped_column(String(255))
    phone = mapped_column(String(20))
    photo_url = mapped_column(String(512))
    birth_date = mapped_column(Date)
    notes = mapped_column(Text)
    preferences = mapped_column(Text)
    loyalty_points = mapped_column(Integer, nullable=False, default=0)
    total_visits = mapped_column(Integer, nullable=False, default=0)
    total_spent = mapped_column(DECIMAL(10, 2), nullable=False, default=Decimal("0.00"))
    last_visit = mapped_column(DateTime)
    is_active = mapped_column(Boolean, nullable=False, default=True)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    barbershop: Mapped["Barbershop"] = relationship(
        "Barbershop", back_populates="clients"
    )
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", uselist=True, back_populates="client"
    )


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_ap_shop"
        ),
        ForeignKeyConstraint(["client_id"], ["clients.id"], name="fk_ap_client"),
        ForeignKeyConstraint(["barber_id"], ["barbers.id"], name="fk_ap_barber"),
        ForeignKeyConstraint(["service_id"], ["services.id"], name="fk_ap_service"),
        Index("appointments_shop_date", "barbershop_id", "date", "start_time"),
        Index("appointments_barber_date", "barber_id", "date"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    client_id = mapped_column(String(36))
    barber_id = mapped_column(String(36), nullable=False)
    service_id = mapped_column(String(36), nullable=False)
    date = mapped_column(Date, nullable=False)
    start_time = mapped_column(Time, nullable=False)
    end_time = mapped_column(Time, nullable=False)
    status = mapped_column(String(20), nullable=False, default="pending")
    price = mapped_column(DECIMAL(10, 2), nullable=False)
    notes = mapped_column(Text)
    # Walk-ins and public bookings may carry only a name and phone
    client_name = mapped_column(String(255))
    client_phone = mapped_column(String(20))
    reminder_sent = mapped_column(Boolean, nullable=False, default=False)
    confirmed_at = mapped_column(DateTime)
    completed_at = mapped_column(DateTime)
    cancelled_at = mapped_column(DateTime)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    barbershop: Mapped["Barbershop"] = relationship(
        "Barbershop", back_populates="appointments"
    )
    client: Mapped[Optional["Client"]] = relationship(
        "Client", back_populates="appointments"
    )
    barber: Mapped["Barber"] = relationship("Barber", back_populates="appointments")
    service: Mapped["Service"] = relationship(
        "Service", back_populates="appointments"
    )


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_product_shop"
        ),
        Index("products_barbershop_id", "barbershop_id"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    name = mapped_column(String(255), nullable=False)
    description = mapped_column(Text)
    sku = mapped_column(String(100))
    price = mapped_column(DECIMAL(10, 2), nullable=False)
    cost_price = mapped_column(DECIMAL(10, 2))
    stock_quantity = mapped_column(Integer, nullable=False, default=0)
    low_stock_threshold = mapped_column(Integer, nullable=False, default=5)
    image_url = mapped_column(String(512))
    is_active = mapped_column(Boolean, nullable=False, default=True)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_tx_shop"
        ),
        ForeignKeyConstraint(
            ["appointment_id"], ["appointments.id"], name="fk_tx_appointment"
        ),
        ForeignKeyConstraint(["barber_id"], ["barbers.id"], name="fk_tx_barber"),
        ForeignKeyConstraint(["client_id"], ["clients.id"], name="fk_tx_client"),
        Index("transactions_shop_date", "barbershop_id", "date"),
        {"comment": "Append-only financial ledger."},
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    appointment_id = mapped_column(String(36))
    barber_id = mapped_column(String(36))
    client_id = mapped_column(String(36))
    type = mapped_column(String(20), nullable=False)
    category = mapped_column(String(50))
    description = mapped_column(Text)
    amount = mapped_column(DECIMAL(10, 2), nullable=False)
    payment_method = mapped_column(String(20))
    commission_amount = mapped_column(DECIMAL(10, 2))
    date = mapped_column(Date, nullable=False)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)


class LoyaltyPlan(Base):
    __tablename__ = "loyalty_plans"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_loyalty_shop"
        ),
        Index("loyalty_plans_barbershop_id", "barbershop_id"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    name = mapped_column(String(100), nullable=False)
    description = mapped_column(Text)
    points_per_currency = mapped_column(Integer, nullable=False, default=1)
    reward_threshold = mapped_column(Integer, nullable=False, default=100)
    reward_value = mapped_column(DECIMAL(10, 2))
    reward_type = mapped_column(String(20), nullable=False, default="discount")
    is_active = mapped_column(Boolean, nullable=False, default=True)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)


class SubscriptionPackage(Base):
    __tablename__ = "subscription_packages"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_package_shop"
        ),
        Index("subscription_packages_barbershop_id", "barbershop_id"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    name = mapped_column(String(100), nullable=False)
    description = mapped_column(Text)
    price = mapped_column(DECIMAL(10, 2), nullable=False)
    credits = mapped_column(Integer, nullable=False)
    validity_days = mapped_column(Integer, nullable=False, default=30)
    included_services = mapped_column(JSON)
    is_active = mapped_column(Boolean, nullable=False, default=True)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)


class Coupon(Base):
    __tablename__ = "coupons"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_coupon_shop"
        ),
        Index("coupons_shop_code", "barbershop_id", "code"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    code = mapped_column(String(50), nullable=False)
    description = mapped_column(Text)
    discount_type = mapped_column(String(20), nullable=False, default="percentage")
    discount_value = mapped_column(DECIMAL(10, 2), nullable=False)
    min_purchase = mapped_column(DECIMAL(10, 2))
    max_uses = mapped_column(Integer)
    used_count = mapped_column(Integer, nullable=False, default=0)
    valid_from = mapped_column(Date)
    valid_until = mapped_column(Date)
    is_active = mapped_column(Boolean, nullable=False, default=True)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        ForeignKeyConstraint(
            ["barbershop_id"], ["barbershops.id"], name="fk_review_shop"
        ),
        ForeignKeyConstraint(["client_id"], ["clients.id"], name="fk_review_client"),
        ForeignKeyConstraint(["barber_id"], ["barbers.id"], name="fk_review_barber"),
        ForeignKeyConstraint(
            ["appointment_id"], ["appointments.id"], name="fk_review_appointment"
        ),
        Index("reviews_barbershop_id", "barbershop_id", "created_at"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_id)
    barbershop_id = mapped_column(String(36), nullable=False)
    client_id = mapped_column(String(36), nullable=False)
    barber_id = mapped_column(String(36))
    appointment_id = mapped_column(String(36))
    rating = mapped_column(Integer, nullable=False)  # 1-5
    comment = mapped_column(Text)
    reply = mapped_column(Text)
    is_public = mapped_column(Boolean, nullable=False, default=True)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now)

    client: Mapped["Client"] = relationship("Client")
