import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.security import now_utc
from app.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Category(Base):
    __tablename__ = "category"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Course(Base):
    __tablename__ = "course"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    source_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    publish_flag: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("category.id", ondelete="SET NULL"), nullable=True, index=True
    )
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)
    update_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)

    category: Mapped[Category | None] = relationship(lazy="selectin")
    chapters: Mapped[list["Chapter"]] = relationship(
        back_populates="course", order_by="Chapter.position", passive_deletes=True
    )


class Chapter(Base):
    __tablename__ = "chapter"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    publish_flag: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("course.id", ondelete="CASCADE"), nullable=False, index=True
    )
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)
    update_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)

    course: Mapped[Course] = relationship(back_populates="chapters")
    video_asset: Mapped["VideoAsset | None"] = relationship(uselist=False, lazy="selectin", passive_deletes=True)


class VideoAsset(Base):
    """Mux asset backing a chapter video (one per chapter)."""

    __tablename__ = "mux_data"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    asset_id: Mapped[str] = mapped_column(String(255), nullable=False)
    playback_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    chapter_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("chapter.id", ondelete="CASCADE"), nullable=False, unique=True
    )


class Purchase(Base):
    __tablename__ = "purchase"
    __table_args__ = (UniqueConstraint("course_id", "user_id", name="uq_purchase_course_user"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("course.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)
    update_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)


class PaymentCustomer(Base):
    __tablename__ = "stripe_customer"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    stripe_customer_id: Mapped[str] = mapped_column(String(255), nullable=False)
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)
    update_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)


class ProcessedWebhookEvent(Base):
    __tablename__ = "processed_webhook_event"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    event_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    event_type: Mapped[str] = mapped_column(String(128), nullable=False)
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)
