from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.guests.dtos import GuestStatus
from src.models.base import SHORT_TEXT_LENGTH, TOKEN_LENGTH, Base, TimeStamp


class Event(Base, TimeStamp):
    __tablename__ = TableNames.EVENTS.value

    # Public identifier used in invitation links, distinct from the internal uuid
    share_token: Mapped[str] = mapped_column(String(TOKEN_LENGTH), nullable=False, unique=True, index=True)

    title: Mapped[str] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=False)
    host: Mapped[str] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=False)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    location: Mapped[str] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")

    show_guest_list: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_share_link: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Presence means the event is password-gated
    password_hash: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)
    password_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    theme: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    background_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    hero_images: Mapped[list | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<Event {self.title} ({self.share_token})>"


class Guest(Base, TimeStamp):
    __tablename__ = TableNames.GUESTS.value
    __table_args__ = (
        UniqueConstraint("event_id", "email", name="uq_guests_event_email"),
        CheckConstraint("plus_ones >= 0", name="ck_guests_plus_ones_non_negative"),
    )

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=False)
    status: Mapped[str] = mapped_column(
        Enum(GuestStatus, name="guest_status_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    plus_ones: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)
    responded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Self-service capability; unique across all events
    manage_token: Mapped[str] = mapped_column(String(TOKEN_LENGTH), nullable=False, unique=True, index=True)

    def __repr__(self) -> str:
        return f"<Guest {self.name} - {self.status}>"
