"""
SQLAlchemy ORM models for persistent storage.

Models mirror the DeckAggregate dataclass but add database persistence.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _new_deck_id() -> str:
    return str(uuid.uuid4())


class DeckDB(Base):
    """
    A user's deck stored in the database.

    Line items and battlefield slots live in child tables.
    """

    __tablename__ = "decks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_deck_id)
    owner_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    legend_card_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    champion_card_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Incremented on every save; a stale version means a concurrent write
    version: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    main_items: Mapped[list["DeckMainItemDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )
    rune_items: Mapped[list["DeckRuneItemDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )
    battlefields: Mapped[list["DeckBattlefieldDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    # UPDATE/DELETE statements are guarded by the version we read;
    # versions are assigned by save_deck, not generated here
    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, owner_id={self.owner_id}, version={self.version})>"


class DeckMainItemDB(Base):
    """Copies of one card in a deck's main section."""

    __tablename__ = "deck_main_items"
    __table_args__ = (
        UniqueConstraint("deck_id", "card_id", name="uq_main_deck_card"),
        CheckConstraint("quantity >= 1", name="ck_main_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(255))
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    deck: Mapped["DeckDB"] = relationship(back_populates="main_items")

    def __repr__(self) -> str:
        return f"<DeckMainItemDB(card={self.card_id}, qty={self.quantity})>"


class DeckRuneItemDB(Base):
    """Copies of one rune in a deck's rune section."""

    __tablename__ = "deck_rune_items"
    __table_args__ = (
        UniqueConstraint("deck_id", "card_id", name="uq_rune_deck_card"),
        CheckConstraint("quantity >= 1", name="ck_rune_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(255))
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    deck: Mapped["DeckDB"] = relationship(back_populates="rune_items")

    def __repr__(self) -> str:
        return f"<DeckRuneItemDB(card={self.card_id}, qty={self.quantity})>"


class DeckBattlefieldDB(Base):
    """A filled battlefield slot. Empty slots have no row."""

    __tablename__ = "deck_battlefields"
    __table_args__ = (
        UniqueConstraint("deck_id", "position", name="uq_deck_battlefield_position"),
        CheckConstraint("position BETWEEN 1 AND 3", name="ck_battlefield_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer)
    card_id: Mapped[str] = mapped_column(String(255))

    deck: Mapped["DeckDB"] = relationship(back_populates="battlefields")

    def __repr__(self) -> str:
        return f"<DeckBattlefieldDB(position={self.position}, card={self.card_id})>"
