"""Stored tournament record - one row per tournament, full snapshot as JSON."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from matchup.models.base import Base
from matchup.models.tournament import utcnow


class TournamentRecord(Base):
    """Key-value row: tournament id -> serialized Tournament snapshot."""

    __tablename__ = "tournament_records"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    code: Mapped[str] = mapped_column(String(6), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)  # open, generated, deleted
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
