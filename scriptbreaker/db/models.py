from __future__ import annotations

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scriptbreaker.db.base import Base


class EpisodeRecord(Base):
    __tablename__ = "episodes"

    # IDs are issued by the merge engine, never by the database.
    episode_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    arc: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="todo")
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    page_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), server_default=func.now())

    panels: Mapped[list["PanelRecord"]] = relationship(
        back_populates="episode",
        cascade="all, delete-orphan",
        order_by="PanelRecord.position",
    )


class PanelRecord(Base):
    __tablename__ = "panels"

    panel_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    episode_id: Mapped[int] = mapped_column(ForeignKey("episodes.episode_id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    page_number: Mapped[int] = mapped_column(Integer, nullable=False)
    panel_type: Mapped[str] = mapped_column(String(64), nullable=False)
    framing: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    dialogue: Mapped[str] = mapped_column(Text, nullable=False, default="")
    characters: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    scene: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    props: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="queued")
    visibility: Mapped[str] = mapped_column(String(32), nullable=False, default="active")
    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), server_default=func.now())

    episode: Mapped[EpisodeRecord] = relationship(back_populates="panels")
