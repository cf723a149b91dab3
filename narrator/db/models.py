"""SQLAlchemy ORM models for Article Narrator."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Article(Base):
    """Article scraped from a URL or entered as text."""
    __tablename__ = "articles"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), primary_key=True, default=uuid4
    )
    url: Mapped[Optional[str]] = mapped_column(
        String(2000), nullable=True, unique=True
    )  # NULL for text articles
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    source_type: Mapped[str] = mapped_column(
        String(10), nullable=False, default="url"
    )  # 'url', 'text'
    is_editable: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )

    # Relationships
    episode: Mapped[Optional["Episode"]] = relationship(
        back_populates="article",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Episode(Base):
    """Narrated audio for one article."""
    __tablename__ = "episodes"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), primary_key=True, default=uuid4
    )
    article_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    audio_url: Mapped[str] = mapped_column(String(2000), nullable=False, default="")
    duration: Mapped[int] = mapped_column(Integer, default=0)  # seconds, estimated
    file_size: Mapped[int] = mapped_column(BigInteger, default=0)  # bytes

    # Status tracking
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )  # 'pending', 'processing', 'completed', 'failed'
    tts_provider: Mapped[str] = mapped_column(
        String(20), nullable=False, default="google"
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    article: Mapped["Article"] = relationship(back_populates="episode")


class PodcastSettings(Base):
    """Podcast metadata and TTS configuration of the single user.

    API key columns only ever hold vault tokens.
    """
    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    podcast_title: Mapped[str] = mapped_column(
        String(300), nullable=False, default="Mes articles"
    )
    podcast_description: Mapped[str] = mapped_column(
        Text, nullable=False, default="Articles lus à voix haute"
    )
    podcast_author: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    podcast_cover_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)

    default_tts_provider: Mapped[str] = mapped_column(
        String(20), nullable=False, default="google"
    )
    google_voice_name: Mapped[str] = mapped_column(
        String(100), nullable=False, default="fr-FR-Neural2-A"
    )
    elevenlabs_voice_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    google_tts_api_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    elevenlabs_api_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp()
    )
