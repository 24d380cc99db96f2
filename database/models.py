"""
SQLAlchemy ORM models for connectors and their synced files.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class Connector(Base):
    __tablename__ = "connectors"

    connector_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_email = Column(String(255), nullable=False)
    provider = Column(String(32), nullable=False)
    name = Column(String(255), nullable=False)
    collection_ids = Column(ARRAY(Text), nullable=False, default=list)
    cron_job = Column(String(64), nullable=False)
    cron_job_timezone = Column(String(64), nullable=False, default="UTC")
    access_token = Column(Text, nullable=False)
    error = Column(Text)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    last_synced_at = Column(DateTime(timezone=True))

    files = relationship(
        "ConnectorFile",
        back_populates="connector",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ConnectorFile.created_at",
    )

    __table_args__ = (Index("ix_connectors_owner_email", "owner_email"),)


class ConnectorFile(Base):
    __tablename__ = "connector_files"

    file_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    connector_id = Column(
        UUID(as_uuid=True),
        ForeignKey("connectors.connector_id", ondelete="CASCADE"),
        nullable=False,
    )
    url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    connector = relationship("Connector", back_populates="files")
