from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, Enum, Integer, String, Text

from database import Base


class PublicationStatus(PyEnum):
    PENDING = "PENDING"
    UPLOADING = "UPLOADING"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"


class ArtworkPublication(Base):
    __tablename__ = 'artwork_publications'

    id = Column(Integer, primary_key=True)
    token_id = Column(Integer, unique=True, nullable=False, index=True)
    signer_name = Column(String(255), nullable=False)
    date_label = Column(String(64), nullable=False)
    signature = Column(String(255), nullable=False)
    signer_ordinal = Column(Integer, nullable=False)
    status = Column(Enum(PublicationStatus), nullable=False, default=PublicationStatus.PENDING)
    artwork_cid = Column(String(128))
    metadata_cid = Column(String(128))
    token_uri = Column(String(255))
    transaction_hash = Column(String(80))
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
