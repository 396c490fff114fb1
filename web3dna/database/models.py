"""SQLAlchemy database models for the fraud registry."""

from sqlalchemy import JSON, Column, DateTime, Index, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class FraudSignatureRecord(Base):
    """Known-bad DNA hash with its risk tags."""
    __tablename__ = 'fraud_signatures'
    
    fraud_id = Column(String(64), primary_key=True)
    dna_hash = Column(String(128), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    source = Column(String(255))
    added_at = Column(DateTime(timezone=True), nullable=False, default=func.now())
    
    __table_args__ = (
        Index('idx_fraud_signatures_dna_hash', 'dna_hash'),
        Index('idx_fraud_signatures_added_at', 'added_at'),
    )
