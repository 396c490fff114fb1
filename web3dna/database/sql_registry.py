"""SQLAlchemy-backed fraud registry."""

from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
import structlog

from web3dna.core.exceptions import DuplicateFraudIdError
from web3dna.database.models import Base, FraudSignatureRecord
from web3dna.database.registry import FraudRegistry, generate_fraud_id
from web3dna.models.alerts import FraudSignature

logger = structlog.get_logger(__name__)

MAX_ID_ATTEMPTS = 5


def _to_signature(record: FraudSignatureRecord) -> FraudSignature:
    return FraudSignature(
        fraud_id=record.fraud_id,
        dna_hash=record.dna_hash,
        tags=list(record.tags or []),
        source=record.source,
        added_at=record.added_at,
    )


class SqlFraudRegistry(FraudRegistry):
    """Persistent registry; one session per operation."""
    
    def __init__(self, database_url: str, pool_size: int = 5, max_overflow: int = 10,
                 id_factory: Callable[[], str] = generate_fraud_id):
        self.logger = logger.bind(component="sql_registry")
        self._id_factory = id_factory
        
        if database_url.startswith("sqlite"):
            # Single shared connection so in-memory databases survive across sessions
            self.engine = create_engine(
                database_url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            self.engine = create_engine(
                database_url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
            )
        
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.logger.info("Fraud registry database initialized", dialect=self.engine.dialect.name)
    
    def create_tables(self):
        """Create registry tables."""
        Base.metadata.create_all(bind=self.engine)
        self.logger.info("Fraud registry tables created")
    
    def get_session(self) -> Session:
        return self.SessionLocal()
    
    def test_connection(self) -> bool:
        """Test database connection."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            self.logger.error("Database connection failed", error=str(e))
            return False
    
    def lookup(self, dna_hash: str) -> Optional[FraudSignature]:
        with self.get_session() as session:
            record = (
                session.query(FraudSignatureRecord)
                .filter_by(dna_hash=dna_hash)
                .order_by(FraudSignatureRecord.added_at)
                .first()
            )
            return _to_signature(record) if record else None
    
    def insert(self, signature: FraudSignature) -> FraudSignature:
        explicit_id = signature.fraud_id
        
        for attempt in range(MAX_ID_ATTEMPTS):
            record = FraudSignatureRecord(
                fraud_id=explicit_id or self._id_factory(),
                dna_hash=signature.dna_hash,
                tags=list(signature.tags),
                source=signature.source,
                added_at=datetime.now(timezone.utc),
            )
            with self.get_session() as session:
                try:
                    session.add(record)
                    session.commit()
                except IntegrityError as e:
                    session.rollback()
                    if explicit_id:
                        raise DuplicateFraudIdError(explicit_id) from e
                    self.logger.warning("Fraud id collision, regenerating", attempt=attempt + 1)
                    continue
                
                stored = _to_signature(record)
            
            self.logger.info("Fraud signature added",
                            fraud_id=stored.fraud_id,
                            tags=stored.tags,
                            source=stored.source)
            return stored
        
        raise RuntimeError(f"Could not allocate a unique fraud id after {MAX_ID_ATTEMPTS} attempts")
    
    def list(self) -> List[FraudSignature]:
        with self.get_session() as session:
            records = session.query(FraudSignatureRecord).order_by(FraudSignatureRecord.added_at).all()
            return [_to_signature(record) for record in records]
