"""Configuration settings for the Web3DNA API."""

from typing import List, Optional
from pydantic import Field

from web3dna.models.config import Web3DNAConfig


class APISettings(Web3DNAConfig):
    """API configuration settings (extends the collection/alerting config)."""
    
    # API Configuration
    api_title: str = Field(default="Web3DNA API", description="API title")
    api_description: str = Field(default="Device DNA matching and fraud alerting", description="API description")
    api_version: str = Field(default="1.0.0", description="API version")
    debug: bool = Field(default=False, description="Debug mode")
    
    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    workers: int = Field(default=1, description="Number of worker processes")
    access_log: bool = Field(default=True, description="Enable access logging")
    
    # Registry Configuration (in-memory registry when unset)
    database_url: Optional[str] = Field(default=None, description="Fraud registry database URL")
    db_pool_size: int = Field(default=5, description="Database connection pool size")
    db_max_overflow: int = Field(default=10, description="Database max overflow connections")
    
    # Security Configuration
    cors_origins: List[str] = Field(default=["*"], description="CORS allowed origins")
    require_hmac_key: bool = Field(default=True, description="Reject keyed DNA generation with an empty secret")
    
    # Alerting
    alerts_ws_path: str = Field(default="/ws/dna-alerts", description="Live alert websocket path")
    critical_tags: List[str] = Field(
        default=["rugpull", "drainer", "scam", "phishing"],
        description="Signature tags that raise a critical alert"
    )
    critical_risk_score: int = Field(default=90, ge=0, le=100, description="Default risk score for critical matches")
    moderate_risk_score: int = Field(default=60, ge=0, le=100, description="Default risk score for other matches")
    
    # Monitoring Configuration
    enable_metrics: bool = Field(default=True, description="Enable Prometheus metrics")
