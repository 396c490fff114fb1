"""Configuration management using Pydantic settings."""

from typing import Optional
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Web3DNAConfig(BaseSettings):
    """Configuration for fingerprint collection and alert delivery."""
    
    # Alert sinks (absent URL disables the sink)
    mattermost_webhook_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("web3dna_mattermost_webhook_url", "mattermost_webhook_url"),
        description="Chat-ops (Mattermost compatible) incoming webhook URL"
    )
    admin_webhook_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("web3dna_admin_webhook_url", "admin_webhook_url"),
        description="Admin panel webhook URL"
    )
    webhook_timeout_seconds: float = Field(default=5.0, gt=0, description="Webhook POST timeout in seconds")
    
    # IP intelligence
    ip_lookup_url: str = Field(default="https://ip-api.io/json", description="IP/ASN/proxy intelligence endpoint")
    ip_lookup_timeout_seconds: float = Field(default=5.0, gt=0, description="IP lookup timeout in seconds")
    
    # Collectors
    audio_timeout_seconds: float = Field(default=2.0, gt=0, description="Audio capture timeout in seconds")
    
    # Fan-out observability
    recent_outcomes_size: int = Field(default=100, ge=1, description="Delivery outcomes kept for inspection")
    
    # Logging Settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json|text)")
    log_file: Optional[str] = Field(default=None, description="Log file path")
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = "WEB3DNA_"
        populate_by_name = True
        extra = "ignore"
    
    @property
    def chat_webhook_enabled(self) -> bool:
        """Whether the chat webhook sink is configured."""
        return bool(self.mattermost_webhook_url)
    
    @property
    def admin_webhook_enabled(self) -> bool:
        """Whether the admin webhook sink is configured."""
        return bool(self.admin_webhook_url)
