"""
Configuration settings - edit values directly here or override them in
the environment / a .env file.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from cardano_env.blockchain import base_url_for

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")


@dataclass
class Settings:
    """Application settings - configure values below"""
    
    # ===================
    # Cardano network
    # ===================
    cardano_network: str = field(default_factory=lambda: os.getenv("CARDANO_NETWORK", "preprod"))
    
    # ===================
    # Blockfrost
    # ===================
    blockfrost_api_key: Optional[str] = field(default_factory=lambda: os.getenv("BLOCKFROST_API_KEY"))
    blockfrost_url: Optional[str] = field(default_factory=lambda: os.getenv("BLOCKFROST_URL"))  # overrides the network URL
    blockfrost_timeout: float = field(default_factory=lambda: float(os.getenv("BLOCKFROST_TIMEOUT", "120")))
    # False only for self-signed test indexers
    blockfrost_verify_tls: bool = field(default_factory=lambda: _env_flag("BLOCKFROST_VERIFY_TLS", True))

    @property
    def blockfrost_base_url(self) -> str:
        return self.blockfrost_url or base_url_for(self.cardano_network)


# Global settings instance - import this
settings = Settings()
