"""
KYC whitelist configuration.
"""

from functools import lru_cache
from typing import Optional, Tuple

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IGNITE_PORT = 10800


class WhitelistSettings(BaseSettings):
    """KYC whitelist settings"""

    model_config = SettingsConfigDict(env_prefix="KYC_WHITELIST_", case_sensitive=False)

    log_level: str = "INFO"

    # Storage
    storage_backend: str = "memory"  # memory | ignite
    ignite_host: str = f"localhost:{DEFAULT_IGNITE_PORT}"
    ignite_cache_name: str = "kyc_whitelist"

    # Registry bootstrap
    admin_public_key: Optional[str] = None

    # Policies
    strict_registration: bool = False  # reject re-registration
    require_applicant: bool = False  # add_account only promotes registered applicants

    @field_validator("ignite_host")
    @classmethod
    def check_ignite_host(cls, value: str) -> str:
        host, sep, port = value.strip().rpartition(":")
        if not sep:
            host, port = port, str(DEFAULT_IGNITE_PORT)
        if not host:
            raise ValueError(f"ignite_host must be 'host' or 'host:port', got {value!r}")
        if not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"ignite_host port must be a number between 1 and 65535, got {port!r}")
        return value.strip()

    def ignite_address(self) -> Tuple[str, int]:
        """Split ``ignite_host`` into host and port"""
        host, sep, port = self.ignite_host.rpartition(":")
        if not sep:
            return port, DEFAULT_IGNITE_PORT
        return host, int(port)


@lru_cache()
def get_settings() -> WhitelistSettings:
    return WhitelistSettings()
