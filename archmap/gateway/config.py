"""Gateway configuration."""

from archmap.shared.config import BaseServiceSettings


class GatewaySettings(BaseServiceSettings):
    """Settings specific to the HTTP gateway."""

    service_name: str = "gateway"
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = ["*"]

    # Periodic fleet refresh; 0 disables it
    sync_interval_seconds: int = 0
    load_cache_on_startup: bool = False

    class Config:
        env_prefix = "GATEWAY_"
