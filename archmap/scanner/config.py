"""Scanner configuration."""

from archmap.shared.config import BaseServiceSettings


class ScannerSettings(BaseServiceSettings):
    """Settings specific to fleet scans (CLI and scheduled refreshes)."""

    service_name: str = "scanner"
    ref: str = ""

    class Config:
        env_prefix = "SCANNER_"
