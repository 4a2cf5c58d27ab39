"""Typed views over implementation-specific node configuration."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class LocalNodeConfig(BaseModel):
    """Settings decoded from a node's implementation-specific config."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    binary_path: Optional[StrictStr] = Field(None, alias="binaryPath", description="Node binary to execute")
    network_id: Optional[StrictInt] = Field(None, alias="networkID", description="Network identifier")
    db_dir: Optional[StrictStr] = Field(None, alias="dbDir", description="Database directory")
    log_dir: Optional[StrictStr] = Field(None, alias="logDir", description="Log directory")
    http_port: Optional[StrictInt] = Field(None, alias="httpPort", description="HTTP API port")
    staking_port: Optional[StrictInt] = Field(None, alias="stakingPort", description="Staking (P2P) port")


class ConfigFileOverrides(BaseModel):
    """
    Fields read from a node's raw config file.

    Unknown keys are kept so the file can still be handed to the node
    binary as-is.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    network_id: Optional[StrictInt] = Field(None, alias="network-id", description="Network identifier")
    db_dir: Optional[StrictStr] = Field(None, alias="db-dir", description="Database directory")
    log_dir: Optional[StrictStr] = Field(None, alias="log-dir", description="Log directory")
    http_port: Optional[StrictInt] = Field(None, alias="http-port", description="HTTP API port")
    staking_port: Optional[StrictInt] = Field(None, alias="staking-port", description="Staking (P2P) port")


class NodeSettings(BaseModel):
    """
    Effective settings of one node after validation.

    Config file values win over implementation-specific ones.
    """
    binary_path: Optional[str] = None
    network_id: Optional[int] = None
    db_dir: Optional[str] = None
    log_dir: Optional[str] = None
    http_port: Optional[int] = None
    staking_port: Optional[int] = None

    @classmethod
    def merge(
        cls,
        local: LocalNodeConfig,
        overrides: Optional[ConfigFileOverrides] = None
    ) -> "NodeSettings":
        """Combine both views, letting the config file override."""
        settings = cls(
            binary_path=local.binary_path,
            network_id=local.network_id,
            db_dir=local.db_dir,
            log_dir=local.log_dir,
            http_port=local.http_port,
            staking_port=local.staking_port,
        )
        if overrides is None:
            return settings

        for field in ("network_id", "db_dir", "log_dir", "http_port", "staking_port"):
            value = getattr(overrides, field)
            if value is not None:
                setattr(settings, field, value)
        return settings
