"""
Centralized configuration management using Pydantic Settings.

Configuration is loaded from environment variables with sensible defaults.
Protocol constants (PTZ ranges, namespaces, error codes) live in code, not here.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SecurityPanelConfig(BaseSettings):
    """Security panel directive configuration."""

    model_config = SettingsConfigDict(env_prefix="ALEXA_BRIDGE_SECURITY_")

    exit_delay_seconds: int = Field(
        default=60,
        description="Exit delay reported in Arm.Response payloads",
    )


class CameraConfig(BaseSettings):
    """Camera adapter configuration."""

    model_config = SettingsConfigDict(env_prefix="ALEXA_BRIDGE_CAMERA_")

    full_duplex_audio: bool = Field(
        default=True,
        description="Advertise full duplex audio on the RTC session controller",
    )
    detection_uncertainty_ms: int = Field(
        default=500,
        description="Uncertainty attached to motion and object detection samples",
    )
    snapshot_mime_type: str = Field(
        default="image/jpeg",
        description="MIME type requested when resolving detection snapshots",
    )
    ignored_detection_classes: list[str] = Field(
        default=["ring", "motion"],
        description="Detector classes that are not valid Alexa object classes",
    )


class ThermostatConfig(BaseSettings):
    """Thermostat adapter configuration."""

    model_config = SettingsConfigDict(env_prefix="ALEXA_BRIDGE_THERMOSTAT_")

    setpoint_scale: str = Field(
        default="CELSIUS",
        description="Scale reported for thermostat setpoints",
    )


class BridgeSettings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="ALEXA_BRIDGE_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Logging level")
    payload_version: str = Field(default="3", description="Alexa payload version")
    manufacturer_name: str = Field(
        default="Alexa Bridge",
        description="Manufacturer reported for discovered endpoints",
    )

    # Nested configs
    security: SecurityPanelConfig = Field(default_factory=SecurityPanelConfig)
    camera: CameraConfig = Field(default_factory=CameraConfig)
    thermostat: ThermostatConfig = Field(default_factory=ThermostatConfig)


# Singleton settings instance
settings = BridgeSettings()
