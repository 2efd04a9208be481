"""Config – 12-factor settings and loaders."""

from baggage_relay.config.propagation import PropagationSettings
from baggage_relay.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    Settings,
    SettingsLoader,
    SettingsValidator,
)
from baggage_relay.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "PropagationSettings",
    "Settings",
    "SettingsLoader",
    "SettingsValidator",
]
