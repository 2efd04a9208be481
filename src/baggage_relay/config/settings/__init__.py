"""Config settings – 12-factor env-based configuration."""
from baggage_relay.config.settings.base import Settings
from baggage_relay.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader
from baggage_relay.config.settings.validator import SettingsValidator

__all__ = ["DotenvSettingsLoader", "EnvSettingsLoader", "Settings", "SettingsLoader", "SettingsValidator"]
