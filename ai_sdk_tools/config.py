"""Configuration for the MCP tools manager."""

import json
import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_ACTIVATION_TIMEOUT = 60.0

_ENABLED_WORDS = ("on", "enabled", "true")
_DISABLED_WORDS = ("off", "disabled", "false", "none")


class ProviderMode(str, Enum):
    """How the manager treats a provider."""

    AUTO = "auto"  # activate iff the provider detects its configuration
    DISABLED = "disabled"  # never activate, never probe
    ENABLED = "enabled"  # always attempt activation


@dataclass(frozen=True)
class ProviderSetting:
    """Per-provider setting: auto-detect, disabled, or enabled with settings.

    An enabled setting with no ``settings`` means "use defaults and the
    environment"; a non-empty mapping supplies explicit values.
    """

    mode: ProviderMode = ProviderMode.AUTO
    settings: Mapping[str, Any] | None = None

    @classmethod
    def auto(cls) -> "ProviderSetting":
        return cls(ProviderMode.AUTO)

    @classmethod
    def disabled(cls) -> "ProviderSetting":
        return cls(ProviderMode.DISABLED)

    @classmethod
    def enabled(cls, settings: Mapping[str, Any] | None = None) -> "ProviderSetting":
        return cls(ProviderMode.ENABLED, dict(settings) if settings else None)

    @classmethod
    def parse(cls, raw: Any) -> "ProviderSetting":
        """Parse the compact JSON form.

        ``None`` -> auto, ``False`` -> disabled, ``True`` -> enabled with
        defaults, mapping -> enabled with those settings. The strings "auto",
        "on"/"enabled" and "off"/"disabled" are accepted as well.
        """
        if isinstance(raw, ProviderSetting):
            return raw
        if raw is None:
            return cls.auto()
        if raw is True:
            return cls.enabled()
        if raw is False:
            return cls.disabled()
        if isinstance(raw, Mapping):
            return cls.enabled(raw)
        if isinstance(raw, str):
            word = raw.strip().lower()
            if word == "auto":
                return cls.auto()
            if word in _ENABLED_WORDS:
                return cls.enabled()
            if word in _DISABLED_WORDS:
                return cls.disabled()
        raise ValueError(f"Invalid provider setting: {raw!r}")


@dataclass
class MCPToolsManagerConfig:
    """Provider settings plus the per-provider activation timeout (seconds)."""

    providers: dict[str, ProviderSetting] = field(default_factory=dict)
    activation_timeout: float = DEFAULT_ACTIVATION_TIMEOUT

    def setting_for(self, name: str) -> ProviderSetting:
        """Return the setting for a provider; absent entries auto-detect."""
        return self.providers.get(name, ProviderSetting.auto())

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "MCPToolsManagerConfig":
        """Build from ``{"context7": True, ...}`` or from the ``tools.mcp`` section.

        The section form is ``{"providers": {...}, "activation_timeout": 30}``.
        """
        if raw is None:
            return cls()
        if isinstance(raw, MCPToolsManagerConfig):
            return raw

        if "providers" in raw or "activation_timeout" in raw:
            stray = sorted(set(raw) - {"providers", "activation_timeout"})
            if stray:
                raise ValueError(
                    f"Provider entries {stray} must go under 'providers' when "
                    "'providers' or 'activation_timeout' is set"
                )
            entries = raw.get("providers") or {}
            timeout = float(raw.get("activation_timeout", DEFAULT_ACTIVATION_TIMEOUT))
        else:
            entries = raw
            timeout = DEFAULT_ACTIVATION_TIMEOUT

        if timeout <= 0:
            raise ValueError(f"activation_timeout must be positive, got {timeout}")

        providers = {name: ProviderSetting.parse(value) for name, value in entries.items()}
        return cls(providers=providers, activation_timeout=timeout)

    @classmethod
    def from_app_config(cls, config: Mapping[str, Any]) -> "MCPToolsManagerConfig":
        """Read the ``tools.mcp`` section of the application config."""
        return cls.from_mapping(config.get("tools", {}).get("mcp", {}))


def load_config(config_path: str) -> dict[str, Any]:
    """Load configuration from JSON file."""
    try:
        with open(config_path) as f:
            config = json.load(f)
            logger.debug(f"Loaded configuration from {config_path}")
            return config
    except FileNotFoundError:
        logger.error(f"Config file {config_path} not found.")
        sys.exit(1)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in config file: {e}")
        sys.exit(1)
