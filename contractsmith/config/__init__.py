"""
Contractsmith Unified Configuration

Loads all sections of config.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    AppConfig,
    ServiceSectionConfig,
    TemplateConfig,
    ImportsConfig,
    CompilerConfig,
    load_config,
)

__all__ = [
    "AppConfig",
    "ServiceSectionConfig",
    "TemplateConfig",
    "ImportsConfig",
    "CompilerConfig",
    "load_config",
]
