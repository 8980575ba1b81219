"""
Contractsmith TOML Configuration Loader

Loads all sections of config.toml at startup with environment variable overrides.
Each [section] is a dataclass with from_dict + apply_env; AppConfig ties them
together with from_file.

Environment variable mapping:
    [service] port           → CONTRACTSMITH_PORT
    [template] base_dir      → CONTRACTSMITH_BASE_DIR
    [compiler] solc_version  → CONTRACTSMITH_SOLC_VERSION
    ...

Template variables are the only values the template renderer may substitute;
they are enumerated here and nowhere else.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..constants import (
    DEFAULT_CONTRACT_NAME,
    DEFAULT_IMPORT_PREFIXES,
    DEFAULT_SOLC_VERSION,
    DEFAULT_TEMPLATE_NAME,
    DEFAULT_TEMPLATE_VARIABLES,
    DEFAULT_TEMPLATES_DIR,
    CONTRACTSMITH_HOST,
    CONTRACTSMITH_PORT,
)
from ..exceptions import ConfigurationError
from ..logger import get_logger

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Section dataclasses, one per [section] of config.example.toml
# ---------------------------------------------------------------------------


@dataclass
class ServiceSectionConfig:
    """[service] section."""
    host: str = str(CONTRACTSMITH_HOST)
    port: int = int(CONTRACTSMITH_PORT)
    # slowapi limit string applied to the compile endpoint
    rate_limit: str = "30/minute"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceSectionConfig":
        return cls(
            host=data.get("host", str(CONTRACTSMITH_HOST)),
            port=data.get("port", int(CONTRACTSMITH_PORT)),
            rate_limit=data.get("rate_limit", "30/minute"),
            cors_origins=data.get("cors_origins", ["*"]),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("CONTRACTSMITH_HOST"):
            self.host = v
        if v := os.environ.get("CONTRACTSMITH_PORT"):
            try:
                self.port = int(v)
            except ValueError as e:
                raise ConfigurationError(f"Invalid CONTRACTSMITH_PORT: {v!r}") from e
        if v := os.environ.get("CONTRACTSMITH_RATE_LIMIT"):
            self.rate_limit = v


@dataclass
class TemplateConfig:
    """[template] section."""
    base_dir: str = "."
    templates_dir: str = DEFAULT_TEMPLATES_DIR
    name: str = DEFAULT_TEMPLATE_NAME
    contract: str = DEFAULT_CONTRACT_NAME
    variables: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_TEMPLATE_VARIABLES))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplateConfig":
        return cls(
            base_dir=data.get("base_dir", "."),
            templates_dir=data.get("templates_dir", DEFAULT_TEMPLATES_DIR),
            name=data.get("name", DEFAULT_TEMPLATE_NAME),
            contract=data.get("contract", DEFAULT_CONTRACT_NAME),
            variables=dict(data.get("variables", DEFAULT_TEMPLATE_VARIABLES)),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("CONTRACTSMITH_BASE_DIR"):
            self.base_dir = v
        if v := os.environ.get("CONTRACTSMITH_TEMPLATE"):
            self.name = v
        if v := os.environ.get("CONTRACTSMITH_CONTRACT"):
            self.contract = v

    @property
    def templates_path(self) -> Path:
        return Path(self.base_dir) / self.templates_dir


@dataclass
class ImportsConfig:
    """[imports] section."""
    # Relative to [template] base_dir unless absolute
    dependency_root: str = "node_modules"
    prefixes: List[str] = field(default_factory=lambda: list(DEFAULT_IMPORT_PREFIXES))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportsConfig":
        return cls(
            dependency_root=data.get("dependency_root", "node_modules"),
            prefixes=list(data.get("prefixes", DEFAULT_IMPORT_PREFIXES)),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("CONTRACTSMITH_DEPENDENCY_ROOT"):
            self.dependency_root = v
        if v := os.environ.get("CONTRACTSMITH_IMPORT_PREFIXES"):
            self.prefixes = [p.strip() for p in v.split(",") if p.strip()]


@dataclass
class CompilerConfig:
    """[compiler] section."""
    solc_version: str = DEFAULT_SOLC_VERSION
    # Explicit solc binary; overrides solc_version lookup when set
    solc_binary: str = ""
    install_missing: bool = False
    optimizer_enabled: bool = False
    optimizer_runs: int = 200
    evm_version: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompilerConfig":
        optimizer = data.get("optimizer", {})
        return cls(
            solc_version=data.get("solc_version", DEFAULT_SOLC_VERSION),
            solc_binary=data.get("solc_binary", ""),
            install_missing=data.get("install_missing", False),
            optimizer_enabled=optimizer.get("enabled", False),
            optimizer_runs=optimizer.get("runs", 200),
            evm_version=data.get("evm_version", ""),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("CONTRACTSMITH_SOLC_VERSION"):
            self.solc_version = v
        if v := os.environ.get("CONTRACTSMITH_SOLC_BINARY"):
            self.solc_binary = v
        if v := os.environ.get("CONTRACTSMITH_SOLC_INSTALL"):
            self.install_missing = v.lower() in ("1", "true", "yes")

    def settings(self) -> Dict[str, Any]:
        """Extra compiler settings merged into the input document."""
        extra: Dict[str, Any] = {}
        if self.optimizer_enabled:
            extra["optimizer"] = {"enabled": True, "runs": self.optimizer_runs}
        if self.evm_version:
            extra["evmVersion"] = self.evm_version
        return extra


# -----------------------------------------------------------------------
# Top-level unified config
# -----------------------------------------------------------------------

@dataclass
class AppConfig:
    """
    Unified service configuration.

    Loads every section of config.toml and applies environment variable
    overrides.  This is the single source of truth at runtime.
    """

    service: ServiceSectionConfig = field(default_factory=ServiceSectionConfig)
    template: TemplateConfig = field(default_factory=TemplateConfig)
    imports: ImportsConfig = field(default_factory=ImportsConfig)
    compiler: CompilerConfig = field(default_factory=CompilerConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Create AppConfig from a parsed TOML dict."""
        return cls(
            service=ServiceSectionConfig.from_dict(data.get("service", {})),
            template=TemplateConfig.from_dict(data.get("template", {})),
            imports=ImportsConfig.from_dict(data.get("imports", {})),
            compiler=CompilerConfig.from_dict(data.get("compiler", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "AppConfig":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (with env overrides); a malformed one
        raises ConfigurationError.
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        logger.info("Loaded configuration from %s", config_path)
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to every section."""
        self.service.apply_env()
        self.template.apply_env()
        self.imports.apply_env()
        self.compiler.apply_env()

    # --- derived paths ----------------------------------------------------

    @property
    def dependency_path(self) -> Path:
        root = Path(self.imports.dependency_root)
        if root.is_absolute():
            return root
        return Path(self.template.base_dir) / root

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        if not self.template.name:
            raise ConfigurationError("template name must not be empty")
        if not self.template.contract:
            raise ConfigurationError("contract name must not be empty")
        if not 0 < self.service.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.service.port}")
        if self.compiler.optimizer_runs < 1:
            raise ConfigurationError("optimizer runs must be >= 1")
        if not self.compiler.solc_version and not self.compiler.solc_binary:
            raise ConfigurationError("either solc_version or solc_binary must be set")
        for name in self.template.variables:
            if not name.isidentifier():
                raise ConfigurationError(f"Invalid template variable name: {name!r}")
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service": {
                "host": self.service.host,
                "port": self.service.port,
                "rate_limit": self.service.rate_limit,
                "cors_origins": list(self.service.cors_origins),
            },
            "template": {
                "base_dir": self.template.base_dir,
                "templates_dir": self.template.templates_dir,
                "name": self.template.name,
                "contract": self.template.contract,
                "variables": dict(self.template.variables),
            },
            "imports": {
                "dependency_root": self.imports.dependency_root,
                "prefixes": list(self.imports.prefixes),
            },
            "compiler": {
                "solc_version": self.compiler.solc_version,
                "solc_binary": self.compiler.solc_binary,
                "install_missing": self.compiler.install_missing,
                "optimizer": {
                    "enabled": self.compiler.optimizer_enabled,
                    "runs": self.compiler.optimizer_runs,
                },
                "evm_version": self.compiler.evm_version,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Load service configuration.

    Resolution order:
        1. Explicit *path* argument
        2. CONTRACTSMITH_CONFIG env var
        3. ./config.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("CONTRACTSMITH_CONFIG", "config.toml")

    return AppConfig.from_file(path)
