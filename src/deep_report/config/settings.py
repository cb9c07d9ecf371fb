"""ReportSettings dataclass and its TOML/environment loading.

Settings are built once at startup and passed explicitly to whatever needs
them; there is no module-level configuration state.

Priority (highest to lowest):
1. Environment variables
2. Project TOML config (./deep-report.toml or ./.deep-report.toml)
3. User TOML config (~/.deep-report.toml)
4. XDG config (~/.config/deep-report/config.toml)
5. Default values
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from deep_report.config.parsing import _parse_bool, _parse_env_value, _try_parse_bool
from deep_report.config.workflow import ProviderSettings, WorkflowConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "DEEP_REPORT_"
DEFAULT_WORKSPACE_DIR = Path("workspace")


def _optional_timeout(raw: str) -> Optional[float]:
    value = float(raw)
    return value if value > 0 else None


@dataclass
class ReportSettings:
    """Top-level settings for a deep-report process.

    Attributes:
        workspace_dir: Directory receiving audit streams and outputs
        log_level: Logging level name
        structured_logging: Emit JSON-style log lines
        audit_enabled: Write audit streams and events
        workflow: Pipeline knobs
        providers: External provider settings
    """

    workspace_dir: Path = field(default_factory=lambda: DEFAULT_WORKSPACE_DIR)
    log_level: str = "INFO"
    structured_logging: bool = False
    audit_enabled: bool = True
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    providers: ProviderSettings = field(default_factory=ProviderSettings)

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ReportSettings":
        """Create settings from TOML files and environment variables.

        Args:
            config_file: Explicit TOML file; disables layered discovery

        Returns:
            Fully resolved ReportSettings
        """
        settings = cls()

        toml_path = config_file or os.environ.get(f"{ENV_PREFIX}CONFIG_FILE")
        if toml_path:
            settings._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            xdg_config = Path(xdg_config_home) / "deep-report" / "config.toml"
            if xdg_config.exists():
                settings._load_toml(xdg_config)
                logger.debug("Loaded XDG config from %s", xdg_config)

            home_config = Path.home() / ".deep-report.toml"
            if home_config.exists():
                settings._load_toml(home_config)
                logger.debug("Loaded user config from %s", home_config)

            for candidate in (Path("deep-report.toml"), Path(".deep-report.toml")):
                if candidate.exists():
                    settings._load_toml(candidate)
                    logger.debug("Loaded project config from %s", candidate)
                    break

        settings._load_env()
        return settings

    def _load_toml(self, path: Path) -> None:
        """Merge one TOML file into these settings.

        Recognized tables: ``[workspace]``, ``[logging]``, ``[audit]``,
        ``[workflow]`` and ``[providers]``.

        Raises:
            ValueError: If the file is not valid TOML or holds invalid values
        """
        if not path.exists():
            logger.warning("Config file not found: %s", path)
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"Invalid TOML in {path}: {exc}") from exc

        if "workspace" in data and "dir" in data["workspace"]:
            self.workspace_dir = Path(data["workspace"]["dir"]).expanduser()

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = str(log["level"]).upper()
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        if "audit" in data and "enabled" in data["audit"]:
            self.audit_enabled = _parse_bool(data["audit"]["enabled"])

        if "workflow" in data:
            self.workflow = WorkflowConfig.from_toml_dict(data["workflow"])

        if "providers" in data:
            self.providers = ProviderSettings.from_toml_dict(data["providers"])

    def _load_env(self) -> None:
        """Apply environment variable overrides."""
        if workspace := os.environ.get(f"{ENV_PREFIX}WORKSPACE_DIR"):
            self.workspace_dir = Path(workspace).expanduser()

        if level := os.environ.get(f"{ENV_PREFIX}LOG_LEVEL"):
            self.log_level = level.upper()

        if structured := os.environ.get(f"{ENV_PREFIX}STRUCTURED_LOGGING"):
            parsed = _try_parse_bool(structured)
            if parsed is None:
                logger.warning("Invalid value for %sSTRUCTURED_LOGGING: %r", ENV_PREFIX, structured)
            else:
                self.structured_logging = parsed

        wf = self.workflow
        if raw := os.environ.get(f"{ENV_PREFIX}MAX_ATTEMPTS"):
            value = _parse_env_value(f"{ENV_PREFIX}MAX_ATTEMPTS", raw, int, wf.max_attempts)
            if value >= 1:
                wf.max_attempts = value
            else:
                logger.warning("Ignoring %sMAX_ATTEMPTS=%r (must be >= 1)", ENV_PREFIX, raw)
        if raw := os.environ.get(f"{ENV_PREFIX}CALL_TIMEOUT"):
            value_f = _parse_env_value(f"{ENV_PREFIX}CALL_TIMEOUT", raw, float, wf.call_timeout)
            if value_f > 0:
                wf.call_timeout = value_f
        if raw := os.environ.get(f"{ENV_PREFIX}WORKFLOW_TIMEOUT"):
            wf.workflow_timeout = _parse_env_value(
                f"{ENV_PREFIX}WORKFLOW_TIMEOUT", raw, _optional_timeout, wf.workflow_timeout
            )

        prov = self.providers
        if base_url := os.environ.get(f"{ENV_PREFIX}BASE_URL"):
            prov.base_url = base_url
        if model := os.environ.get(f"{ENV_PREFIX}MODEL"):
            prov.model = model
        if key := os.environ.get("OPENAI_API_KEY"):
            prov.api_key = key
        if key := os.environ.get("SERPAPI_API_KEY"):
            prov.serpapi_key = key
        if key := os.environ.get("TAVILY_API_KEY"):
            prov.tavily_api_key = key

    def setup_logging(self) -> None:
        """Configure the ``deep_report`` logger based on settings."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        root_logger = logging.getLogger("deep_report")
        root_logger.setLevel(level)
        root_logger.addHandler(handler)
