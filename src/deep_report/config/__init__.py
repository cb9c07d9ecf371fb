"""Configuration for deep-report.

Usage:
    from deep_report.config import ReportSettings

    settings = ReportSettings.from_env()
    settings.setup_logging()
"""

from deep_report.config.settings import ReportSettings
from deep_report.config.workflow import ProviderSettings, WorkflowConfig

__all__ = ["ProviderSettings", "ReportSettings", "WorkflowConfig"]
