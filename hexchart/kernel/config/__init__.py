"""Configuration models."""

from hexchart.kernel.config.models import HexChartConfig, LoggingConfig, NewsletterConfig

__all__ = ["HexChartConfig", "LoggingConfig", "NewsletterConfig"]
