"""
Configuration for the export tool.
"""

from .config_loader import ExportConfig, default_profile, PASSWORD_ENV, OUTPUT_DIR_ENV

__all__ = ["ExportConfig", "default_profile", "PASSWORD_ENV", "OUTPUT_DIR_ENV"]
