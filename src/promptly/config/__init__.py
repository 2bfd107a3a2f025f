"""Configuration for promptly.

``load_settings`` merges config/promptly.yaml, .env and the environment
into one validated ``Settings`` object.
"""

from promptly.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
