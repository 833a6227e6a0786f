from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .api import convert, convert_file, supported_inputs
from .config import CodeConfig, Config, MathConfig, PageConfig, SafetyConfig
from .converter import Converter

try:
    __version__ = version("tex2web")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "CodeConfig",
    "Config",
    "Converter",
    "MathConfig",
    "PageConfig",
    "SafetyConfig",
    "convert",
    "convert_file",
    "supported_inputs",
]
