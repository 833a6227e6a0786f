from __future__ import annotations

import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional


@dataclass
class MathConfig:
    """Delimiters written around math spans for the client-side typesetter."""

    inline_open: str = "\\("
    inline_close: str = "\\)"
    display_open: str = "\\["
    display_close: str = "\\]"


@dataclass
class CodeConfig:
    """Configuration for ``lstlisting`` / ``verbatim`` output."""

    highlight: bool = False  # run listings with a language through Pygments
    style: str = "default"  # Pygments style for the inline colours


@dataclass
class PageConfig:
    """Styling for the standalone preview page built around a fragment."""

    title: str = "Rendered LaTeX"
    font_family: str = "Georgia, 'Times New Roman', serif"
    font_size: int = 16  # document font size in pixels
    text_color: str = "#222"
    background: str = "#fffbe7"
    mathjax_url: str = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-svg.js"


@dataclass
class SafetyConfig:
    """Limits for conversions of untrusted input."""

    max_input_bytes: int = 5 * 1024 * 1024  # max source size accepted by the API
    max_depth: int = 4  # nesting cap for layouts that re-run the pipeline
    sanitize: bool = False  # pass the fragment through the allowlist sanitizer


@dataclass
class Config:
    """Top-level configuration for a conversion run."""

    locale: str = "ru_RU"  # locale used to format \today
    date_format: str = "long"  # Babel date format name or pattern
    strip_comments: bool = True
    textimage_width: float = 0.8  # image width fraction in the textimage layout
    textimage_max_width: int = 400  # cap in pixels for the textimage image
    math: MathConfig = field(default_factory=MathConfig)
    code: CodeConfig = field(default_factory=CodeConfig)
    page: PageConfig = field(default_factory=PageConfig)
    safety: SafetyConfig = field(default_factory=SafetyConfig)


_SECTIONS: dict[str, type] = {
    "math": MathConfig,
    "code": CodeConfig,
    "page": PageConfig,
    "safety": SafetyConfig,
}


def load_config(path: Optional[Path]) -> Config:
    """Load configuration from a YAML file, returning defaults if *path* is None or missing."""
    if path is None or not path.exists():
        return Config()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, Mapping):
        raise ValueError(f"Config file '{path}' must contain a mapping at the top level.")
    return load_config_from_dict(data)


def load_config_from_dict(data: Mapping[str, Any]) -> Config:
    """Build a ``Config`` from a mapping using the same schema as ``config.yaml``.

    Unknown keys are ignored; missing keys keep their defaults.
    """
    top_fields = {
        k: v
        for k, v in data.items()
        if k in Config.__dataclass_fields__ and k not in _SECTIONS
    }
    sections = {}
    for name, cls in _SECTIONS.items():
        raw = data.get(name) or {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"Config section '{name}' must be a mapping.")
        sections[name] = cls(
            **{k: v for k, v in raw.items() if k in cls.__dataclass_fields__}
        )

    return Config(**top_fields, **sections)
