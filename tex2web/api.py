"""Programmatic API for server-side tex2web usage."""
from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

from .config import Config, load_config, load_config_from_dict
from .converter import Converter
from .project import load_project

_PATH_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_INPUT_SUFFIXES = (".tex", ".zip")

# None, a Config, a mapping with the config.yaml schema, or a YAML file path
ConfigLike = Union[Config, Mapping[str, Any], str, Path, None]


def convert(
    source: str,
    images: Mapping[str, str] | None = None,
    *,
    config: ConfigLike = None,
) -> str:
    """Convert LaTeX *source* into an HTML fragment.

    Args:
        source: LaTeX text, with or without a preamble and ``document``
            environment.
        images: Image table mapping declared ``\\includegraphics`` names to
            ``src`` values (data URIs, URLs).  Unresolved names are emitted
            unchanged.
        config: ``None`` for defaults, a ``Config``, a mapping using the
            ``config.yaml`` schema, or the path of a YAML config file.

    Returns:
        HTML fragment with math left in place for MathJax.

    Raises:
        TypeError: *source*, *images* or *config* has the wrong type.
        ValueError: *source* is larger than ``safety.max_input_bytes``.
    """
    cfg = _resolve_config(config)
    if not isinstance(source, str):
        raise TypeError("source must be a str containing LaTeX text.")
    size = len(source.encode("utf-8"))
    if cfg.safety.max_input_bytes and size > cfg.safety.max_input_bytes:
        raise ValueError(
            f"source exceeds the {cfg.safety.max_input_bytes}-byte input limit ({size} bytes)"
        )
    return Converter(cfg).convert(source, _image_table(images))


def convert_file(
    path: str | Path,
    *,
    config: ConfigLike = None,
    images: Mapping[str, str] | None = None,
) -> str:
    """Convert a ``.tex`` file or ``.zip`` project into an HTML fragment.

    *images* entries take precedence over images found in the project.
    """
    project = load_project(_checked_source_path(path))
    return convert(project.source, {**project.images, **_image_table(images)}, config=config)


def supported_inputs() -> list[str]:
    """Return the file suffixes ``convert_file`` accepts."""
    return list(_INPUT_SUFFIXES)


def _resolve_config(config: ConfigLike) -> Config:
    if isinstance(config, Config):
        return config
    if config is None:
        return Config()
    if isinstance(config, (str, Path)):
        return load_config(Path(config))
    if isinstance(config, Mapping):
        return load_config_from_dict(config)
    raise TypeError(f"config must be a Config, mapping or file path, not {type(config).__name__}.")


def _image_table(images: Mapping[str, str] | None) -> dict[str, str]:
    if images is None:
        return {}
    if not isinstance(images, Mapping):
        raise TypeError("images must be a mapping of image names to src values.")
    for name, value in images.items():
        if not (isinstance(name, str) and isinstance(value, str)):
            raise TypeError(f"image table keys and values must be str (offending entry: {name!r}).")
    return dict(images)


def _checked_source_path(path_like: str | Path) -> Path:
    if not isinstance(path_like, (str, Path)):
        raise TypeError("path must be a str or Path.")
    if _PATH_CONTROL_RE.search(str(path_like)):
        raise ValueError("source path contains control characters")
    path = Path(path_like)
    if path.suffix.lower() not in _INPUT_SUFFIXES:
        raise ValueError(f"source path must use one of: {', '.join(_INPUT_SUFFIXES)}")
    if not path.is_file():
        raise FileNotFoundError(f"'{path}' not found.")
    return path
