"""
Load and save LaTeX projects: a single ``.tex`` file or a ``.zip`` archive.

Archive layout
--------------
main.tex      the source document (required)
index.html    rendered preview (written on save, ignored on load)
<anything>    images, keyed in the image table by their archive name
"""
from __future__ import annotations

import base64
import binascii
import io
import mimetypes
import re
import warnings
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from PIL import Image, UnidentifiedImageError

from .renderers.images import referenced_images

MAIN_TEX = "main.tex"
INDEX_HTML = "index.html"

_DATA_URI_RE = re.compile(r"^data:([^;,]+)(;base64)?,(.*)$", re.DOTALL)
_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".bmp")


@dataclass
class Project:
    """A source document plus the image table its ``\\includegraphics`` resolve against."""

    source: str
    images: dict[str, str] = field(default_factory=dict)


def image_data_uri(name: str, data: bytes) -> str:
    """Encode *data* as a base64 data URI.

    The MIME type is guessed from *name*; when that fails the bytes are
    sniffed with Pillow.  Raises ``ValueError`` for data that is not an image.
    """
    mime, _ = mimetypes.guess_type(name)
    if mime is None or not mime.startswith("image/"):
        try:
            with Image.open(io.BytesIO(data)) as img:
                mime = Image.MIME.get(img.format or "")
        except UnidentifiedImageError as exc:
            raise ValueError(f"'{name}' is not a recognised image") from exc
        if not mime:
            raise ValueError(f"'{name}' has an unknown image format")
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> bytes:
    """Return the payload of a data URI; raises ``ValueError`` when malformed."""
    m = _DATA_URI_RE.match(uri)
    if m is None:
        raise ValueError("not a data URI")
    if m.group(2):
        try:
            return base64.b64decode(m.group(3), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"invalid base64 payload: {exc}") from exc
    return m.group(3).encode("utf-8")


def load_images(paths: Iterable[Path]) -> dict[str, str]:
    """Build an image table from files, keyed by file name."""
    images: dict[str, str] = {}
    for path in paths:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"'{path}' not found.")
        images[path.name] = image_data_uri(path.name, path.read_bytes())
    return images


def load_project(path: Path) -> Project:
    """Load a ``.tex`` file or a ``.zip`` project archive."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"'{path}' not found.")
    suffix = path.suffix.lower()
    if suffix == ".tex":
        source = path.read_text(encoding="utf-8")
        return Project(source=source, images=_sibling_images(path.parent, source))
    if suffix == ".zip":
        return _load_archive(path)
    raise ValueError(f"Unsupported project type '{path.suffix}' (expected .tex or .zip)")


def _sibling_images(directory: Path, source: str) -> dict[str, str]:
    """Embed images referenced by *source* that exist next to the ``.tex`` file."""
    images: dict[str, str] = {}
    for name in referenced_images(source):
        candidates = [directory / name]
        if not Path(name).suffix:
            candidates += [directory / f"{name}{ext}" for ext in _IMAGE_SUFFIXES]
        for candidate in candidates:
            if candidate.is_file():
                try:
                    images[candidate.name] = image_data_uri(candidate.name, candidate.read_bytes())
                except ValueError as exc:
                    warnings.warn(f"Skipping image '{candidate}': {exc}", RuntimeWarning, stacklevel=2)
                break
    return images


def _load_archive(path: Path) -> Project:
    try:
        archive = zipfile.ZipFile(path)
    except zipfile.BadZipFile as exc:
        raise ValueError(f"'{path}' is not a valid zip archive") from exc

    with archive:
        names = [info.filename for info in archive.infolist() if not info.is_dir()]
        if MAIN_TEX not in names:
            raise ValueError(f"'{path}' does not contain {MAIN_TEX}")
        source = archive.read(MAIN_TEX).decode("utf-8")
        images: dict[str, str] = {}
        for name in names:
            if name in (MAIN_TEX, INDEX_HTML):
                continue
            try:
                images[name] = image_data_uri(name, archive.read(name))
            except ValueError as exc:
                warnings.warn(f"Skipping archive member '{name}': {exc}", RuntimeWarning, stacklevel=2)
    return Project(source=source, images=images)


def save_project(project: Project, path: Path, *, preview_html: str | None = None) -> Path:
    """Write *project* as a zip archive with ``main.tex``, images and an optional preview."""
    path = Path(path)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(MAIN_TEX, project.source)
        for name, uri in project.images.items():
            try:
                archive.writestr(name, decode_data_uri(uri))
            except ValueError as exc:
                warnings.warn(f"Image '{name}' not saved: {exc}", RuntimeWarning, stacklevel=2)
        if preview_html is not None:
            archive.writestr(INDEX_HTML, preview_html)
    return path
