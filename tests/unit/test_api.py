"""Unit tests for the public Python API (tex2web.convert)."""
from __future__ import annotations

import pytest

import tex2web
import tex2web.api as api
from tex2web.config import Config, SafetyConfig


class TestPublicApi:
    def test_top_level_exports(self):
        assert callable(tex2web.convert)
        assert callable(tex2web.convert_file)
        assert tex2web.supported_inputs() == [".tex", ".zip"]
        assert isinstance(tex2web.__version__, str)

    def test_convert_string(self):
        html = tex2web.convert(r"\textbf{Hello API}")
        assert html == "<p><strong>Hello API</strong></p>"

    def test_convert_with_images(self, png_data_uri):
        html = tex2web.convert(r"\includegraphics{dot}", {"dot.png": png_data_uri})
        assert f'src="{png_data_uri}"' in html

    def test_convert_with_dict_config(self):
        html = tex2web.convert(
            "$x$",
            config={"math": {"inline_open": "$", "inline_close": "$"}},
        )
        assert html == '<p><span class="math inline">$x$</span></p>'

    def test_convert_accepts_config_file_path(self, temp_config):
        html = tex2web.convert("text", config=temp_config)
        assert html == "<p>text</p>"

    def test_convert_sanitizes_when_configured(self, sanitizing_config):
        html = tex2web.convert(
            r"\href{javascript:alert(1)}{click}", config=sanitizing_config
        )
        assert "javascript" not in html
        assert "click" in html


class TestInputValidation:
    def test_rejects_non_string_source(self):
        with pytest.raises(TypeError, match="source"):
            tex2web.convert(b"bytes")

    def test_rejects_non_mapping_images(self):
        with pytest.raises(TypeError, match="images"):
            tex2web.convert("x", images=["a.png"])

    def test_rejects_non_string_image_values(self):
        with pytest.raises(TypeError, match="str"):
            tex2web.convert("x", images={"a.png": b"raw"})

    def test_rejects_bad_config_type(self):
        with pytest.raises(TypeError, match="config"):
            tex2web.convert("x", config=42)

    def test_rejects_oversize_source(self):
        config = Config(safety=SafetyConfig(max_input_bytes=10))
        with pytest.raises(ValueError, match="input limit"):
            tex2web.convert("x" * 11, config=config)

    def test_malformed_markup_never_raises(self):
        html = tex2web.convert(r"\begin{itemize}\item \textbf{open \end{tabular} $x")
        assert isinstance(html, str)


class TestConvertFile:
    def test_tex_file(self, temp_tex):
        html = tex2web.convert_file(temp_tex, config={"locale": "en_US"})
        assert "<h1>Introduction</h1>" in html

    def test_zip_project(self, temp_zip):
        html = tex2web.convert_file(temp_zip)
        assert 'src="data:image/png;base64,' in html
        assert 'style="width:50%"' in html

    def test_explicit_images_override_project(self, temp_zip):
        html = tex2web.convert_file(temp_zip, images={"diagram": "https://cdn.example/d.png"})
        assert 'src="https://cdn.example/d.png"' in html

    def test_rejects_unsupported_suffix(self, tmp_path):
        path = tmp_path / "doc.md"
        path.write_text("x", encoding="utf-8")
        with pytest.raises(ValueError, match="must use one of"):
            api.convert_file(path)

    def test_rejects_control_characters(self):
        with pytest.raises(ValueError, match="control characters"):
            api.convert_file("bad\nname.tex")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            api.convert_file(tmp_path / "absent.tex")
