"""
Tests for configuration loading.
"""

import logging
import os
import tempfile

from plcdiff.config import TextconvConfig, load_config


class TestLoadConfig:
    """Test YAML configuration loading."""

    def _write(self, content):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(content)
            return f.name

    def test_defaults(self):
        config = load_config()

        assert config == TextconvConfig()
        assert config.elide_tags == ["LadderElements"]
        assert config.identifier_format == "[{}]"
        assert config.max_identifier_length == 36
        assert config.max_symbol_length == 30

    def test_textconv_section(self):
        temp_file = self._write("""
textconv:
  elide_tags: [LadderElements, Position]
  symbol_column: 14
  breadcrumb_separator: " / "
""")
        try:
            config = load_config(temp_file)

            assert config.elide_tags == ["LadderElements", "Position"]
            assert config.symbol_column == 14
            assert config.breadcrumb_separator == " / "
            assert config.context_attribute == "ctx"
        finally:
            os.unlink(temp_file)

    def test_top_level_keys(self):
        temp_file = self._write("identifier_format: '=={}=='\nxml_declaration: false\n")
        try:
            config = load_config(temp_file)

            assert config.identifier_format == "=={}=="
            assert config.xml_declaration is False
        finally:
            os.unlink(temp_file)

    def test_unknown_keys_warned_and_ignored(self, caplog):
        temp_file = self._write("textconv:\n  colour: blue\n  symbol_column: 10\n")
        try:
            with caplog.at_level(logging.WARNING, logger="plcdiff.config"):
                config = load_config(temp_file)

            assert config.symbol_column == 10
            assert "colour" in caplog.text
        finally:
            os.unlink(temp_file)

    def test_invalid_yaml_falls_back_to_defaults(self, caplog):
        temp_file = self._write("textconv: [unclosed\n")
        try:
            with caplog.at_level(logging.WARNING, logger="plcdiff.config"):
                config = load_config(temp_file)

            assert config == TextconvConfig()
            assert "Could not load textconv config" in caplog.text
        finally:
            os.unlink(temp_file)

    def test_empty_file(self):
        temp_file = self._write("")
        try:
            assert load_config(temp_file) == TextconvConfig()
        finally:
            os.unlink(temp_file)

    def test_section_must_be_mapping(self, caplog):
        temp_file = self._write("textconv: 5\n")
        try:
            with caplog.at_level(logging.WARNING, logger="plcdiff.config"):
                config = load_config(temp_file)

            assert config == TextconvConfig()
            assert "expected a mapping" in caplog.text
        finally:
            os.unlink(temp_file)

    def test_wrongly_typed_values_ignored(self, caplog):
        temp_file = self._write("""
textconv:
  identifier_format: 5
  symbol_column: true
  xml_declaration: 1
  elide_tags: [LadderElements, 3]
  context_attribute: path
""")
        try:
            with caplog.at_level(logging.WARNING, logger="plcdiff.config"):
                config = load_config(temp_file)

            assert config == TextconvConfig(context_attribute="path")
            for key in ("identifier_format", "symbol_column", "xml_declaration", "elide_tags"):
                assert f"Ignoring textconv config key '{key}'" in caplog.text
        finally:
            os.unlink(temp_file)
