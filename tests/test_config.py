from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from conftest import SAMPLE_ATTENDEES, SAMPLE_CONFIG
from eventcheck.config import Config, load_config_file, resolve_config_paths


class TestLoadConfig:
    """YAML configuration files"""

    def test_sample_config(self):
        config = load_config_file(SAMPLE_CONFIG)
        assert config.name == "Spring Gala 2025"
        assert config.attendees_json == SAMPLE_ATTENDEES
        assert config.export_dir == SAMPLE_CONFIG.parent
        assert config.settings.ticket_price == 100
        assert config.settings.pdf_settings.organization_name == "Spring Gala Committee"
        assert config.transport == "console"

    def test_relative_paths_resolve_against_config(self, tmp_path):
        data = resolve_config_paths(
            {"attendees_json": "data/a.json", "page_size": 5}, tmp_path / "c.yaml"
        )
        assert Path(data["attendees_json"]) == (tmp_path / "data" / "a.json").resolve()
        assert data["page_size"] == 5

    def test_absolute_and_empty_paths_untouched(self, tmp_path):
        absolute = str(SAMPLE_ATTENDEES)
        data = resolve_config_paths(
            {"attendees_json": absolute, "export_dir": ""}, tmp_path / "c.yaml"
        )
        assert data == {"attendees_json": absolute, "export_dir": ""}

    def test_camel_case_settings_accepted(self):
        config = Config(
            attendees_json=SAMPLE_ATTENDEES,
            settings={"ticketPrice": 25, "pdfSettings": {"enabled": False}},
        )
        assert config.settings.ticket_price == 25
        assert not config.settings.pdf_settings.enabled

    def test_missing_attendees_file(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text(yaml.safe_dump({"attendees_json": "missing.json"}))
        with pytest.raises(FileNotFoundError):
            load_config_file(path)

    def test_invalid_page_size(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text(
            yaml.safe_dump({"attendees_json": str(SAMPLE_ATTENDEES), "page_size": 0})
        )
        with pytest.raises(ValidationError):
            load_config_file(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config_file(path)

    def test_unknown_transport(self):
        with pytest.raises(ValidationError):
            Config(attendees_json=SAMPLE_ATTENDEES, transport="pigeon")
