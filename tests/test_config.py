"""Tests for configuration file handling."""

import json
from pathlib import Path

import pytest

from pybitburner.config import BridgeConfig, load_config, save_config
from pybitburner.exceptions import BitburnerConfigError
from pybitburner.sync import MismatchPolicy


class TestBridgeConfig:
    """Tests for BridgeConfig."""

    def test_defaults(self):
        """Test the built-in defaults."""
        config = BridgeConfig()
        assert config.port == 12525
        assert config.base_dir == "./src"
        assert config.def_file == "./types/NetscriptDefinitions.d.ts"
        assert config.poll_delay_ms == 500
        assert config.ignore == ["tmp/"]
        assert config.on_mismatch is MismatchPolicy.FAIL

    def test_ignore_default_is_not_shared(self):
        """Test that each config gets its own ignore list."""
        first = BridgeConfig()
        first.ignore.append("other/")
        assert BridgeConfig().ignore == ["tmp/"]

    def test_skip_definitions(self):
        assert BridgeConfig(def_file="skip").skip_definitions is True
        assert BridgeConfig(def_file="SKIP").skip_definitions is True
        assert BridgeConfig().skip_definitions is False

    def test_from_dict_falls_back_on_empty_values(self):
        """Test that missing or empty values use the defaults."""
        config = BridgeConfig.from_dict(
            {"port": None, "base_dir": "", "ignore": [], "on_mismatch": ""}
        )
        assert config == BridgeConfig()

    def test_from_dict_parses_policy(self):
        config = BridgeConfig.from_dict({"on_mismatch": "Download"})
        assert config.on_mismatch is MismatchPolicy.DOWNLOAD

    def test_from_dict_invalid_policy(self):
        with pytest.raises(BitburnerConfigError):
            BridgeConfig.from_dict({"on_mismatch": "merge"})

    @pytest.mark.parametrize("ignore", ["tmp/", ["tmp/", 3], {"tmp/": True}])
    def test_from_dict_rejects_non_list_ignore(self, ignore):
        """Test that ignore must be a list of strings."""
        with pytest.raises(BitburnerConfigError, match="ignore"):
            BridgeConfig.from_dict({"ignore": ignore})

    @pytest.mark.parametrize("key", ["port", "poll_delay_ms"])
    def test_from_dict_rejects_non_numeric(self, key):
        with pytest.raises(BitburnerConfigError, match=key):
            BridgeConfig.from_dict({key: "soon"})

    def test_from_dict_accepts_numeric_strings(self):
        config = BridgeConfig.from_dict({"port": "2000", "poll_delay_ms": "250"})
        assert config.port == 2000
        assert config.poll_delay_ms == 250

    def test_to_dict_is_json_serializable(self):
        data = BridgeConfig(on_mismatch=MismatchPolicy.UPLOAD).to_dict()
        assert json.loads(json.dumps(data))["on_mismatch"] == "upload"

    @pytest.mark.parametrize(
        "settings",
        [{"port": 0}, {"port": 65536}, {"poll_delay_ms": -1}, {"base_dir": ""}],
    )
    def test_validate_rejects(self, settings):
        with pytest.raises(BitburnerConfigError):
            BridgeConfig(**settings).validate()

    def test_validate_accepts_defaults(self):
        BridgeConfig().validate()


class TestConfigFile:
    """Tests for loading and saving the config file."""

    def test_missing_file_gives_defaults(self, temp_dir: Path):
        assert load_config(temp_dir / "pybitburner.json") == BridgeConfig()

    def test_save_and_load(self, temp_dir: Path):
        """Test that saved settings are loaded back."""
        path = temp_dir / "pybitburner.json"
        config = BridgeConfig(
            port=2000, ignore=["tmp/", "old/"], on_mismatch=MismatchPolicy.UPLOAD
        )

        assert save_config(config, path) == path
        assert load_config(path) == config
        assert path.read_text().endswith("}\n")

    def test_partial_file(self, temp_dir: Path):
        """Test that keys missing from the file keep their defaults."""
        path = temp_dir / "pybitburner.json"
        path.write_text(json.dumps({"base_dir": "./scripts"}))

        config = load_config(path)

        assert config.base_dir == "./scripts"
        assert config.port == 12525

    def test_invalid_json(self, temp_dir: Path):
        path = temp_dir / "pybitburner.json"
        path.write_text("{broken")

        with pytest.raises(BitburnerConfigError, match="Cannot read"):
            load_config(path)

    def test_non_object_json(self, temp_dir: Path):
        path = temp_dir / "pybitburner.json"
        path.write_text("[1, 2]")

        with pytest.raises(BitburnerConfigError, match="JSON object"):
            load_config(path)

    def test_save_to_missing_directory(self, temp_dir: Path):
        with pytest.raises(BitburnerConfigError, match="Cannot write"):
            save_config(BridgeConfig(), temp_dir / "missing" / "pybitburner.json")
