"""Tests for configuration loading."""

import pytest

from droplist.core import config as config_module
from droplist.core.config import (
    CacheConfig,
    Config,
    DriveConfig,
    get_data_dir,
    get_duration_cache_path,
    load_config,
)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point config and data lookups at tmp_path."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for name in ("DROPLIST_API_KEY", "GOOGLE_API_KEY", "DROPLIST_TRACKS_FOLDER", "DROPLIST_ARTIST_FOLDER"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "_find_project_config", lambda: None)
    monkeypatch.chdir(tmp_path)
    return tmp_path / "config" / "droplist" / "config.toml"


class TestLoadConfig:
    """Tests for load_config."""

    def test_creates_default_file(self, isolated_config) -> None:
        """A missing config file is created and defaults are used."""
        config = load_config()

        assert isolated_config.exists()
        assert config == Config()

    def test_default_file_round_trips(self, isolated_config) -> None:
        """The generated file parses back to the defaults."""
        load_config()
        assert load_config() == Config()

    def test_custom_values(self, isolated_config) -> None:
        """Values from TOML override defaults."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(
            '[drive]\ntracks_folder_name = "tracks"\n'
            "[cache]\nprobe_batch_size = 5\n"
            '[logging]\nlevel = "debug"\n'
        )

        config = load_config()
        assert config.drive.tracks_folder_name == "tracks"
        assert config.drive.artist_folder_name == "artist"
        assert config.cache.probe_batch_size == 5
        assert config.logging.level == "DEBUG"

    def test_invalid_section_falls_back(self, isolated_config) -> None:
        """An invalid section is replaced by its defaults."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("[cache]\nprobe_batch_size = 0\n[queue]\nrecent_history_limit = 3\n")

        config = load_config()
        assert config.cache == CacheConfig()
        assert config.queue.recent_history_limit == 3

    def test_broken_toml(self, isolated_config) -> None:
        """Unparseable TOML gives the default configuration."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("[drive\n")
        assert load_config() == Config()

    def test_environment_overrides(self, isolated_config, monkeypatch) -> None:
        """Environment variables win over the file."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text('[drive]\ntracks_folder_name = "tracks"\n')
        monkeypatch.setenv("DROPLIST_API_KEY", "key123")
        monkeypatch.setenv("DROPLIST_TRACKS_FOLDER", "")

        config = load_config()
        assert config.drive.api_key == "key123"
        assert config.drive.tracks_folder_name == ""

    def test_local_config_preferred(self, isolated_config, tmp_path) -> None:
        """config.toml in the working directory is used first."""
        (tmp_path / "config.toml").write_text('[drive]\nartist_folder_name = "faces"\n')
        assert load_config().drive.artist_folder_name == "faces"


class TestPaths:
    """Tests for data paths."""

    def test_duration_cache_default(self, isolated_config) -> None:
        """Durations live in the data directory by default."""
        assert get_duration_cache_path(Config()) == get_data_dir() / "durations.json"
        assert get_data_dir().name == "droplist"

    def test_duration_cache_override(self, tmp_path) -> None:
        """An explicit cache file is used as given."""
        config = Config(cache=CacheConfig(duration_cache_file=str(tmp_path / "d.json")))
        assert get_duration_cache_path(config) == tmp_path / "d.json"


class TestValidation:
    """Tests for section validation."""

    def test_drive_rejects_relative_proxy(self) -> None:
        """The proxy path must be absolute."""
        with pytest.raises(ValueError):
            DriveConfig(proxy_path="api/drive-file").validate()

    def test_cache_rejects_zero_timeout(self) -> None:
        """Probe timeout must be positive."""
        with pytest.raises(ValueError):
            CacheConfig(probe_timeout=0).validate()
