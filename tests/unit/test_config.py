"""Unit tests for Settings."""

from pathlib import Path

from animenotes.config import Settings


class TestSettings:
    """Tests for settings loading."""

    def test_defaults(self, monkeypatch):
        """Test default values without environment overrides."""
        for name in ("SYNC_MODE", "ANILIST_TOKEN", "DATABASE_PATH", "SETTLE_DELAY"):
            monkeypatch.delenv(f"ANIMENOTES_{name}", raising=False)

        settings = Settings(_env_file=None)

        assert settings.sync_mode == "dual-view"
        assert settings.anilist_token == ""
        assert settings.anilist_api_url == "https://graphql.anilist.co"
        assert settings.anilist_timeout is None
        assert settings.storage_key == "anime-notes"
        assert settings.settle_delay == 0.4

    def test_env_overrides(self, monkeypatch):
        """Test ANIMENOTES_ environment variables are read."""
        monkeypatch.setenv("ANIMENOTES_SYNC_MODE", "local-only")
        monkeypatch.setenv("ANIMENOTES_ANILIST_TOKEN", "tok")
        monkeypatch.setenv("ANIMENOTES_DATABASE_PATH", "/tmp/x/notes.db")

        settings = Settings(_env_file=None)

        assert settings.sync_mode == "local-only"
        assert settings.anilist_token == "tok"
        assert settings.database_path == Path("/tmp/x/notes.db")
        assert settings.database_url == "sqlite:////tmp/x/notes.db"

    def test_unknown_mode_is_accepted(self, monkeypatch):
        """Test an unknown mode is left for the policy to resolve."""
        monkeypatch.setenv("ANIMENOTES_SYNC_MODE", "something-else")
        assert Settings(_env_file=None).sync_mode == "something-else"
