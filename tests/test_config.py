# =============================================================================
# XET COMPOSER CONFIG TESTS
# =============================================================================

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from xet_composer.config import DEFAULT_TEMPLATES_DIR, Settings, load_settings


class TestLoadSettings:
    """Tests for building Settings from the environment."""

    def test_defaults(self, monkeypatch):
        """Test defaults when nothing optional is set."""
        for name in ("XET_SIGNER_URL", "XET_DEPLOYER_KEY", "XET_TEMPLATES_DIR", "XET_REMAPPINGS"):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings()

        assert settings.templates_dir == DEFAULT_TEMPLATES_DIR
        assert settings.signer_url is None
        assert settings.deployer_key is None
        assert settings.remappings == ("@openzeppelin/=lib/openzeppelin-contracts/",)

    def test_environment_overrides(self, monkeypatch):
        """Test every knob is read from XET_* variables."""
        monkeypatch.setenv("XET_SOLC_BINARY", "/opt/solc-0.8.24")
        monkeypatch.setenv("XET_SOLC_TIMEOUT", "15")
        monkeypatch.setenv("XET_CHAIN_ID", "11155111")
        monkeypatch.setenv("XET_CONFIRMATIONS", "3")
        monkeypatch.setenv("XET_REMAPPINGS", "a/=lib/a/, b/=lib/b/")
        monkeypatch.setenv("XET_SIGNER_URL", "http://127.0.0.1:8550")

        settings = load_settings()

        assert settings.solc_binary == "/opt/solc-0.8.24"
        assert settings.solc_timeout == 15.0
        assert settings.chain_id == 11155111
        assert settings.confirmations == 3
        assert settings.remappings == ("a/=lib/a/", "b/=lib/b/")
        assert settings.signer_url == "http://127.0.0.1:8550"

    def test_import_roots_split_on_pathsep(self, monkeypatch):
        """Test import roots use the platform path separator."""
        monkeypatch.setenv("XET_IMPORT_ROOTS", os.pathsep.join(["lib", "node_modules"]))

        assert load_settings().import_roots == (Path("lib"), Path("node_modules"))

    def test_empty_strings_are_unset(self, monkeypatch):
        """Test blank signer variables count as absent."""
        monkeypatch.setenv("XET_SIGNER_URL", "")
        monkeypatch.setenv("XET_DEPLOYER_KEY", "")

        settings = load_settings()

        assert settings.signer_url is None
        assert settings.deployer_key is None


class TestSettings:
    """Tests for Settings bounds."""

    def test_key_not_in_repr(self):
        """Test the deployer key never shows up in logs."""
        settings = Settings(deployer_key="0xsecret")

        assert "0xsecret" not in repr(settings)

    def test_confirmations_at_least_one(self):
        """Test zero confirmations is refused."""
        with pytest.raises(ValidationError):
            Settings(confirmations=0)

    def test_frozen(self):
        """Test settings are read-only."""
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.chain_id = 1
