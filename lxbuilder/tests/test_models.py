"""
Tests for the Build Configuration Record
========================================
"""

from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from lxbuilder.config import settings
from lxbuilder.models import BuildConfig, load_definitions


def _config(install_dir, **overrides):
    values = {
        "install_dir": install_dir,
        "mirror": "https://mirror.example.org/f/",
        "release": "41",
        "release_package": "fedora-release-41-25.noarch.rpm",
        "image_name": "lx-fedora-41",
        "name": "Fedora 41 LX Brand",
        "description": "Fedora 41 64-bit lx-brand image.",
    }
    values.update(overrides)
    return BuildConfig(**values)


@pytest.mark.unit
class TestBuildConfig:
    """Validation of the configuration record."""

    def test_values_kept_as_supplied(self, install_dir: Path):
        config = _config(f"{install_dir}/", docs_url="https://docs.example.org")

        assert config.install_dir == install_dir
        assert config.mirror == "https://mirror.example.org/f/"
        assert config.release == "41"
        assert config.release_package == "fedora-release-41-25.noarch.rpm"
        assert config.image_name == "lx-fedora-41"
        assert config.name == "Fedora 41 LX Brand"
        assert config.description == "Fedora 41 64-bit lx-brand image."
        assert config.docs_url == "https://docs.example.org"

    def test_strips_every_trailing_slash(self, install_dir: Path):
        config = _config(f"{install_dir}///")
        assert str(config.install_dir) == str(install_dir)

    def test_missing_install_dir_rejected(self, tmp_path: Path):
        with pytest.raises(ValidationError, match="does not exist"):
            _config(tmp_path / "nope")

    def test_file_is_not_an_install_dir(self, tmp_path: Path):
        regular = tmp_path / "file"
        regular.write_text("x")
        with pytest.raises(ValidationError):
            _config(regular)

    def test_host_root_refused(self):
        with pytest.raises(ValidationError, match="refusing"):
            _config("/")

    @pytest.mark.parametrize("field", ["mirror", "release", "release_package", "image_name", "name", "description"])
    def test_empty_required_field_rejected(self, install_dir: Path, field: str):
        with pytest.raises(ValidationError):
            _config(install_dir, **{field: ""})

    def test_docs_url_defaults(self, install_dir: Path):
        assert _config(install_dir).docs_url == settings.DEFAULT_DOCS_URL
        assert _config(install_dir, docs_url=None).docs_url == settings.DEFAULT_DOCS_URL
        assert _config(install_dir, docs_url="").docs_url == settings.DEFAULT_DOCS_URL

    def test_target_uses_todays_date(self, install_dir: Path):
        config = _config(install_dir, image_name="lx-fedora-40")
        assert config.target == f"lx-fedora-40-{date.today().strftime('%Y%m%d')}.tar.gz"

    def test_target_follows_build_date(self, build_config: BuildConfig):
        assert build_config.target == "lx-fedora-41-20261018.tar.gz"

    def test_release_url_joins_mirror_and_package(self, install_dir: Path):
        with_slash = _config(install_dir, mirror="https://m.example.org/f/")
        without_slash = _config(install_dir, mirror="https://m.example.org/f")
        expected = "https://m.example.org/f/fedora-release-41-25.noarch.rpm"
        assert with_slash.release_url == expected
        assert without_slash.release_url == expected

    def test_record_is_read_only(self, build_config: BuildConfig):
        with pytest.raises(ValidationError):
            build_config.image_name = "other"


@pytest.mark.unit
class TestLoadDefinitions:
    """Loading the YAML package definitions."""

    def test_default_definitions(self):
        definitions = load_definitions()

        assert definitions.group
        assert len(definitions.extras) == 2
        assert len(definitions.signing_keys) == 3
        assert all(len(key.id) == 8 for key in definitions.signing_keys)
        assert "kernel*" in definitions.exclude
        assert "systemd-hostnamed" in definitions.host_services

    def test_key_ids_are_lowercased(self, tmp_path: Path):
        path = tmp_path / "defs.yml"
        path.write_text(
            "group: minimal-environment\n"
            "signing_keys:\n"
            "  - id: A15B79CC\n"
            "    url: https://keys.example.org/40\n"
        )
        definitions = load_definitions(path)
        assert definitions.signing_keys[0].id == "a15b79cc"
        assert definitions.extras == []

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError, match="not found"):
            load_definitions(tmp_path / "missing.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "bad.yml"
        path.write_text("group: [unterminated\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_definitions(path)

    def test_schema_violation(self, tmp_path: Path):
        path = tmp_path / "nokeys.yml"
        path.write_text("group: server-product-environment\nsigning_keys: []\n")
        with pytest.raises(ValueError):
            load_definitions(path)

    def test_non_mapping(self, tmp_path: Path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_definitions(path)
