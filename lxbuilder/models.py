"""
Pydantic Models
===============

Validated build configuration and package definitions.
"""

from datetime import date
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import settings


def _today() -> str:
    return date.today().strftime("%Y%m%d")


class BuildConfig(BaseModel):
    """Configuration record for a single image build.

    Validated once before any destructive action and read-only afterwards.
    """

    model_config = ConfigDict(frozen=True)

    install_dir: Path = Field(..., description="Directory the image root is built in")
    mirror: str = Field(..., min_length=1, description="Mirror URL holding the release package")
    release: str = Field(..., min_length=1, description="Fedora release version")
    release_package: str = Field(..., min_length=1, description="Release package filename")
    image_name: str = Field(..., min_length=1, description="Image name, used for the archive")
    name: str = Field(..., min_length=1, description="Display name")
    description: str = Field(..., min_length=1, description="Image description")
    docs_url: str = Field(default_factory=lambda: settings.DEFAULT_DOCS_URL)
    build_date: str = Field(default_factory=_today, pattern=r"^\d{8}$")

    @field_validator("install_dir", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Normalize the install directory and refuse the host root."""
        raw = str(v)
        if not raw:
            raise ValueError("install directory must not be empty")
        stripped = raw.rstrip("/")
        if not stripped:
            raise ValueError("refusing to use / as the install directory")
        return Path(stripped)

    @field_validator("install_dir")
    @classmethod
    def install_dir_exists(cls, v: Path) -> Path:
        if not v.is_dir():
            raise ValueError(f"install directory {v} does not exist")
        return v

    @field_validator("docs_url", mode="before")
    @classmethod
    def default_docs_url(cls, v):
        return v or settings.DEFAULT_DOCS_URL

    @property
    def target(self) -> str:
        """Archive filename: <image_name>-<YYYYMMDD>.tar.gz."""
        return f"{self.image_name}-{self.build_date}.tar.gz"

    @property
    def root(self) -> Path:
        """Absolute install directory, as rpm and dnf require for their root options."""
        return self.install_dir.resolve()

    @property
    def release_url(self) -> str:
        return f"{self.mirror.rstrip('/')}/{self.release_package}"


class SigningKey(BaseModel):
    """A trusted distributor signing key."""
    id: str = Field(..., pattern=r"^[0-9a-f]{8}$")
    url: str

    @field_validator("id", mode="before")
    @classmethod
    def lowercase_id(cls, v):
        return str(v).lower()


class DefinitionMetadata(BaseModel):
    name: str
    description: Optional[str] = None


class PackageDefinition(BaseModel):
    """Package selection and trust anchors loaded from a definitions file."""
    metadata: Optional[DefinitionMetadata] = None
    group: str = Field(..., min_length=1)
    exclude: List[str] = Field(default_factory=list)
    extras: List[str] = Field(default_factory=list)
    signing_keys: List[SigningKey] = Field(..., min_length=1)
    host_services: List[str] = Field(default_factory=list)


def load_definitions(path: Path | None = None) -> PackageDefinition:
    """Load package definitions from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the YAML is malformed or does not match the schema
    """
    path = Path(path or settings.DEFINITIONS_FILE)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as err:
        raise FileNotFoundError(f"Package definitions not found: {path}") from err
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Package definitions in {path} must be a mapping")

    return PackageDefinition.model_validate(data)
