"""
Builder Configuration
=====================

Process-wide settings for the image builder using Pydantic Settings.
Supports environment variables and .env files.
"""

from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load variables from a local .env so operators can pin mirrors and paths
# without repeating them on every invocation.
load_dotenv()


class Settings(BaseSettings):
    """Builder settings with environment variable support."""

    # Image Metadata
    DEFAULT_DOCS_URL: str = "https://docs.joyent.com/images/container-native-linux"
    PRODUCT_NAME: str = "Container-Native Linux Instance"

    # Repository Paths
    REPO_ROOT: Path = Path(__file__).parent.parent
    DEFINITIONS_FILE: Path = Path(__file__).parent / "definitions" / "fedora.yml"
    EXCLUDE_FILE: Path = REPO_ROOT / "exclude.txt"
    GUESTTOOLS_DIR: Path = REPO_ROOT / "guesttools"
    GUESTTOOLS_INSTALLER: str = "install.sh"

    # Output
    OUTPUT_DIR: Path = Path(".")

    # Network
    DOWNLOAD_TIMEOUT: float = 300.0

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
