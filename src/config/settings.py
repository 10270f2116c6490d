"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use READMIX_ prefix (e.g., READMIX_BACKUP_ENABLED=false).

Settings can also be loaded from a .env file in the project root.
"""

import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use READMIX_ prefix.

    Examples:
        READMIX_BACKUP_ENABLED=false
        READMIX_BACKUP_ROOT=/var/tmp/readme-backups
        READMIX_PROJECT_CONFIG_FILE=docs/readmix.yaml
    """

    model_config = SettingsConfigDict(
        env_prefix="READMIX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Parser configuration
    marker_keyword: str = Field(
        default="rdmx",
        description="Keyword following the HTML comment opener that marks a directive",
    )

    default_namespace: str = Field(
        default="rdmx",
        description="Namespace used when a directive is written as ':action'",
    )

    nofile_name: str = Field(
        default="nofile",
        description="File name reported in errors when transforming a string without a path",
    )

    # Backup configuration
    backup_enabled: bool = Field(
        default=True,
        description="Copy original files to a timestamped directory before overwriting them",
    )

    backup_root: str = Field(
        default=str(Path(tempfile.gettempdir()) / "readmix-backups"),
        description="Root directory receiving the timestamped backup directories",
    )

    backup_stamp_format: str = Field(
        default="readmix-backup-%Y-%m-%d-%H-%M-%S-%f",
        description="strftime format of the per-run backup directory name",
    )

    # Project configuration
    project_config_file: str = Field(
        default=".readmix.yaml",
        description="Project file declaring extra generators, scopes and variables",
    )

    pyproject_file: str = Field(
        default="pyproject.toml",
        description="Project metadata file read by the default variable scope",
    )

    def openers_make(self) -> tuple[str, str]:
        """
        Build the two recognized comment openers, three-dash variant first.

        Returns:
            Tuple of opener strings

        Example:
            >>> AppSettings().openers_make()
            ('<!--- rdmx ', '<!-- rdmx ')
        """
        return (f"<!--- {self.marker_keyword} ", f"<!-- {self.marker_keyword} ")

    def backupStamp_make(self, when: datetime) -> str:
        """
        Generate the backup directory name for a run started at `when`.

        Args:
            when: Datetime of the update run

        Returns:
            Directory name (e.g., "readmix-backup-2027-06-05-04-03-02-010200")
        """
        return when.strftime(self.backup_stamp_format)


# Singleton instance - import this in your code
appsettings = AppSettings()
