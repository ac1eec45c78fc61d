"""Runtime settings for filetrail, loaded from the environment."""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "FILETRAIL_"


class HistorySettings(BaseModel):
    """Tunables shared by the history components."""

    history_limit: int = Field(50, ge=1, description="Default number of commits fetched per file")
    diff_commit_limit: int = Field(
        5, ge=0, description="Only the newest N commits of a history carry unified and structured diffs"
    )
    short_hash_length: int = Field(7, ge=4, le=40, description="Length of the abbreviated commit hash")
    pending_author: str = Field("current user", description="Author shown on uncommitted entries")
    pending_email: str = Field("", description="Author email shown on uncommitted entries")
    pending_message: str = Field("Uncommitted modifications", description="Message shown on uncommitted entries")
    primary_label: str = Field("Record File", description="Display label for primary file commits")
    satellite_label: str = Field("Linked Records", description="Display label for satellite file commits")
    record_list_suffixes: List[str] = Field(
        default_factory=lambda: ["-mappings.yaml"],
        description="File name suffixes whose whole document is a list of identified records",
    )
    record_identifier_field: str = Field("uuid", description="Field holding a record's stable identifier")
    record_reference_field: str = Field("control_id", description="Field linking a record to its parent")
    fetch_remotes: bool = Field(True, description="Refresh remotes before comparing branches")

    def is_record_list_path(self, path: str) -> bool:
        return any(str(path).endswith(suffix) for suffix in self.record_list_suffixes)


def _env(name: str) -> Optional[str]:
    value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
    return value if value not in (None, "") else None


def load_settings(env_file: Optional[str] = None) -> HistorySettings:
    """Build settings from FILETRAIL_* environment variables (and a .env file)."""
    load_dotenv(env_file)

    overrides = {}
    for name, info in HistorySettings.model_fields.items():
        raw = _env(name)
        if raw is None:
            continue
        if name == "record_list_suffixes":
            overrides[name] = [suffix.strip() for suffix in raw.split(",") if suffix.strip()]
        elif info.annotation is bool:
            overrides[name] = raw.strip().lower() in ("1", "true", "yes", "on")
        else:
            overrides[name] = raw

    return HistorySettings(**overrides)
