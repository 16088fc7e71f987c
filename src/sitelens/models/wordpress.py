"""WordPress fingerprint and security models."""

from datetime import datetime

from pydantic import Field, computed_field

from sitelens.models.base import BaseSchema, FrozenSchema
from sitelens.models.security import SecurityFinding


class WordPressProfile(FrozenSchema):
    """WordPress fingerprint of a page.

    Every field keeps its "not present" default when ``is_wordpress`` is false.
    """

    is_wordpress: bool = False
    version: str | None = None
    theme: str | None = None
    plugins: tuple[str, ...] = ()
    is_version_outdated: bool | None = None
    exposed_files: tuple[str, ...] = ()
    admin_accessible: bool = False
    xmlrpc_enabled: bool = False
    user_enumeration_possible: bool = False
    directory_listing_enabled: bool = False
    debug_mode_enabled: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def plugin_count(self) -> int:
        return len(self.plugins)


class WordPressScanResult(BaseSchema):
    """WordPress analyzer output."""

    target: str
    profile: WordPressProfile = Field(default_factory=WordPressProfile)
    findings: list[SecurityFinding] = Field(default_factory=list)
    probe_errors: list[str] = Field(default_factory=list)
    scanned_at: datetime = Field(default_factory=datetime.utcnow)
    duration_seconds: float = 0.0
