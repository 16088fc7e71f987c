"""Fetched page model."""

from urllib.parse import urlsplit

from pydantic import Field, field_validator

from sitelens.models.base import FrozenSchema


class FetchedPage(FrozenSchema):
    """HTML and response headers of the analyzed page."""

    url: str = Field(description="Normalized, scheme-qualified URL")
    html: str
    headers: dict[str, str] = Field(default_factory=dict)
    status_code: int | None = None
    via_proxy: bool = False

    @field_validator("headers")
    @classmethod
    def lowercase_header_names(cls, v: dict[str, str]) -> dict[str, str]:
        return {name.lower(): value for name, value in v.items()}

    @property
    def domain(self) -> str:
        """Bare hostname of the page."""
        return (urlsplit(self.url).hostname or "").lower()

    @property
    def base_url(self) -> str:
        """Scheme and authority, without path."""
        parts = urlsplit(self.url)
        return f"{parts.scheme}://{parts.netloc}"

    @property
    def is_https(self) -> bool:
        return self.url.lower().startswith("https://")

    def header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)
