"""Page surface models supplied by the host browser harness."""

from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import Field

from leakscope.models.base import BaseSchema


class ScriptElement(BaseSchema):
    """A script tag as seen in the live document."""

    src: str | None = None
    content: str = ""
    type: str | None = None


class PageSnapshot(BaseSchema):
    """Readable surfaces of one page at scan time.

    A surface set to ``None`` could not be read (e.g. storage access denied);
    the matching scanner reports it as unavailable instead of empty.
    """

    url: str
    html: str = ""
    scripts: list[ScriptElement] = Field(default_factory=list)
    data_attributes: list[dict[str, str]] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)
    links: list[str] = Field(default_factory=list)
    local_storage: dict[str, str] | None = Field(default_factory=dict)
    session_storage: dict[str, str] | None = Field(default_factory=dict)
    cookies: str | None = ""
    globals: dict[str, Any] | None = Field(default_factory=dict)
    resource_entries: list[str] | None = Field(default_factory=list)

    @property
    def origin(self) -> str:
        parsed = urlparse(self.url)
        return f"{parsed.scheme}://{parsed.netloc}"


class NetworkObservation(BaseSchema):
    """One request or response seen by the host's traffic monitor."""

    session_id: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    direction: Literal["request", "response"] = "request"
    request_id: str | None = None
