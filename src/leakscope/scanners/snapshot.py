"""Build page snapshots from fetched HTML."""

import json
import re
from urllib.parse import urljoin, urlparse

import httpx

from leakscope.core.exceptions import SourceUnavailable
from leakscope.core.logging import get_logger
from leakscope.infrastructure.http import HTTPClient
from leakscope.models.page import PageSnapshot, ScriptElement

logger = get_logger("snapshot")

SCRIPT_PATTERN = re.compile(
    r"<script(?P<attrs>[^>]*)>(?P<body>.*?)</script>",
    re.IGNORECASE | re.DOTALL,
)
ATTR_PATTERN = re.compile(r"([\w:-]+)\s*=\s*[\"']([^\"']*)[\"']")
LINK_PATTERN = re.compile(r"<a[^>]+href=[\"']([^\"']+)[\"']", re.IGNORECASE)
DATA_ELEMENT_PATTERN = re.compile(r"<[a-z][\w-]*\s([^>]*\bdata-[^>]*)>", re.IGNORECASE)


def _attributes(raw: str) -> dict[str, str]:
    return {name.lower(): value for name, value in ATTR_PATTERN.findall(raw)}


def snapshot_from_html(url: str, html: str) -> PageSnapshot:
    """Parse scripts, links and data attributes out of static HTML.

    Storage and resource timing do not exist outside a live browser, so those
    surfaces are marked unreadable. JSON script blocks with an ``id`` (such as
    ``__NEXT_DATA__``) are exposed as globals under that id.
    """
    scripts: list[ScriptElement] = []
    globals_: dict[str, object] = {}

    for match in SCRIPT_PATTERN.finditer(html):
        attrs = _attributes(match.group("attrs"))
        src = attrs.get("src")
        body = match.group("body").strip()
        scripts.append(
            ScriptElement(
                src=urljoin(url, src) if src else None,
                content=body,
                type=attrs.get("type"),
            )
        )
        if attrs.get("id") and "json" in attrs.get("type", "") and body:
            try:
                globals_[attrs["id"]] = json.loads(body)
            except ValueError:
                logger.debug("json_script_unparseable", script_id=attrs["id"])

    data_attributes = []
    for match in DATA_ELEMENT_PATTERN.finditer(html):
        data = {k: v for k, v in _attributes(match.group(1)).items() if k.startswith("data-")}
        if data:
            data_attributes.append(data)

    links: list[str] = []
    for href in LINK_PATTERN.findall(html):
        full_url = urljoin(url, href)
        if urlparse(full_url).scheme in ("http", "https") and full_url not in links:
            links.append(full_url)

    return PageSnapshot(
        url=url,
        html=html,
        scripts=scripts,
        data_attributes=data_attributes,
        links=links,
        local_storage=None,
        session_storage=None,
        cookies=None,
        globals=globals_,
        resource_entries=None,
    )


async def fetch_snapshot(url: str, client: HTTPClient) -> PageSnapshot:
    """Fetch a page and build its snapshot.

    Raises:
        SourceUnavailable: if the page cannot be fetched.
    """
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    try:
        html = await client.get_text(url)
    except httpx.HTTPError as e:
        raise SourceUnavailable(f"could not fetch {url}: {e}", source=url) from e
    return snapshot_from_html(url, html)
