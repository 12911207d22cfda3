"""Sitemap generation — produce sitemap.xml from render results.

Lists every successfully rendered route as an absolute URL under the
configured hostname.  Routes matching an exclude pattern are left out.
Patterns are simple globs: ``*`` matches any run of characters (including
``/``), everything else is literal, and the whole route must match.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urljoin
from xml.etree.ElementTree import Element, SubElement, tostring

if TYPE_CHECKING:
    from prerender.config import SitemapConfig
    from prerender.renderer import RenderResult

# XML namespace for sitemaps
_SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

SITEMAP_FILENAME = "sitemap.xml"


@lru_cache(maxsize=128)
def _compile_pattern(pattern: str) -> re.Pattern[str]:
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")))


def is_excluded(route: str, patterns: Iterable[str]) -> bool:
    """Return True if *route* fully matches any of *patterns*."""
    return any(_compile_pattern(p).fullmatch(route) for p in patterns)


def sitemap_url(hostname: str) -> str:
    """Absolute URL of the sitemap for *hostname*."""
    return urljoin(hostname, "/" + SITEMAP_FILENAME)


def sitemap_routes(
    results: Iterable[RenderResult],
    exclude: Iterable[str] = (),
) -> list[str]:
    """Successful routes that survive *exclude*, in result order."""
    patterns = tuple(exclude)
    return [
        result.route
        for result in results
        if result.success and not is_excluded(result.route, patterns)
    ]


def generate_sitemap(results: Iterable[RenderResult], sitemap: SitemapConfig) -> str:
    """Generate a sitemap.xml string from render results.

    Args:
        results: Render results, in route order.
        sitemap: Sitemap settings; ``hostname`` must be set.

    Returns:
        Complete XML string suitable for writing to ``sitemap.xml``.

    """
    urlset = Element("urlset")
    urlset.set("xmlns", _SITEMAP_NS)

    for route in sitemap_routes(results, sitemap.exclude):
        url_el = SubElement(urlset, "url")
        loc = SubElement(url_el, "loc")
        loc.text = urljoin(sitemap.hostname, route)

    xml = tostring(urlset, encoding="unicode", xml_declaration=False)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + xml + "\n"


def write_sitemap(
    results: Iterable[RenderResult],
    sitemap: SitemapConfig | None,
    output_dir: Path,
) -> Path | None:
    """Write sitemap.xml to *output_dir*.

    Returns *None* without writing when no hostname is configured.

    """
    if sitemap is None or not sitemap.hostname:
        return None

    path = output_dir / SITEMAP_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_sitemap(results, sitemap), encoding="utf-8")
    return path
