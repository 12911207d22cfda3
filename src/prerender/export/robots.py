"""robots.txt generation.

One block per policy, in configuration order::

    User-agent: *
    Allow: /
    Disallow: /admin

    Sitemap: https://example.com/sitemap.xml

The trailing ``Sitemap`` line is only added when a sitemap hostname is set.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from prerender.export.sitemap import sitemap_url

if TYPE_CHECKING:
    from prerender.config import RobotsConfig, SitemapConfig

ROBOTS_FILENAME = "robots.txt"


def generate_robots(robots: RobotsConfig, sitemap: SitemapConfig | None = None) -> str:
    """Render robots.txt content for *robots*."""
    lines: list[str] = []
    for policy in robots.policies:
        lines.append(f"User-agent: {policy.user_agent}")
        lines.extend(f"Allow: {path}" for path in policy.allow)
        lines.extend(f"Disallow: {path}" for path in policy.disallow)
        lines.append("")

    if sitemap is not None and sitemap.hostname:
        lines.append(f"Sitemap: {sitemap_url(sitemap.hostname)}")

    return "\n".join(lines).strip()


def write_robots(
    robots: RobotsConfig | None,
    sitemap: SitemapConfig | None,
    output_dir: Path,
) -> Path | None:
    """Write robots.txt to *output_dir*, or return *None* if not configured."""
    if robots is None:
        return None

    path = output_dir / ROBOTS_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_robots(robots, sitemap), encoding="utf-8")
    return path
