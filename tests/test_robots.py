"""Tests for prerender.export.robots — robots.txt generation."""

from __future__ import annotations

from pathlib import Path

from prerender.config import RobotsConfig, RobotsPolicy, SitemapConfig, merge_config
from prerender.export.robots import generate_robots, write_robots


class TestGenerateRobots:
    """generate_robots — one block per policy."""

    def test_single_policy_with_sitemap(self) -> None:
        robots = RobotsConfig(policies=(
            RobotsPolicy(user_agent="*", allow=("/",), disallow=("/admin",)),
        ))
        text = generate_robots(robots, SitemapConfig(hostname="https://example.com"))
        assert text == (
            "User-agent: *\n"
            "Allow: /\n"
            "Disallow: /admin\n"
            "\n"
            "Sitemap: https://example.com/sitemap.xml"
        )

    def test_multiple_policies_in_order(self) -> None:
        robots = RobotsConfig(policies=(
            RobotsPolicy(user_agent="Googlebot", allow=("/",)),
            RobotsPolicy(user_agent="BadBot", disallow=("/",)),
        ))
        assert generate_robots(robots) == (
            "User-agent: Googlebot\nAllow: /\n\nUser-agent: BadBot\nDisallow: /"
        )

    def test_no_sitemap_line_without_hostname(self) -> None:
        robots = RobotsConfig(policies=(RobotsPolicy(user_agent="*"),))
        assert generate_robots(robots, SitemapConfig()) == "User-agent: *"

    def test_from_merged_config(self) -> None:
        config = merge_config({
            "robots": {"policy": [{"userAgent": "*", "disallow": "/private"}]},
        })
        assert generate_robots(config.robots) == "User-agent: *\nDisallow: /private"


class TestWriteRobots:
    """write_robots — only when configured."""

    def test_writes_trimmed_text(self, tmp_path: Path) -> None:
        robots = RobotsConfig(policies=(RobotsPolicy(user_agent="*", allow=("/",)),))
        path = write_robots(robots, None, tmp_path)
        assert path == tmp_path / "robots.txt"
        assert path.read_text() == "User-agent: *\nAllow: /"

    def test_not_configured(self, tmp_path: Path) -> None:
        assert write_robots(None, SitemapConfig(hostname="https://x.io"), tmp_path) is None
        assert not (tmp_path / "robots.txt").exists()
