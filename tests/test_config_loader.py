"""Tests for prerender.config_loader — config discovery and parsing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from prerender._errors import ConfigError
from prerender.config import CallbackRoutes, StaticRoutes
from prerender.config_loader import find_config_file, load_config, read_config_file


class TestFindConfigFile:
    """find_config_file — lookup order."""

    def test_none_when_missing(self, tmp_path: Path) -> None:
        assert find_config_file(cwd=tmp_path) is None

    def test_python_before_json_before_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.yaml").write_text("parallel: 1\n")
        (tmp_path / "prerender.config.json").write_text("{}")
        assert find_config_file(cwd=tmp_path) == tmp_path / "prerender.config.json"

        (tmp_path / "prerender.config.py").write_text("config = {}\n")
        assert find_config_file(cwd=tmp_path) == tmp_path / "prerender.config.py"

    def test_yml_extension(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.yml").write_text("parallel: 1\n")
        assert find_config_file(cwd=tmp_path) == tmp_path / "prerender.config.yml"

    def test_explicit_path_first(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.json").write_text("{}")
        (tmp_path / "custom.yaml").write_text("parallel: 1\n")
        assert find_config_file("custom.yaml", cwd=tmp_path) == tmp_path / "custom.yaml"

    def test_missing_explicit_path_falls_back(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.json").write_text("{}")
        found = find_config_file("nope.json", cwd=tmp_path)
        assert found == tmp_path / "prerender.config.json"


class TestLoadConfig:
    """load_config — parse, merge, override."""

    @pytest.mark.asyncio
    async def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = await load_config(cwd=tmp_path)
        assert config.routes == StaticRoutes(routes=("/",))
        assert config.parallel == 4

    @pytest.mark.asyncio
    async def test_json(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.json").write_text(json.dumps({
            "routes": ["/", "/about"],
            "outputDir": "public_html",
            "waitFor": {"selector": "#root"},
        }))
        config = await load_config(cwd=tmp_path)
        assert config.routes == StaticRoutes(routes=("/", "/about"))
        assert config.output_dir == Path("public_html")
        assert config.wait_for.selector == "#root"

    @pytest.mark.asyncio
    async def test_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.yaml").write_text(
            "routes:\n  - /\n  - /pricing\n"
            "parallel: 2\n"
            "sitemap:\n  hostname: https://example.com\n"
        )
        config = await load_config(cwd=tmp_path)
        assert config.routes == StaticRoutes(routes=("/", "/pricing"))
        assert config.parallel == 2
        assert config.sitemap is not None
        assert config.sitemap.hostname == "https://example.com"

    @pytest.mark.asyncio
    async def test_empty_yaml_is_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.yaml").write_text("")
        config = await load_config(cwd=tmp_path)
        assert config.parallel == 4

    @pytest.mark.asyncio
    async def test_python_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.py").write_text(
            "def routes():\n"
            "    return ['/a', '/b']\n"
            "\n"
            "config = {'routes': routes, 'retries': 5}\n"
        )
        config = await load_config(cwd=tmp_path)
        assert isinstance(config.routes, CallbackRoutes)
        assert config.routes.callback() == ["/a", "/b"]
        assert config.retries == 5

    @pytest.mark.asyncio
    async def test_python_async_callable(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.py").write_text(
            "async def config():\n"
            "    return {'parallel': 8}\n"
        )
        config = await load_config(cwd=tmp_path)
        assert config.parallel == 8

    @pytest.mark.asyncio
    async def test_python_sync_callable(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.py").write_text(
            "def config():\n"
            "    return {'minify_html': True}\n"
        )
        config = await load_config(cwd=tmp_path)
        assert config.minify_html is True

    @pytest.mark.asyncio
    async def test_overrides_win(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.json").write_text(
            json.dumps({"input_dir": "build", "output_dir": "out", "parallel": 2})
        )
        config = await load_config(cwd=tmp_path, output_dir="elsewhere")
        assert config.input_dir == Path("build")
        assert config.output_dir == Path("elsewhere")
        assert config.parallel == 2

    @pytest.mark.asyncio
    async def test_bundled_template_loads(self, tmp_path: Path) -> None:
        from prerender._cli import CONFIG_TEMPLATE

        (tmp_path / "prerender.config.py").write_text(CONFIG_TEMPLATE.read_text())
        config = await load_config(cwd=tmp_path)
        assert config.wait_for.selector == "#app"
        assert len(config.dynamic_routes) == 1
        assert config.dynamic_routes[0].pattern == "/blog/*"


class TestLoadErrors:
    """Unreadable or invalid files raise ConfigError."""

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.json").write_text("{not json")
        with pytest.raises(ConfigError, match="Failed to load config"):
            await read_config_file(cwd=tmp_path)

    @pytest.mark.asyncio
    async def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="must define a mapping"):
            await read_config_file(cwd=tmp_path)

    @pytest.mark.asyncio
    async def test_python_without_config(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.py").write_text("settings = {}\n")
        with pytest.raises(ConfigError, match="does not define"):
            await read_config_file(cwd=tmp_path)

    @pytest.mark.asyncio
    async def test_python_raising(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.py").write_text("raise RuntimeError('boom')\n")
        with pytest.raises(ConfigError, match="boom"):
            await read_config_file(cwd=tmp_path)

    @pytest.mark.asyncio
    async def test_unknown_key(self, tmp_path: Path) -> None:
        (tmp_path / "prerender.config.json").write_text(json.dumps({"colour": "red"}))
        with pytest.raises(ConfigError, match="Unknown configuration key"):
            await load_config(cwd=tmp_path)

    @pytest.mark.asyncio
    async def test_unsupported_explicit_extension(self, tmp_path: Path) -> None:
        (tmp_path / "settings.toml").write_text("parallel = 1\n")
        with pytest.raises(ConfigError, match="Unsupported"):
            await read_config_file("settings.toml", cwd=tmp_path)
