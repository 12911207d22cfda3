"""Tests for prerender.integration — bundler plugin."""

from __future__ import annotations

from pathlib import Path

import pytest

from prerender.generator import RenderStats
from prerender.integration import PrerenderPlugin


class _FakeGenerator:
    """Stand-in for StaticGenerator that records its config."""

    instances: list[_FakeGenerator] = []
    error: BaseException | None = None

    def __init__(self, config: object) -> None:
        self.config = config
        _FakeGenerator.instances.append(self)

    async def generate(self) -> RenderStats:
        if _FakeGenerator.error is not None:
            raise _FakeGenerator.error
        return RenderStats(total=3, success=2, failed=1, duration_ms=5.0, results=())


@pytest.fixture
def fake_generator(monkeypatch: pytest.MonkeyPatch) -> type[_FakeGenerator]:
    _FakeGenerator.instances = []
    _FakeGenerator.error = None
    monkeypatch.setattr("prerender.integration.StaticGenerator", _FakeGenerator)
    return _FakeGenerator


class TestConfig:
    """PrerenderPlugin — config seeding."""

    def test_name(self) -> None:
        assert PrerenderPlugin.name == "prerender"

    def test_options_without_bundler(self) -> None:
        plugin = PrerenderPlugin({"parallel": 2})
        assert plugin.config.parallel == 2
        assert plugin.config.input_dir == Path("dist")

    def test_bundler_paths_seed_config(self) -> None:
        plugin = PrerenderPlugin()
        plugin.config_resolved("build/out", "build/public")
        assert plugin.config.input_dir == Path("build/out")
        assert plugin.config.public_dir == Path("build/public")

    def test_options_win_over_bundler(self) -> None:
        plugin = PrerenderPlugin({"inputDir": "custom"})
        plugin.config_resolved("build/out")
        assert plugin.config.input_dir == Path("custom")
        assert plugin.config.public_dir is None


class TestWriteBundle:
    """PrerenderPlugin.write_bundle — runs generation."""

    @pytest.mark.asyncio
    async def test_generates(
        self,
        fake_generator: type[_FakeGenerator],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        plugin = PrerenderPlugin({"routes": ["/a"]})
        plugin.config_resolved("dist")
        stats = await plugin.write_bundle()

        assert stats is not None and stats.success == 2
        assert fake_generator.instances[0].config is plugin.config
        err = capsys.readouterr().err
        assert "2/3 pages" in err
        assert "1 pages failed" in err

    @pytest.mark.asyncio
    async def test_disabled(self, fake_generator: type[_FakeGenerator]) -> None:
        plugin = PrerenderPlugin(enabled=False)
        assert await plugin.write_bundle() is None
        assert fake_generator.instances == []

    @pytest.mark.asyncio
    async def test_failure_reraised(
        self,
        fake_generator: type[_FakeGenerator],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        fake_generator.error = ConnectionError("cms down")
        with pytest.raises(ConnectionError):
            await PrerenderPlugin().write_bundle()
        assert "Static generation failed: cms down" in capsys.readouterr().err
