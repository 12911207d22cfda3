"""Build-tool integration — render right after the app bundle is written.

A bundler plugin calls :meth:`PrerenderPlugin.config_resolved` once its own
configuration is known (seeding ``input_dir`` / ``public_dir`` from the
bundler's output and public directories) and :meth:`write_bundle` after the
bundle is on disk.  Options given to the plugin always win over the seeded
values.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from prerender.config import RenderConfig, merge_config
from prerender.generator import StaticGenerator

if TYPE_CHECKING:
    from prerender.generator import RenderStats


class PrerenderPlugin:
    """Bundler hook object.

    Args:
        options: Render configuration overrides.
        enabled: When False, :meth:`write_bundle` does nothing.

    """

    name = "prerender"

    def __init__(self, options: Mapping[str, object] | None = None, *, enabled: bool = True) -> None:
        self._options = dict(options or {})
        self._enabled = enabled
        self._config: RenderConfig | None = None

    @property
    def config(self) -> RenderConfig:
        """The resolved config (defaults + bundler paths + options)."""
        if self._config is None:
            self._config = merge_config(self._options)
        return self._config

    def config_resolved(self, out_dir: str | Path, public_dir: str | Path | None = None) -> None:
        """Seed paths from the bundler's resolved configuration."""
        seeded: dict[str, object] = {"input_dir": out_dir, "public_dir": public_dir}
        base = merge_config(seeded)
        self._config = merge_config(self._options, base=base)

    async def write_bundle(self) -> RenderStats | None:
        """Render all routes.  Returns *None* when the plugin is disabled."""
        if not self._enabled:
            return None

        try:
            stats = await StaticGenerator(self.config).generate()
        except Exception as exc:
            print(f"  Static generation failed: {exc}", file=sys.stderr)
            raise

        print(
            f"\n  Static generation complete: {stats.success}/{stats.total} pages "
            f"in {stats.duration_ms:.0f}ms",
            file=sys.stderr,
        )
        if stats.failed > 0:
            print(f"  {stats.failed} pages failed", file=sys.stderr)
        return stats
