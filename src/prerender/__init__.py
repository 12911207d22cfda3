"""Prerender — static HTML from a client-rendered single-page app.

Serves a built app locally, drives headless Chromium through every
configured route and writes the rendered pages, copied assets, a sitemap
and a robots file to an output directory.

Quick start::

    import asyncio
    import prerender

    stats = asyncio.run(prerender.generate({"routes": ["/", "/about"]}))
    print(f"{stats.success}/{stats.total} pages")

From the command line::

    prerender init        # write prerender.config.py
    prerender generate    # build, then render

"""

__version__ = "0.1.0"
__all__ = [
    "PrerenderPlugin",
    "RenderConfig",
    "RenderStats",
    "StaticGenerator",
    "__version__",
    "generate",
    "load_config",
    "merge_config",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import prerender`` fast; Playwright and uvicorn are only
    imported once generation is actually requested.
    """
    if name in ("RenderConfig", "merge_config"):
        from prerender import config

        return getattr(config, name)

    if name == "load_config":
        from prerender.config_loader import load_config

        return load_config

    if name in ("StaticGenerator", "RenderStats", "generate"):
        from prerender import generator

        return getattr(generator, name)

    if name == "PrerenderPlugin":
        from prerender.integration import PrerenderPlugin

        return PrerenderPlugin

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
