"""Prerender configuration.

RenderConfig is the central configuration object, frozen after creation.
User input (a config file, CLI flags, or keyword arguments) is merged over
the defaults by :func:`merge_config`, which also resolves every
"value-or-callable" option into a tagged variant exactly once.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeAlias
from urllib.parse import urlsplit

from prerender._errors import ConfigError
from prerender.naming import nested_naming, resolve_naming

if TYPE_CHECKING:
    from prerender._types import (
        AfterRenderHook,
        BeforeRenderHook,
        ErrorHook,
        FileNaming,
        OutputNaming,
        Route,
        RouteGenerator,
    )

_FILE_NAMINGS: frozenset[str] = frozenset({"nested", "flat", "custom"})

_HOOK_KEYS: tuple[str, ...] = ("before_render", "after_render", "on_error")


async def maybe_await(value: object) -> Any:
    """Await *value* if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


# ---------------------------------------------------------------------------
# Nested option groups
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Viewport:
    """Browser viewport size in CSS pixels."""

    width: int = 1280
    height: int = 720


@dataclass(frozen=True, slots=True)
class BrowserOptions:
    """Browser launch and page options.

    Attributes:
        headless: Run Chromium without a visible window.
        devtools: Open DevTools for every tab (only useful with headless off).
        timeout: Browser launch timeout in milliseconds.
        viewport: Page viewport size.
        user_agent: Override the browser's user agent string.

    """

    headless: bool = True
    devtools: bool = False
    timeout: int = 30_000
    viewport: Viewport = field(default_factory=Viewport)
    user_agent: str | None = None


@dataclass(frozen=True, slots=True)
class WaitForOptions:
    """Readiness policy applied to every route.

    Attributes:
        network_idle: Treat network idle as navigation completion.  Takes
            precedence over ``load``.
        selector: CSS selector that must appear before the page is captured.
        timeout: Bound in milliseconds for navigation and the selector wait.
        load: Wait for the ``load`` event.

    """

    network_idle: bool = True
    selector: str | None = None
    timeout: int = 5_000
    load: bool = True

    @property
    def wait_until(self) -> str:
        """The Playwright ``wait_until`` value for navigation."""
        if self.network_idle:
            return "networkidle"
        if self.load:
            return "load"
        return "domcontentloaded"


@dataclass(frozen=True, slots=True)
class SitemapConfig:
    """``sitemap.xml`` settings.  Nothing is written without a hostname."""

    hostname: str = ""
    exclude: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RobotsPolicy:
    """One ``User-agent`` block of ``robots.txt``."""

    user_agent: str
    allow: tuple[str, ...] = ()
    disallow: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RobotsConfig:
    """``robots.txt`` settings: policy blocks in output order."""

    policies: tuple[RobotsPolicy, ...] = ()


@dataclass(frozen=True, slots=True)
class DynamicRoute:
    """A named route generator.

    Attributes:
        pattern: Descriptive label (e.g. ``"/blog/*"``).  Never matched
            against anything.
        generator: Callable returning routes, sync or async.

    """

    pattern: str
    generator: RouteGenerator


# ---------------------------------------------------------------------------
# Route sources (tagged variant)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StaticRoutes:
    """A fixed list of routes."""

    routes: tuple[Route, ...] = ("/",)


@dataclass(frozen=True, slots=True)
class CallbackRoutes:
    """Routes produced by a callable invoked once per run."""

    callback: RouteGenerator


RouteSource: TypeAlias = StaticRoutes | CallbackRoutes


# ---------------------------------------------------------------------------
# Lifecycle hooks
# ---------------------------------------------------------------------------


class RenderHooks:
    """Per-route lifecycle hooks used by the render worker.

    The base class is the no-op implementation: nothing happens before a
    render, HTML passes through ``after_render`` unchanged, errors are
    ignored.  Subclass it to customise individual hooks.
    """

    __slots__ = ()

    async def before_render(self, route: Route) -> None:
        return None

    async def after_render(self, route: Route, html: str) -> str | None:
        return None

    async def on_error(self, route: Route, error: BaseException) -> None:
        return None


class CallbackHooks(RenderHooks):
    """RenderHooks backed by plain user callables (sync or async).

    ``after_render`` may return replacement HTML; returning *None* keeps the
    HTML as rendered.
    """

    __slots__ = ("after", "before", "error")

    def __init__(
        self,
        before: BeforeRenderHook | None = None,
        after: AfterRenderHook | None = None,
        error: ErrorHook | None = None,
    ) -> None:
        self.before = before
        self.after = after
        self.error = error

    async def before_render(self, route: Route) -> None:
        if self.before is not None:
            await maybe_await(self.before(route))

    async def after_render(self, route: Route, html: str) -> str | None:
        if self.after is None:
            return None
        result = await maybe_await(self.after(route, html))
        return None if result is None else str(result)

    async def on_error(self, route: Route, error: BaseException) -> None:
        if self.error is not None:
            await maybe_await(self.error(route, error))


# ---------------------------------------------------------------------------
# RenderConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Configuration for one generation run.

    Build instances with :func:`merge_config` (or :meth:`update`) rather
    than calling the constructor with raw user values: merging validates
    input and resolves ``routes``, naming and hooks into their final form.

    Attributes:
        input_dir: Directory holding the built application.
        output_dir: Directory the static site is written to.
        public_dir: Public assets copied to ``output_dir/assets`` (optional).
        routes: Where static routes come from.
        dynamic_routes: Route generators run after ``routes``.
        port: Local server port (0 = OS-assigned).
        host: Local server host.
        server_timeout: Maximum server start-up time in milliseconds.
        browser: Browser launch and page options.
        wait_for: Per-route readiness policy.
        file_naming: Naming scheme label.
        custom_naming: User naming callable; overrides ``file_naming``.
        naming: Effective route -> output path function.
        minify_html: Collapse whitespace in rendered HTML.
        inject_meta: ``<meta name=... content=...>`` pairs added to ``<head>``.
        build_command: Shell command run by the CLI before rendering.
        skip_build: Do not run ``build_command``.
        parallel: Routes rendered concurrently per batch.
        retries: Maximum render attempts per route.
        cache: Accepted for compatibility; no caching is performed.
        cache_dir: Accepted for compatibility; unused.
        build_dir: Accepted for compatibility; rendering reads ``input_dir``.
        sitemap: Sitemap settings, or *None* to skip ``sitemap.xml``.
        robots: Robots settings, or *None* to skip ``robots.txt``.
        hooks: Lifecycle hooks.

    """

    input_dir: Path = field(default_factory=lambda: Path("dist"))
    output_dir: Path = field(default_factory=lambda: Path("static"))
    public_dir: Path | None = field(default_factory=lambda: Path("public"))
    routes: RouteSource = field(default_factory=StaticRoutes)
    dynamic_routes: tuple[DynamicRoute, ...] = ()
    port: int = 9099
    host: str = "localhost"
    server_timeout: int = 30_000
    browser: BrowserOptions = field(default_factory=BrowserOptions)
    wait_for: WaitForOptions = field(default_factory=WaitForOptions)
    file_naming: FileNaming = "nested"
    custom_naming: OutputNaming | None = None
    naming: OutputNaming = nested_naming
    minify_html: bool = False
    inject_meta: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({}),
    )
    build_command: str = "npm run build"
    skip_build: bool = False
    parallel: int = 4
    retries: int = 2
    cache: bool = False
    cache_dir: Path = field(default_factory=lambda: Path(".cache/prerender"))
    build_dir: Path = field(default_factory=lambda: Path("dist"))
    sitemap: SitemapConfig | None = None
    robots: RobotsConfig | None = None
    hooks: RenderHooks = field(default_factory=RenderHooks)

    def update(self, **overrides: object) -> RenderConfig:
        """Return a new config with *overrides* merged over this one."""
        return merge_config(overrides, base=self)

    def output_path_for(self, route: Route) -> str:
        """Output file path for *route*, relative to ``output_dir``."""
        return self.naming(route)


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

_FIELD_NAMES: frozenset[str] = frozenset(
    f.name for f in fields(RenderConfig) if f.name != "naming"
)
_KNOWN_KEYS: frozenset[str] = _FIELD_NAMES | frozenset(_HOOK_KEYS)


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _normalize_keys(values: Mapping[str, object]) -> dict[str, object]:
    """Convert camelCase keys (``inputDir``) to snake_case (``input_dir``)."""
    return {_snake(str(k)): v for k, v in values.items()}


def merge_config(
    overrides: Mapping[str, object] | None = None,
    *,
    base: RenderConfig | None = None,
) -> RenderConfig:
    """Merge user *overrides* over *base* (or the defaults).

    Nested groups (``browser``, ``wait_for``, ``browser.viewport``) merge
    key by key; every other key replaces the base value.  Keys may be
    camelCase or snake_case.

    Raises:
        ConfigError: On unknown keys or invalid values.

    """
    base = base if base is not None else RenderConfig()
    values = _normalize_keys(overrides or {})

    unknown = sorted(set(values) - _KNOWN_KEYS)
    if unknown:
        msg = f"Unknown configuration key(s): {', '.join(unknown)}"
        raise ConfigError(msg)

    changes: dict[str, object] = {}
    for key, value in values.items():
        if key in _HOOK_KEYS:
            continue
        converter = _CONVERTERS.get(key)
        changes[key] = converter(value, base) if converter else value

    config = replace(base, **changes)

    if "file_naming" in values or "custom_naming" in values:
        config = replace(
            config,
            naming=resolve_naming(config.file_naming, config.custom_naming),
        )

    if any(key in values for key in _HOOK_KEYS):
        config = replace(config, hooks=_merge_hooks(values, config.hooks))

    _validate(config)
    return config


def _merge_hooks(values: Mapping[str, object], current: RenderHooks) -> RenderHooks:
    previous = current if isinstance(current, CallbackHooks) else CallbackHooks()
    callbacks: dict[str, object] = {
        "before": previous.before,
        "after": previous.after,
        "error": previous.error,
    }
    for key, slot in zip(_HOOK_KEYS, ("before", "after", "error"), strict=True):
        if key not in values:
            continue
        hook = values[key]
        if hook is not None and not callable(hook):
            msg = f"{key} must be callable, got {type(hook).__name__}"
            raise ConfigError(msg)
        callbacks[slot] = hook
    return CallbackHooks(**callbacks)  # type: ignore[arg-type]


def _validate(config: RenderConfig) -> None:
    if config.parallel < 1:
        msg = f"parallel must be at least 1, got {config.parallel}"
        raise ConfigError(msg)
    if config.retries < 0:
        msg = f"retries must not be negative, got {config.retries}"
        raise ConfigError(msg)
    if not 0 <= config.port <= 65535:
        msg = f"port out of range: {config.port}"
        raise ConfigError(msg)


# ---------------------------------------------------------------------------
# Per-key converters
# ---------------------------------------------------------------------------


def _as_path(value: object, _base: RenderConfig) -> Path:
    return value if isinstance(value, Path) else Path(str(value))


def _as_optional_path(value: object, base: RenderConfig) -> Path | None:
    if value is None or value == "":
        return None
    return _as_path(value, base)


def _as_int(name: str) -> Callable[[object, RenderConfig], int]:
    def convert(value: object, _base: RenderConfig) -> int:
        if isinstance(value, bool):
            msg = f"{name} must be an integer, got {value!r}"
            raise ConfigError(msg)
        try:
            return int(value)  # type: ignore[call-overload]
        except (TypeError, ValueError) as exc:
            msg = f"{name} must be an integer, got {value!r}"
            raise ConfigError(msg) from exc

    return convert


def _as_bool(value: object, _base: RenderConfig) -> bool:
    return bool(value)


def _as_str_tuple(value: object, name: str) -> tuple[str, ...]:
    """Accept a single string or an iterable of strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(str(v) for v in value)
    msg = f"{name} must be a string or a list of strings, got {value!r}"
    raise ConfigError(msg)


def _as_route_source(value: object, _base: RenderConfig) -> RouteSource:
    if isinstance(value, StaticRoutes | CallbackRoutes):
        return value
    if callable(value):
        return CallbackRoutes(callback=value)
    if isinstance(value, str) or not isinstance(value, Iterable):
        msg = f"routes must be a list of routes or a callable, got {value!r}"
        raise ConfigError(msg)
    return StaticRoutes(routes=tuple(str(r) for r in value))


def _as_dynamic_routes(value: object, _base: RenderConfig) -> tuple[DynamicRoute, ...]:
    if value is None:
        return ()
    if isinstance(value, Mapping) or not isinstance(value, Iterable):
        msg = "dynamic_routes must be a list of {pattern, generator} entries"
        raise ConfigError(msg)

    result: list[DynamicRoute] = []
    for entry in value:
        if isinstance(entry, DynamicRoute):
            result.append(entry)
            continue
        if not isinstance(entry, Mapping):
            msg = f"Invalid dynamic route entry: {entry!r}"
            raise ConfigError(msg)
        generator = entry.get("generator")
        if not callable(generator):
            msg = f"Dynamic route {entry.get('pattern')!r} has no callable generator"
            raise ConfigError(msg)
        result.append(DynamicRoute(pattern=str(entry.get("pattern", "")), generator=generator))
    return tuple(result)


# How each option-group field is converted; viewport is a nested group
_BOOL_OPTIONS = frozenset({"headless", "devtools", "network_idle", "load"})
_TEXT_OPTIONS = frozenset({"user_agent", "selector"})
# Smallest accepted value per integer option
_INT_OPTION_MINIMUM: dict[str, int] = {"timeout": 0, "width": 1, "height": 1}


def _merge_group(group: Any, value: object, name: str) -> Any:
    """Merge a mapping over a frozen option group, key by key.

    Every value is converted to the field's type; anything that cannot be
    converted raises :class:`ConfigError`.
    """
    if isinstance(value, type(group)):
        return value
    if value is None:
        return group
    if not isinstance(value, Mapping):
        msg = f"{name} must be a mapping, got {value!r}"
        raise ConfigError(msg)

    values = _normalize_keys(value)
    allowed = {f.name for f in fields(group)}
    unknown = sorted(set(values) - allowed)
    if unknown:
        msg = f"Unknown {name} option(s): {', '.join(unknown)}"
        raise ConfigError(msg)

    return replace(group, **{
        key: _convert_option(f"{name}.{key}", key, option, getattr(group, key))
        for key, option in values.items()
    })


def _convert_option(path: str, key: str, value: object, current: object) -> object:
    if isinstance(current, Viewport):
        return _merge_group(current, value, path)

    if key in _BOOL_OPTIONS:
        if not isinstance(value, bool):
            msg = f"{path} must be true or false, got {value!r}"
            raise ConfigError(msg)
        return value

    if key in _TEXT_OPTIONS:
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            msg = f"{path} must be a string, got {value!r}"
            raise ConfigError(msg)
        return value

    number = _as_int(path)(value, None)  # type: ignore[arg-type]
    minimum = _INT_OPTION_MINIMUM[key]
    if number < minimum:
        msg = f"{path} must be at least {minimum}, got {number}"
        raise ConfigError(msg)
    return number


def _as_browser(value: object, base: RenderConfig) -> BrowserOptions:
    return _merge_group(base.browser, value, "browser")


def _as_wait_for(value: object, base: RenderConfig) -> WaitForOptions:
    return _merge_group(base.wait_for, value, "wait_for")


def _as_file_naming(value: object, _base: RenderConfig) -> str:
    if value not in _FILE_NAMINGS:
        msg = f"file_naming must be one of {sorted(_FILE_NAMINGS)}, got {value!r}"
        raise ConfigError(msg)
    return str(value)


def _as_custom_naming(value: object, _base: RenderConfig) -> object:
    if value is not None and not callable(value):
        msg = f"custom_naming must be callable, got {type(value).__name__}"
        raise ConfigError(msg)
    return value


def _as_meta(value: object, _base: RenderConfig) -> Mapping[str, str]:
    if value is None:
        return MappingProxyType({})
    if not isinstance(value, Mapping):
        msg = f"inject_meta must be a mapping, got {value!r}"
        raise ConfigError(msg)
    return MappingProxyType({str(k): str(v) for k, v in value.items()})


def _as_sitemap(value: object, _base: RenderConfig) -> SitemapConfig | None:
    if value is None or isinstance(value, SitemapConfig):
        return value
    if not isinstance(value, Mapping):
        msg = f"sitemap must be a mapping or null, got {value!r}"
        raise ConfigError(msg)
    values = _normalize_keys(value)
    hostname = str(values.get("hostname") or "")
    if hostname:
        parts = urlsplit(hostname)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            msg = f"sitemap.hostname must be an absolute http(s) URL, got {hostname!r}"
            raise ConfigError(msg)
    return SitemapConfig(
        hostname=hostname,
        exclude=_as_str_tuple(values.get("exclude"), "sitemap.exclude"),
    )


def _as_robots(value: object, _base: RenderConfig) -> RobotsConfig | None:
    if value is None or isinstance(value, RobotsConfig):
        return value
    if not isinstance(value, Mapping):
        msg = f"robots must be a mapping or null, got {value!r}"
        raise ConfigError(msg)
    values = _normalize_keys(value)
    entries = values.get("policy", values.get("policies")) or ()
    if isinstance(entries, Mapping):
        entries = (entries,)

    policies: list[RobotsPolicy] = []
    for entry in entries:  # type: ignore[union-attr]
        if isinstance(entry, RobotsPolicy):
            policies.append(entry)
            continue
        if not isinstance(entry, Mapping):
            msg = f"Invalid robots policy: {entry!r}"
            raise ConfigError(msg)
        policy = _normalize_keys(entry)
        if not policy.get("user_agent"):
            msg = f"robots policy requires a user_agent: {entry!r}"
            raise ConfigError(msg)
        policies.append(RobotsPolicy(
            user_agent=str(policy["user_agent"]),
            allow=_as_str_tuple(policy.get("allow"), "robots.allow"),
            disallow=_as_str_tuple(policy.get("disallow"), "robots.disallow"),
        ))
    return RobotsConfig(policies=tuple(policies))


def _as_hooks(value: object, _base: RenderConfig) -> RenderHooks:
    if not isinstance(value, RenderHooks):
        msg = f"hooks must be a RenderHooks instance, got {type(value).__name__}"
        raise ConfigError(msg)
    return value


_CONVERTERS: dict[str, Callable[[object, RenderConfig], object]] = {
    "input_dir": _as_path,
    "output_dir": _as_path,
    "public_dir": _as_optional_path,
    "cache_dir": _as_path,
    "build_dir": _as_path,
    "routes": _as_route_source,
    "dynamic_routes": _as_dynamic_routes,
    "port": _as_int("port"),
    "host": lambda value, _base: str(value),
    "server_timeout": _as_int("server_timeout"),
    "browser": _as_browser,
    "wait_for": _as_wait_for,
    "file_naming": _as_file_naming,
    "custom_naming": _as_custom_naming,
    "minify_html": _as_bool,
    "inject_meta": _as_meta,
    "build_command": lambda value, _base: str(value),
    "skip_build": _as_bool,
    "parallel": _as_int("parallel"),
    "retries": _as_int("retries"),
    "cache": _as_bool,
    "sitemap": _as_sitemap,
    "robots": _as_robots,
    "hooks": _as_hooks,
}
