"""Route classification table.

Every request path maps to exactly one ``RouteClass``. Entries are either
exact (cover only their own path) or subtree (cover their path and every
path nested beneath it, segment-wise). When several entries match, the
longest one wins; paths no entry covers are ``PROTECTED``.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from versalles.common.exceptions import ConfigurationError


class RouteClass(str, Enum):
    PUBLIC = "public"
    AUTH_ONLY = "auth-only"
    PROTECTED = "protected"


@dataclass(frozen=True)
class RouteEntry:
    path: str
    route_class: RouteClass
    subtree: bool = True


def public(path: str, subtree: bool = True) -> RouteEntry:
    return RouteEntry(path, RouteClass.PUBLIC, subtree)


def auth_only(path: str, subtree: bool = False) -> RouteEntry:
    return RouteEntry(path, RouteClass.AUTH_ONLY, subtree)


DEFAULT_ROUTES: tuple[RouteEntry, ...] = (
    public("/", subtree=False),
    public("/health", subtree=False),
    public("/about"),
    public("/terms"),
    public("/privacy"),
    public("/faq"),
    public("/ogl"),
    public("/updates"),
    public("/library"),
    public("/store"),
    public("/api/auth/session"),
    # Account creation only; /api/users/me stays protected.
    public("/api/users", subtree=False),
    auth_only("/login"),
    auth_only("/login/register"),
    auth_only("/register"),
)

# Never seen by the guard at all: static assets and provider webhooks.
GUARD_EXEMPT_PREFIXES: tuple[str, ...] = (
    "/static",
    "/img",
    "/favicon.ico",
    "/api/webhooks",
)

_SLASHES = re.compile(r"/+")


def normalize_path(path: str) -> str:
    """Collapse repeated slashes and drop the trailing one ('' -> '/')."""
    path = path.split("?", 1)[0].split("#", 1)[0]
    path = _SLASHES.sub("/", "/" + path.strip())
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def _ancestors(path: str) -> Iterable[str]:
    """Yield ``path`` and each parent path, longest first, ending at '/'."""
    while True:
        yield path
        if path == "/":
            return
        path = path.rsplit("/", 1)[0] or "/"


def is_exempt(path: str, prefixes: Iterable[str] = GUARD_EXEMPT_PREFIXES) -> bool:
    path = normalize_path(path)
    return any(path == p or path.startswith(p + "/") for p in prefixes)


class RouteTable:
    """Deterministic longest-match classification over a fixed entry list."""

    def __init__(self, entries: Iterable[RouteEntry]):
        self._exact: dict[str, RouteClass] = {}
        self._subtree: dict[str, RouteClass] = {}
        seen: set[str] = set()
        for entry in entries:
            path = normalize_path(entry.path)
            if path in seen:
                raise ConfigurationError(f"Duplicate route table entry: {path}")
            seen.add(path)
            target = self._subtree if entry.subtree else self._exact
            target[path] = RouteClass(entry.route_class)

    @classmethod
    def default(cls) -> "RouteTable":
        return cls(DEFAULT_ROUTES)

    def classify(self, path: str) -> RouteClass:
        path = normalize_path(path)
        if path in self._exact:
            return self._exact[path]
        for candidate in _ancestors(path):
            if candidate in self._subtree:
                return self._subtree[candidate]
        return RouteClass.PROTECTED

    def entries(self) -> list[RouteEntry]:
        rows = [RouteEntry(p, c, subtree=False) for p, c in self._exact.items()]
        rows += [RouteEntry(p, c, subtree=True) for p, c in self._subtree.items()]
        return sorted(rows, key=lambda e: e.path)
