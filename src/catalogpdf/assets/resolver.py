"""
Case-insensitive image asset resolution.

Catalog data references image files with unreliable letter casing
(``\\\\webserver\\storecards\\1d31a.JPG`` while the host serves ``1D31A.jpg``).
The resolver strips the path, probes the asset host for the name as given and
then for case variants, and memoizes the answer per (item, filename).
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import threading
from collections.abc import Awaitable, Callable, Iterator
from urllib.parse import quote

import aiohttp

from catalogpdf.utils.async_utils import dual
from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.assets.resolver")

DEFAULT_PATH_PREFIX = "\\\\webserver\\storecards\\"
DEFAULT_MAX_EXHAUSTIVE_LETTERS = 12

# May return an awaitable when called inside a running loop
ExistenceProbe = Callable[[str], "bool | Awaitable[bool]"]


def extract_filename(raw: str, path_prefix: str = DEFAULT_PATH_PREFIX) -> str:
    """Strip the known prefix, else keep what follows the last path separator."""
    raw = raw.strip()
    if path_prefix and raw.startswith(path_prefix):
        return raw[len(path_prefix) :]
    cut = max(raw.rfind("\\"), raw.rfind("/"))
    return raw[cut + 1 :] if cut >= 0 else raw


def bounded_case_variants(filename: str) -> list[str]:
    """
    A small fixed set of casings, original first, without duplicates.

    original, lower, upper, Title stem + lower ext, Title stem + upper ext,
    lower stem + upper ext, upper stem + lower ext.
    """
    stem, dot, ext = filename.rpartition(".")
    if not dot:
        stem, ext = filename, ""
    candidates = [
        filename,
        filename.lower(),
        filename.upper(),
    ]
    if dot:
        candidates += [
            f"{stem[:1].upper()}{stem[1:].lower()}.{ext.lower()}",
            f"{stem[:1].upper()}{stem[1:].lower()}.{ext.upper()}",
            f"{stem.lower()}.{ext.upper()}",
            f"{stem.upper()}.{ext.lower()}",
        ]
    else:
        candidates.append(f"{filename[:1].upper()}{filename[1:].lower()}")
    return list(dict.fromkeys(candidates))


def exhaustive_case_variants(filename: str) -> Iterator[str]:
    """
    Every upper/lower combination of the letters in ``filename``.

    Yields 2**L names for L letters; callers must bound L.
    """
    positions = [i for i, ch in enumerate(filename) if ch.lower() != ch.upper()]
    chars = list(filename.lower())
    for mask in itertools.product((False, True), repeat=len(positions)):
        for pos, upper in zip(positions, mask):
            chars[pos] = filename[pos].upper() if upper else filename[pos].lower()
        yield "".join(chars)


def count_letters(filename: str) -> int:
    return sum(1 for ch in filename if ch.lower() != ch.upper())


class HttpAssetProbe:
    """HEAD-request existence check against the asset host."""

    def __init__(self, timeout: float = 3.0):
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @dual
    async def exists(self, url: str) -> bool:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.head(url, allow_redirects=True) as response:
                    return response.status == 200
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(f"Probe of {url} failed: {e}")
            return False

    def __call__(self, url: str) -> bool | Awaitable[bool]:
        return self.exists(url)


class AssetResolver:
    """
    Resolves image references to URLs on the asset host.

    Once a key is resolved (found or not) the answer is stable for the
    lifetime of the instance and is never probed again.

    Args:
        base_url: URL prefix the filename is appended to
        probe: callable returning True when a URL exists (default: HttpAssetProbe)
        path_prefix: path prefix stripped from raw references
        strategy: "bounded" (default) or "exhaustive"
        max_exhaustive_letters: exhaustive mode falls back to bounded above this
    """

    def __init__(
        self,
        base_url: str,
        probe: ExistenceProbe | None = None,
        path_prefix: str = DEFAULT_PATH_PREFIX,
        strategy: str = "bounded",
        max_exhaustive_letters: int = DEFAULT_MAX_EXHAUSTIVE_LETTERS,
    ):
        if strategy not in ("bounded", "exhaustive"):
            raise ValueError(f"Unknown case-variant strategy '{strategy}'")
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.probe = probe or HttpAssetProbe()
        self.path_prefix = path_prefix
        self.strategy = strategy
        self.max_exhaustive_letters = max_exhaustive_letters
        self._cache: dict[tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def url_for(self, filename: str) -> str:
        return self.base_url + quote(filename)

    @dual
    async def resolve(self, item_key: str, raw: str | None) -> str | None:
        """
        Return a working URL for ``raw``, or the untouched original URL when
        no variant exists. Blank references resolve to None.

        Blocks when called without a running event loop; awaitable inside one.
        """
        if raw is None or not raw.strip():
            return None
        filename = extract_filename(raw, self.path_prefix)
        if not filename:
            return None

        key = (item_key, filename)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {item_key}|{filename}")
            return cached

        resolved = await self._probe_variants(filename)
        if resolved is None:
            logger.warning(f"Image not found for {item_key}: {filename}")
            resolved = self.url_for(filename)

        with self._lock:
            # First writer wins so concurrent callers see one stable answer
            return self._cache.setdefault(key, resolved)

    def _variants(self, filename: str) -> Iterator[str]:
        if self.strategy == "exhaustive":
            if count_letters(filename) <= self.max_exhaustive_letters:
                return exhaustive_case_variants(filename)
            logger.warning(
                f"'{filename}' has more than {self.max_exhaustive_letters} letters, "
                f"using bounded case variants"
            )
        return iter(bounded_case_variants(filename))

    async def _probe_variants(self, filename: str) -> str | None:
        seen = set()
        # The name as given is always tried first
        for candidate in itertools.chain((filename,), self._variants(filename)):
            if candidate in seen:
                continue
            seen.add(candidate)
            url = self.url_for(candidate)
            found = self.probe(url)
            if inspect.isawaitable(found):
                found = await found
            if found:
                logger.debug(f"Resolved {filename} -> {url}")
                return url
        return None

    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)
