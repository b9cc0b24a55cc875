import gzip
import hashlib
import logging
import os
import pickle
import sys
import time
from pathlib import Path
from typing import Dict, Iterable, Optional, TextIO

import psutil

from wikidict_linker.registry import knowledge_bases

logger = logging.getLogger(__name__)

# Log a progress line every this many loaded entries
PROGRESS_INTERVAL = 1_000_000


class DictionaryFormatError(ValueError):
    """A dictionary row could not be parsed. Loading must not continue."""

    def __init__(self, path: str, line_number: int, problem: str):
        self.path = path
        self.line_number = line_number
        super().__init__(f"{path}:{line_number}: {problem}")


def _memory_in_use_mb() -> int:
    return psutil.Process().memory_info().rss // (1024 * 1024)


def _open_text(path: str) -> TextIO:
    if path.endswith(".gz"):
        return gzip.open(path, "rt", encoding="utf-8")
    return Path(path).open(encoding="utf-8")


def parse_rows(lines: Iterable[str], source: str, score_threshold: float = 0.0) -> Dict[str, str]:
    """
    Build the surface form -> link table from raw TSV lines.

    Each line holds ``surface form<TAB>link<TAB>score``. Lines starting with a
    tab continue a multi-line value of the previous row and are dropped.
    With a positive ``score_threshold`` rows scoring below it are skipped;
    otherwise the score column is never parsed.

    Args:
        lines: Raw lines, with or without trailing newlines
        source: Name used in error messages (usually the file path)
        score_threshold: Minimum score to keep a row; 0.0 keeps everything

    Raises:
        DictionaryFormatError: On a row without exactly three fields, or a
            non-numeric score while thresholding.
    """
    entries: Dict[str, str] = {}
    loaded = 0
    start_time = time.monotonic()

    for line_number, line in enumerate(lines, 1):
        line = line.rstrip("\r\n")
        if line.startswith("\t"):
            continue

        fields = line.split("\t")
        if len(fields) != 3:
            raise DictionaryFormatError(
                source,
                line_number,
                f"expected 3 tab-separated fields (surface form, link, score), found {len(fields)}",
            )
        surface_form, link, score = fields

        if score_threshold > 0.0:
            try:
                value = float(score)
            except ValueError:
                raise DictionaryFormatError(
                    source, line_number, f"score {score!r} is not a number"
                ) from None
            if value < score_threshold:
                continue

        if loaded % PROGRESS_INTERVAL == 0:
            logger.info(
                f"Loaded {loaded:,} entries from Wikidict "
                f"[{_memory_in_use_mb()}MB memory used; {time.monotonic() - start_time:.1f}s elapsed]"
            )

        # Most entities have many surface forms; share one copy of each link
        entries[surface_form] = sys.intern(link)
        loaded += 1

    return entries


@knowledge_bases.register("wikidict")
class WikiDictionary:
    """
    Surface form -> Wikipedia link dictionary loaded from a TSV file.

    The table is read once and never modified afterwards, so a single
    instance can be shared by any number of linker threads without locking.
    Files ending in ``.gz`` are decompressed on the fly.

    When ``cache_dir`` is given, the parsed table is pickled there and reused
    while the source file (path, mtime, size) and threshold are unchanged.
    """

    def __init__(
        self,
        path: str,
        score_threshold: float = 0.0,
        cache_dir: Optional[str] = None,
    ):
        self.source_path = str(path)
        self.score_threshold = score_threshold
        self._entries: Dict[str, str] = {}

        if cache_dir and self._load_from_cache(cache_dir):
            return

        start_time = time.monotonic()
        logger.info(f"Reading Wikidict from {self.source_path}")
        with _open_text(self.source_path) as f:
            self._entries = parse_rows(f, self.source_path, score_threshold)
        logger.info(
            f"Done reading Wikidict ({len(self._entries):,} links read; "
            f"{time.monotonic() - start_time:.1f}s elapsed)"
        )

        if cache_dir:
            self._save_to_cache(cache_dir)

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[str],
        score_threshold: float = 0.0,
        source: str = "<memory>",
    ) -> "WikiDictionary":
        """Build a dictionary from TSV lines already in memory."""
        instance = cls.__new__(cls)
        instance.source_path = source
        instance.score_threshold = score_threshold
        instance._entries = parse_rows(rows, source, score_threshold)
        return instance

    @property
    def identity_hash(self) -> str:
        """Hash of path + mtime + size + threshold, for cache invalidation."""
        stat = os.stat(self.source_path)
        raw = f"wikidict:{self.source_path}:{stat.st_mtime}:{stat.st_size}:{self.score_threshold}".encode()
        return hashlib.sha256(raw).hexdigest()

    def _cache_path(self, cache_dir: str) -> Path:
        dict_dir = Path(cache_dir) / "wikidict"
        dict_dir.mkdir(parents=True, exist_ok=True)
        return dict_dir / f"{self.identity_hash}.pkl"

    def _load_from_cache(self, cache_dir: str) -> bool:
        """Try to load the parsed table from cache. Returns True on success."""
        try:
            cache_file = self._cache_path(cache_dir)
            if not cache_file.exists():
                return False
            with cache_file.open("rb") as f:
                self._entries = pickle.load(f)
            logger.info(f"Loaded {len(self._entries):,} links from cache ({cache_file.name})")
            return True
        except Exception:
            logger.warning("Wikidict cache load failed, will rebuild from TSV", exc_info=True)
            return False

    def _save_to_cache(self, cache_dir: str) -> None:
        try:
            cache_file = self._cache_path(cache_dir)
            with cache_file.open("wb") as f:
                pickle.dump(self._entries, f, protocol=pickle.HIGHEST_PROTOCOL)
            logger.info(f"Saved Wikidict cache ({cache_file.name})")
        except OSError:
            logger.warning("Failed to save Wikidict cache", exc_info=True)

    def lookup(self, surface_form: str) -> Optional[str]:
        return self._entries.get(surface_form)

    def __contains__(self, surface_form: object) -> bool:
        return surface_form in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"WikiDictionary({self.source_path!r}, entries={len(self._entries)})"
