"""
Quote Store - write-once persistence for computed quotes.

A stored quote is never recomputed or edited; later display and booking
flows read the same figures back. With a directory configured each quote is
also written as one JSON file.
"""
import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Optional

from ..engine.models import Quote

logger = logging.getLogger(__name__)


class QuoteNotFound(KeyError):
    """No quote was stored under the given id."""

    def __init__(self, quote_id: str):
        super().__init__(quote_id)
        self.quote_id = quote_id
        self.message = f"Quote '{quote_id}' not found"

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        return {"error": "QuoteNotFound", "message": self.message, "field": "quote_id"}


class QuoteStore:
    """Stores quotes by id; save() never overwrites an existing id."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory else None
        self._quotes: dict[str, Quote] = {}
        self._lock = threading.Lock()
        if self.directory:
            self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, quote_id: str) -> Path:
        return self.directory / f"{quote_id}.json"

    def save(self, quote: Quote) -> str:
        """Persist a quote and return its new id."""
        with self._lock:
            quote_id = uuid.uuid4().hex
            while quote_id in self._quotes or (self.directory and self._path(quote_id).exists()):
                quote_id = uuid.uuid4().hex
            if self.directory:
                self._write(quote_id, quote)
            self._quotes[quote_id] = quote
        logger.info("Stored quote %s for %s/%s total=%d", quote_id, quote.kind, quote.ref, quote.total)
        return quote_id

    def _write(self, quote_id: str, quote: Quote):
        path = self._path(quote_id)
        # "x" mode: fail rather than overwrite
        with open(path, 'x', encoding='utf-8') as f:
            try:
                json.dump(quote.to_dict(), f, indent=2, ensure_ascii=False)
            except Exception:
                f.close()
                path.unlink(missing_ok=True)
                logger.error("Failed to write quote %s to %s", quote_id, path)
                raise

    def get(self, quote_id: str) -> Quote:
        """Return the stored quote or raise QuoteNotFound."""
        with self._lock:
            quote = self._quotes.get(quote_id)
        if quote is not None:
            return quote

        if self.directory and _is_valid_id(quote_id):
            path = self._path(quote_id)
            if path.exists():
                with open(path, 'r', encoding='utf-8') as f:
                    quote = Quote.from_dict(json.load(f))
                with self._lock:
                    self._quotes.setdefault(quote_id, quote)
                return quote

        raise QuoteNotFound(quote_id)

    def __contains__(self, quote_id: str) -> bool:
        try:
            self.get(quote_id)
        except QuoteNotFound:
            return False
        return True


def _is_valid_id(quote_id: str) -> bool:
    """Only uuid hex ids map to files, so an id can never escape the directory."""
    return len(quote_id) == 32 and all(c in "0123456789abcdef" for c in quote_id)
