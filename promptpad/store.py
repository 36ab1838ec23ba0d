"""In-memory prompt collection with an explicit save to a JSON key-value file.

Records are kept newest-first. The category catalog only grows through
record changes and imports; nothing here removes a category.
"""

from __future__ import annotations

import datetime
from contextlib import contextmanager
import json
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from pydantic import TypeAdapter

from .codec import DecodeResult, decode_bytes, encode_records, encode_records_bytes, merge_categories
from .config import Settings
from .errors import RecordNotFoundError, StoreError
from .logging_setup import get_logger
from .models import Record, RecordDraft, SortOrder, new_record_id
from .rules import DEFAULT_AUTHOR, DEFAULT_CATEGORY, HEADER_LABELS, INITIAL_CATEGORIES

log = get_logger(__name__)

RECORDS_KEY = "records"
CATEGORIES_KEY = "categories"

_records_adapter = TypeAdapter(List[Record])
_categories_adapter = TypeAdapter(List[str])


def _date_key(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value[:10])
    except ValueError:
        return datetime.date.min


class RecordStore:
    def __init__(
        self,
        records: Optional[Iterable[Record]] = None,
        categories: Optional[Iterable[str]] = None,
        *,
        path: str | Path | None = None,
        default_author: str = DEFAULT_AUTHOR,
        default_category: str = DEFAULT_CATEGORY,
        import_category: str = DEFAULT_CATEGORY,
    ):
        self.records: list[Record] = list(records or [])
        base = INITIAL_CATEGORIES if categories is None else categories
        self.categories: list[str] = merge_categories(base, (r.category for r in self.records))
        self.path = Path(path) if path is not None else None
        self.default_author = default_author
        self.default_category = default_category
        self.import_category = import_category

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecordStore":
        return cls.load(
            settings.store_path,
            initial_categories=settings.initial_categories,
            default_author=settings.default_author,
            default_category=settings.default_category,
            import_category=settings.import_category,
        )

    @classmethod
    def load(
        cls,
        path: str | Path,
        *,
        initial_categories: Iterable[str] = INITIAL_CATEGORIES,
        **kwargs,
    ) -> "RecordStore":
        """Restore a store from ``path``; a missing file gives an empty store.

        Raises:
            StoreError: if the file exists but is not a valid store.
        """
        path = Path(path)
        if not path.exists():
            log.debug("no store at %s; starting empty", path)
            return cls(categories=initial_categories, path=path, **kwargs)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            records = _records_adapter.validate_python(data.get(RECORDS_KEY, []))
            categories = _categories_adapter.validate_python(data.get(CATEGORIES_KEY, list(initial_categories)))
        except (OSError, ValueError, AttributeError) as ex:
            # pydantic ValidationError and JSONDecodeError are ValueErrors
            raise StoreError(f"cannot load store {path}: {ex}") from ex

        log.debug("loaded %d records from %s", len(records), path)
        return cls(records, categories, path=path, **kwargs)

    def save(self) -> None:
        """Write records and categories to the store file.

        Raises:
            StoreError: if there is no path or the file cannot be written.
        """
        if self.path is None:
            raise StoreError("store has no path to save to")

        payload = {
            RECORDS_KEY: [r.model_dump() for r in self.records],
            CATEGORIES_KEY: self.categories,
        }
        try:
            self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as ex:
            raise StoreError(f"cannot save store {self.path}: {ex}") from ex
        log.debug("saved %d records to %s", len(self.records), self.path)

    @contextmanager
    def saving(self) -> Iterator["RecordStore"]:
        """Run a change and save it; on any error the change is undone.

        Raises:
            StoreError: if the save fails. The in-memory state is restored.
        """
        records, categories = list(self.records), list(self.categories)
        try:
            yield self
            self.save()
        except Exception:
            self.records, self.categories = records, categories
            raise

    def _index(self, record_id: str) -> int:
        for i, r in enumerate(self.records):
            if r.id == record_id:
                return i
        raise RecordNotFoundError(record_id)

    def _from_draft(self, draft: RecordDraft, record_id: str) -> Record:
        new_category = draft.new_category.strip()
        category = draft.new_category if new_category else draft.category
        return Record(
            id=record_id,
            title=draft.title,
            content=draft.content,
            notes=draft.notes,
            author=draft.author or self.default_author,
            link=draft.link,
            category=category or self.default_category,
            date=draft.date or datetime.date.today().isoformat(),
        )

    def get(self, record_id: str) -> Record:
        return self.records[self._index(record_id)]

    def add(self, draft: RecordDraft) -> Record:
        record = self._from_draft(draft, new_record_id())
        self.records.insert(0, record)
        self.categories = merge_categories(self.categories, [record.category])
        return record

    def update(self, record_id: str, draft: RecordDraft) -> Record:
        i = self._index(record_id)
        record = self._from_draft(draft, record_id)
        self.records[i] = record
        self.categories = merge_categories(self.categories, [record.category])
        return record

    def remove(self, record_id: str) -> Record:
        return self.records.pop(self._index(record_id))

    def replace_all(self, records: Iterable[Record]) -> None:
        self.records = list(records)
        self.categories = merge_categories(self.categories, (r.category for r in self.records))

    def merge_imported(self, result: DecodeResult) -> None:
        """Put imported records ahead of the existing ones, in file order."""
        self.records = list(result.records) + self.records
        self.categories = merge_categories(self.categories, (r.category for r in result.records))
        log.info("merged %d imported records", len(result.records))

    def import_csv(self, raw: bytes) -> DecodeResult:
        result = decode_bytes(
            raw,
            known_categories=self.categories,
            default_author=self.default_author,
            default_category=self.import_category,
        )
        self.merge_imported(result)
        return result

    def export_csv(self, headers=HEADER_LABELS) -> Optional[str]:
        return encode_records(self.records, headers)

    def export_csv_bytes(self, headers=HEADER_LABELS) -> Optional[bytes]:
        return encode_records_bytes(self.records, headers)

    def query(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        sort: SortOrder = "newest",
    ) -> list[Record]:
        """Filter by text and category, then sort by date.

        ``search`` matches title, content and author, ignoring case.
        ``category=None`` means every category.
        """
        result = list(self.records)
        if search:
            term = search.lower()
            result = [
                r for r in result
                if term in r.title.lower() or term in r.content.lower() or term in r.author.lower()
            ]
        if category is not None:
            result = [r for r in result if r.category == category]
        result.sort(key=lambda r: _date_key(r.date), reverse=(sort == "newest"))
        return result
