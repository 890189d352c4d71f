"""Tests for daybook.journal.migration."""

import json

import pytest

from daybook.core.exceptions import MigrationFailure, StorageUnavailable
from daybook.core.storage import MemoryStorage
from daybook.journal.migration import LegacyFileStore, LegacyMigrator, LegacyStore
from daybook.journal.models import JournalEntry
from daybook.journal.store import EntryStore


class DictLegacyStore:
    """In-memory stand-in for the legacy source."""

    def __init__(self, data=None, fail_read=False):
        self.data = data
        self.fail_read = fail_read
        self.cleared = False

    async def read(self):
        if self.fail_read:
            raise OSError("disk gone")
        return self.data

    async def clear(self):
        self.cleared = True
        self.data = None


class FailingBackend(MemoryStorage):
    """Accepts the first ``allowed`` writes, then fails."""

    def __init__(self, allowed: int):
        super().__init__()
        self.allowed = allowed

    async def save(self, key, data, content_type="application/octet-stream", compress=True):
        if self.allowed <= 0:
            raise StorageUnavailable("write failed")
        self.allowed -= 1
        return await super().save(key, data, content_type, compress)


LEGACY = {
    "2023-12-30": {"text": "old format", "mood": "calm"},
    "2023-12-31": {"text": "no mood here"},
}


class TestLegacyMigrator:
    def test_dict_store_satisfies_protocol(self):
        assert isinstance(DictLegacyStore(), LegacyStore)
        assert isinstance(LegacyFileStore("x.json"), LegacyStore)

    @pytest.mark.asyncio
    async def test_migrates_and_clears(self, memory_store):
        legacy = DictLegacyStore(dict(LEGACY))
        assert await LegacyMigrator(memory_store, legacy).migrate()

        assert await memory_store.get_all_entries() == {
            "2023-12-30": JournalEntry(text="old format", mood="calm", images=[]),
            "2023-12-31": JournalEntry(text="no mood here", mood=None, images=[]),
        }
        assert legacy.cleared

    @pytest.mark.asyncio
    async def test_absent_legacy_is_noop(self, memory_store):
        legacy = DictLegacyStore(None)
        assert not await LegacyMigrator(memory_store, legacy).migrate()
        assert not legacy.cleared
        assert not await memory_store.has_entries()

    @pytest.mark.asyncio
    async def test_second_run_is_noop(self, memory_store):
        legacy = DictLegacyStore(dict(LEGACY))
        migrator = LegacyMigrator(memory_store, legacy)
        assert await migrator.migrate()
        await memory_store.save_entry("2023-12-30", JournalEntry(text="edited since"))
        assert not await migrator.migrate()
        assert (await memory_store.get_entry("2023-12-30")).text == "edited since"

    @pytest.mark.asyncio
    async def test_missing_text_becomes_empty(self, memory_store):
        await LegacyMigrator(memory_store, DictLegacyStore({"d": {"mood": "ok"}})).migrate()
        assert await memory_store.get_entry("d") == JournalEntry(text="", mood="ok")

    @pytest.mark.asyncio
    async def test_invalid_shape_writes_nothing(self, memory_store):
        legacy = DictLegacyStore({"good": {"text": "fine"}, "bad": "not an object"})
        assert not await LegacyMigrator(memory_store, legacy).migrate()
        assert not await memory_store.has_entries()
        assert not legacy.cleared

    @pytest.mark.asyncio
    async def test_read_failure_swallowed(self, memory_store):
        assert not await LegacyMigrator(memory_store, DictLegacyStore(fail_read=True)).migrate()

    @pytest.mark.asyncio
    async def test_write_failure_keeps_legacy_for_retry(self):
        store = EntryStore(FailingBackend(allowed=1))
        legacy = DictLegacyStore(dict(LEGACY))

        assert not await LegacyMigrator(store, legacy).migrate()
        assert not legacy.cleared
        assert legacy.data == LEGACY

        store.backend.allowed = 10
        assert await LegacyMigrator(store, legacy).migrate()
        assert await store.count() == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_swallowed(self, memory_store):
        class Exploding:
            async def read(self):
                raise RuntimeError("boom")

            async def clear(self):
                pass

        assert not await LegacyMigrator(memory_store, Exploding()).migrate()


class TestLegacyFileStore:
    @pytest.mark.asyncio
    async def test_read_and_clear(self, tmp_path):
        path = tmp_path / "journal_entries.json"
        path.write_text(json.dumps(LEGACY))
        legacy = LegacyFileStore(path)

        assert await legacy.read() == LEGACY
        await legacy.clear()
        assert not path.exists()
        await legacy.clear()  # already gone

    @pytest.mark.asyncio
    async def test_missing_or_blank_file(self, tmp_path):
        assert await LegacyFileStore(tmp_path / "missing.json").read() is None
        blank = tmp_path / "blank.json"
        blank.write_text("  \n")
        assert await LegacyFileStore(blank).read() is None

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path):
        path = tmp_path / "journal_entries.json"
        path.write_text("{broken")
        with pytest.raises(MigrationFailure, match="not valid JSON"):
            await LegacyFileStore(path).read()

    @pytest.mark.asyncio
    async def test_non_object(self, tmp_path):
        path = tmp_path / "journal_entries.json"
        path.write_text("[1, 2]")
        with pytest.raises(MigrationFailure, match="object"):
            await LegacyFileStore(path).read()

    @pytest.mark.asyncio
    async def test_corrupt_file_left_in_place(self, tmp_path, memory_store):
        path = tmp_path / "journal_entries.json"
        path.write_text("{broken")
        assert not await LegacyMigrator(memory_store, LegacyFileStore(path)).migrate()
        assert path.read_text() == "{broken"

    @pytest.mark.asyncio
    async def test_end_to_end(self, tmp_path, memory_store):
        path = tmp_path / "journal_entries.json"
        path.write_text(json.dumps(LEGACY))
        assert await LegacyMigrator(memory_store, LegacyFileStore(path)).migrate()
        assert await memory_store.count() == 2
        assert not path.exists()
