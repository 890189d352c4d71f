"""Tests for daybook.journal.store."""

import pytest

from daybook.core.exceptions import StorageUnavailable
from daybook.core.storage import LocalStorage, MemoryStorage, decompress_bytes
from daybook.journal.models import Attachment, JournalEntry
from daybook.journal.store import EntryStore


@pytest.fixture(params=["local", "memory"])
def store(request, tmp_path):
    if request.param == "local":
        return EntryStore(LocalStorage(base_path=tmp_path / "data"))
    return EntryStore(MemoryStorage())


class TestEntryStore:
    @pytest.mark.asyncio
    async def test_empty_store(self, store):
        assert not await store.has_entries()
        assert await store.get_all_entries() == {}
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_save_and_read_back(self, store, png_bytes):
        entry = JournalEntry(text="first day", mood="happy", images=[Attachment(png_bytes, "image/png")])
        await store.save_entry("2024-01-01", entry)

        assert await store.has_entries()
        assert await store.get_entry("2024-01-01") == entry
        assert await store.get_all_entries() == {"2024-01-01": entry}

    @pytest.mark.asyncio
    async def test_save_replaces_in_full(self, store, png_bytes):
        await store.save_entry("2024-01-01", JournalEntry(text="a", mood="calm", images=[png_bytes]))
        await store.save_entry("2024-01-01", JournalEntry(text="b"))

        entry = await store.get_entry("2024-01-01")
        assert entry == JournalEntry(text="b", mood=None, images=[])
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_get_all_is_ordered(self, store):
        for date_id in ["2024-01-03", "2024-01-01", "2024-01-02"]:
            await store.save_entry(date_id, JournalEntry(text=date_id))
        assert list(await store.get_all_entries()) == ["2024-01-01", "2024-01-02", "2024-01-03"]

    @pytest.mark.asyncio
    async def test_get_missing_entry(self, store):
        assert await store.get_entry("2030-01-01") is None

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.save_entry("2024-01-01", JournalEntry(text="x"))
        await store.save_entry("2024-01-02", JournalEntry(text="y"))
        await store.delete_entry("2024-01-01")

        entries = await store.get_all_entries()
        assert "2024-01-01" not in entries
        assert "2024-01-02" in entries

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, store):
        await store.delete_entry("never-existed")
        assert not await store.has_entries()

    @pytest.mark.asyncio
    async def test_unicode_text(self, store):
        entry = JournalEntry(text="Regen 🌧 und Grüße", mood="😌")
        await store.save_entry("2024-05-05", entry)
        assert await store.get_entry("2024-05-05") == entry

    @pytest.mark.asyncio
    async def test_rejects_non_entry(self, store):
        with pytest.raises(TypeError):
            await store.save_entry("2024-01-01", {"text": "dict"})


class TestRecords:
    @pytest.mark.asyncio
    async def test_records_compressed_by_default(self):
        backend = MemoryStorage()
        await EntryStore(backend).save_entry("d", JournalEntry(text="x" * 200))
        assert (await backend.load("d"))[:2] == b"\x1f\x8b"

    @pytest.mark.asyncio
    async def test_uncompressed_records(self):
        backend = MemoryStorage()
        await EntryStore(backend, compress=False).save_entry("d", JournalEntry(text="x"))
        raw = await backend.load("d")
        assert raw.startswith(b"{")
        # Readable regardless of the compress setting
        assert await EntryStore(backend).get_entry("d") == JournalEntry(text="x")

    @pytest.mark.asyncio
    async def test_corrupt_record_raises_storage_error(self):
        backend = MemoryStorage()
        await backend.save("bad", b"\x1f\x8bnot gzip", compress=False)
        with pytest.raises(StorageUnavailable, match="bad"):
            await EntryStore(backend).get_entry("bad")

    @pytest.mark.asyncio
    async def test_malformed_record_raises_storage_error(self):
        backend = MemoryStorage()
        await backend.save("bad", b'{"mood": "no text"}', compress=False)
        with pytest.raises(StorageUnavailable, match="Malformed"):
            await EntryStore(backend).get_all_entries()

    @pytest.mark.asyncio
    async def test_backend_failure_propagates(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = EntryStore(LocalStorage(base_path=blocker))
        with pytest.raises(StorageUnavailable):
            await store.save_entry("2024-01-01", JournalEntry(text="x"))

    @pytest.mark.asyncio
    async def test_local_persistence(self, tmp_path, png_bytes):
        entry = JournalEntry(text="kept", images=[png_bytes])
        await EntryStore(LocalStorage(base_path=tmp_path)).save_entry("2024-01-01", entry)
        reopened = EntryStore(LocalStorage(base_path=tmp_path))
        assert await reopened.get_all_entries() == {"2024-01-01": entry}
        raw = await reopened.backend.load("2024-01-01")
        assert b"data:image/png;base64," in decompress_bytes(raw)
