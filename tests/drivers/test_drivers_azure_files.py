import io
import os
import time
import unittest
from datetime import datetime, timezone
from unittest.mock import Mock, patch

from azure.core.exceptions import ResourceNotFoundError
from fake_share import FakeDownloader, FakeShare

from cloudfilemgr.config import AzureStorageConfig
from cloudfilemgr.drivers import azure_files
from cloudfilemgr.drivers.azure_files import AzureFileStorage
from cloudfilemgr.drivers.base import UPLOAD_DATETIME_KEY, UPLOAD_SIZE_KEY, UPLOAD_UID_KEY
from cloudfilemgr.errors import InvalidArgumentError, NotFoundError, UnsupportedOperationError
from cloudfilemgr.models import FileUploadMetaData
from cloudfilemgr.util.time import to_ticks

UPLOADED = datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)


def _meta(relative_path: str, size: int, *, content_type: str = "image/jpeg") -> FileUploadMetaData:
    return FileUploadMetaData(
        upload_uid="uid-1",
        file_name=relative_path.split("/")[-1],
        relative_path=relative_path,
        content_type=content_type,
        chunk_index=0,
        total_chunks=1,
        total_file_size=size,
    )


class TestAzureFileStorageInit(unittest.TestCase):
    @patch("cloudfilemgr.drivers.azure_files.ShareClient")
    def test_creates_share_from_config(self, share_cls: Mock) -> None:
        share = Mock()
        share_cls.from_connection_string.return_value = share

        AzureFileStorage(AzureStorageConfig("UseDevelopmentStorage=true", "files"))

        share_cls.from_connection_string.assert_called_once_with(
            conn_str="UseDevelopmentStorage=true",
            share_name="files",
        )
        share.create_share.assert_called_once_with()

    @patch("cloudfilemgr.drivers.azure_files.ShareClient")
    def test_existing_share_is_reused(self, share_cls: Mock) -> None:
        fake = FakeShare()
        share_cls.from_connection_string.return_value = fake

        storage = AzureFileStorage(AzureStorageConfig("UseDevelopmentStorage=true", "files"))
        storage.create_folder("a")

        self.assertIn("a", fake.dirs)


class TestAzureFolders(unittest.TestCase):
    def setUp(self) -> None:
        self.share = FakeShare()
        self.storage = AzureFileStorage.from_share_client(self.share)

    def test_create_folder_creates_every_ancestor(self) -> None:
        self.storage.create_folder("/a/b/c")

        self.assertIn("a", self.share.dirs)
        self.assertIn("a/b", self.share.dirs)
        self.assertIn("a/b/c", self.share.dirs)
        created = [c[1] for c in self.share.calls if c[0] == "create_directory"]
        self.assertEqual(created, ["a", "a/b", "a/b/c"])

    def test_create_existing_folder_is_noop(self) -> None:
        self.storage.create_folder("a/b")
        before = dict(self.share.dirs)

        self.storage.create_folder("/a/b/")

        self.assertEqual(self.share.dirs, before)

    def test_create_folder_with_empty_path_does_nothing(self) -> None:
        self.storage.create_folder("/")
        self.assertEqual(list(self.share.dirs), [""])

    def test_delete_folder_removes_tree(self) -> None:
        self.share.add_file("hello/sub1/one.txt", b"1")
        self.share.add_file("hello/sub2/sub3/two.txt", b"22")
        self.share.add_file("hello/three.txt", b"333")
        self.share.add_file("keep.txt", b"k")

        deleted = self.storage.delete_folder("/hello")

        # 3 files + hello, sub1, sub2, sub3
        self.assertEqual(deleted, 7)
        self.assertFalse(any(d.startswith("hello") for d in self.share.dirs))
        self.assertFalse(any(f.startswith("hello") for f in self.share.files))
        names = [e.name for e in self.storage.get_objects("")]
        self.assertEqual(names, ["keep.txt"])

    def test_delete_missing_folder_returns_zero(self) -> None:
        self.assertEqual(self.storage.delete_folder("nope"), 0)

    def test_delete_root_is_rejected(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            self.storage.delete_folder("/")


class TestAzureListing(unittest.TestCase):
    def setUp(self) -> None:
        self.share = FakeShare()
        self.storage = AzureFileStorage.from_share_client(self.share)

    def test_listing_empty_and_missing_directories(self) -> None:
        self.storage.create_folder("empty")
        self.assertEqual(self.storage.get_objects("empty"), [])
        self.assertEqual(self.storage.get_objects("missing/dir"), [])

    def test_has_directories_flag(self) -> None:
        self.storage.create_folder("parent/child")
        self.share.add_file("files_only/a.txt", b"a")

        entries = {e.name: e for e in self.storage.get_objects("/")}

        self.assertTrue(entries["parent"].is_directory)
        self.assertTrue(entries["parent"].has_directories)
        self.assertTrue(entries["files_only"].is_directory)
        self.assertFalse(entries["files_only"].has_directories)

    def test_file_entry_fields(self) -> None:
        self.share.add_file("docs/report.pdf", b"12345")

        (entry,) = self.storage.get_objects("/docs/")

        self.assertFalse(entry.is_directory)
        self.assertEqual(entry.name, "report.pdf")
        self.assertEqual(entry.path, "docs/report.pdf")
        self.assertEqual(entry.extension, ".pdf")
        self.assertEqual(entry.size, 5)
        self.assertEqual(entry.modified_utc, self.share.files["docs/report.pdf"]["last_modified"])
        self.assertEqual(entry.created_utc, entry.modified_utc)
        self.assertEqual(entry.created, entry.created_utc)

    def test_file_entry_prefers_upload_tag(self) -> None:
        self.share.add_file(
            "docs/tagged.txt",
            b"x",
            metadata={UPLOAD_DATETIME_KEY: str(to_ticks(UPLOADED))},
        )
        self.share.add_file(
            "docs/garbled.txt",
            b"x",
            metadata={UPLOAD_DATETIME_KEY: "not-a-date"},
        )

        entries = {e.name: e for e in self.storage.get_objects("docs")}

        self.assertEqual(entries["tagged.txt"].created_utc, UPLOADED)
        garbled = entries["garbled.txt"]
        self.assertEqual(garbled.created_utc, garbled.modified_utc)

    def test_out_of_range_tags_fall_back_to_last_modified(self) -> None:
        self.share.add_file(
            "docs/early.txt",
            b"x",
            metadata={UPLOAD_DATETIME_KEY: "0001-01-01T00:00:00+01:00"},
        )
        self.share.add_file(
            "docs/late.txt",
            b"x",
            metadata={UPLOAD_DATETIME_KEY: "3155378975999999999"},
        )

        early = self.storage.get_blob("docs/early.txt")
        self.assertEqual(early.created_utc, early.modified_utc)
        late = self.storage.get_file_metadata("docs/late.txt")
        self.assertEqual(late.upload_date_time, to_ticks(late.last_modified))

    @unittest.skipUnless(hasattr(time, "tzset"), "time.tzset is not available")
    def test_listing_with_max_tick_tag_ahead_of_utc(self) -> None:
        previous = os.environ.get("TZ")

        def restore() -> None:
            if previous is None:
                os.environ.pop("TZ", None)
            else:
                os.environ["TZ"] = previous
            time.tzset()

        self.addCleanup(restore)
        os.environ["TZ"] = "Asia/Tokyo"
        time.tzset()
        self.share.add_file(
            "a/late.txt",
            b"x",
            metadata={UPLOAD_DATETIME_KEY: "3155378975999999999"},
        )
        self.share.add_file("a/plain.txt", b"y")

        entries = {e.name: e for e in self.storage.get_objects("a")}

        self.assertEqual(set(entries), {"late.txt", "plain.txt"})
        self.assertEqual(entries["late.txt"].created_utc, entries["late.txt"].modified_utc)

    def test_blob_names_walk_directories_first(self) -> None:
        self.share.add_file("root/a.txt", b"a")
        self.share.add_file("root/sub/b.jpg", b"b")
        self.share.add_file("root/sub/deeper/c.txt", b"c")

        names = self.storage.get_blob_names_by_path("/root")

        self.assertEqual(names, ["root/sub/deeper/c.txt", "root/sub/b.jpg", "root/a.txt"])

    def test_blob_names_filter_and_missing(self) -> None:
        self.share.add_file("root/a.txt", b"a")
        self.share.add_file("root/sub/b.JPG", b"b")

        self.assertEqual(self.storage.get_blob_names_by_path("root", filter=["jpg"]), ["root/sub/b.JPG"])
        self.assertEqual(self.storage.get_blob_names_by_path("missing"), [])

    def test_blob_names_from_root(self) -> None:
        self.share.add_file("x/1.txt")
        self.share.add_file("2.txt")

        self.assertEqual(self.storage.get_blob_names_by_path(""), ["x/1.txt", "2.txt"])


class TestAzureFiles(unittest.TestCase):
    def setUp(self) -> None:
        self.share = FakeShare()
        self.storage = AzureFileStorage.from_share_client(self.share)

    def test_append_creates_chain_and_sizes_file(self) -> None:
        data = b"hello world"
        meta = _meta("hello-world-1/sub2/sub3/pic.jpg", len(data))

        self.storage.append_blob(data, meta, UPLOADED)

        for d in ("hello-world-1", "hello-world-1/sub2", "hello-world-1/sub2/sub3"):
            self.assertIn(d, self.share.dirs)
        blob = self.storage.get_blob(meta.relative_path)
        self.assertIsNotNone(blob)
        self.assertEqual(blob.size, meta.total_file_size)
        record = self.share.files["hello-world-1/sub2/sub3/pic.jpg"]
        self.assertEqual(bytes(record["data"]), data)
        self.assertEqual(record["content_type"], "image/jpeg")
        self.assertEqual(record["metadata"], {})

    def test_append_uses_final_segment_of_file_name(self) -> None:
        meta = FileUploadMetaData(
            upload_uid="uid-1",
            file_name="nested/pic.jpg",
            relative_path="d/pic.jpg",
            total_file_size=3,
        )

        self.storage.append_blob(b"abc", meta, UPLOADED)

        self.assertEqual(bytes(self.share.files["d/pic.jpg"]["data"]), b"abc")
        self.assertNotIn("d/nested", self.share.dirs)

    def test_append_splits_large_payload_into_ranges(self) -> None:
        with patch.object(azure_files, "MAX_RANGE_SIZE", 4):
            self.storage.append_blob(b"0123456789", _meta("big.bin", 10), UPLOADED)

        ranges = [c[2:] for c in self.share.calls if c[0] == "upload_range"]
        self.assertEqual(ranges, [(0, 4), (4, 4), (8, 2)])
        self.assertEqual(bytes(self.share.files["big.bin"]["data"]), b"0123456789")

    def test_append_empty_payload_only_creates_file(self) -> None:
        self.storage.append_blob(b"", _meta("empty.txt", 0), UPLOADED)

        self.assertIn("empty.txt", self.share.files)
        self.assertFalse([c for c in self.share.calls if c[0] == "upload_range"])

    def test_upload_stream_writes_tags(self) -> None:
        data = b"streamed"
        meta = _meta("/up/load/file.txt", len(data), content_type="")

        result = self.storage.upload_stream(io.BytesIO(data), meta, UPLOADED)

        self.assertTrue(result)
        record = self.share.files["up/load/file.txt"]
        self.assertEqual(bytes(record["data"]), data)
        self.assertEqual(record["content_type"], "text/plain")
        self.assertEqual(
            record["metadata"],
            {
                UPLOAD_UID_KEY: "uid-1",
                UPLOAD_SIZE_KEY: str(len(data)),
                UPLOAD_DATETIME_KEY: str(to_ticks(UPLOADED)),
            },
        )

    def test_file_metadata_prefers_tag_then_native(self) -> None:
        self.storage.upload_stream(io.BytesIO(b"abc"), _meta("m/tagged.txt", 3), UPLOADED)
        self.share.add_file("m/plain.txt", b"abcd", content_type="text/plain")

        tagged = self.storage.get_file_metadata("m/tagged.txt")
        plain = self.storage.get_file_metadata("/m/plain.txt")

        self.assertEqual(tagged.upload_date_time, to_ticks(UPLOADED))
        self.assertEqual(tagged.uploaded, UPLOADED)
        self.assertNotEqual(tagged.last_modified, UPLOADED)
        self.assertEqual(plain.upload_date_time, to_ticks(plain.last_modified))
        self.assertEqual(plain.content_length, 4)
        self.assertEqual(plain.content_type, "text/plain")
        self.assertEqual(plain.file_name, "plain.txt")
        self.assertTrue(plain.etag)

    def test_missing_files_return_none(self) -> None:
        self.storage.create_folder("d")

        self.assertIsNone(self.storage.get_blob("nodir/file.txt"))
        self.assertIsNone(self.storage.get_blob("d/file.txt"))
        self.assertIsNone(self.storage.get_blob(""))
        self.assertIsNone(self.storage.get_file_metadata("nodir/file.txt"))
        self.assertIsNone(self.storage.get_file_metadata("d/"))

    def test_blob_exists(self) -> None:
        self.share.add_file("d/file.txt", b"x")

        self.assertTrue(self.storage.blob_exists("/d/file.txt"))
        self.assertFalse(self.storage.blob_exists("d/other.txt"))
        self.assertFalse(self.storage.blob_exists("nodir/file.txt"))

    def test_delete_if_exists(self) -> None:
        self.share.add_file("d/file.txt", b"x")

        self.storage.delete_if_exists("nodir/file.txt")
        self.storage.delete_if_exists("d/missing.txt")
        self.storage.delete_if_exists("d/")
        self.assertIn("d/file.txt", self.share.files)
        self.assertIn("d", self.share.dirs)

        self.storage.delete_if_exists("d/file.txt")
        self.assertNotIn("d/file.txt", self.share.files)

    def test_get_stream(self) -> None:
        self.share.add_file("d/file.txt", b"payload")

        self.assertEqual(self.storage.get_stream("/d/file.txt").read(), b"payload")
        with self.assertRaises(NotFoundError):
            self.storage.get_stream("nodir/file.txt")
        with self.assertRaises(NotFoundError):
            self.storage.get_stream("d/missing.txt")

    def test_get_stream_reads_chunks_lazily(self) -> None:
        self.share.add_file("d/file.txt", b"0123456789")

        with patch.object(FakeDownloader, "readall", side_effect=AssertionError("readall")):
            stream = self.storage.get_stream("d/file.txt")
            self.assertEqual(stream.read(2), b"01")
            self.assertEqual(stream.read(), b"23456789")
            self.assertEqual(stream.read(), b"")

    def test_copy_blob(self) -> None:
        self.share.add_file("src/dir/pic.jpg", b"0123456789", content_type="image/jpeg")
        self.share.add_file("dst/pic.jpg", b"old")

        source = self.storage.get_blob("src/dir/pic.jpg")
        self.storage.copy_blob("/src/dir/pic.jpg", "/dst/pic.jpg")
        dest = self.storage.get_blob("dst/pic.jpg")

        self.assertIsNotNone(dest)
        self.assertEqual(dest.name, source.name)
        self.assertEqual(dest.size, source.size)
        self.assertEqual(bytes(self.share.files["dst/pic.jpg"]["data"]), b"0123456789")
        self.assertEqual(self.share.files["dst/pic.jpg"]["content_type"], "image/jpeg")
        self.assertIn("src/dir/pic.jpg", self.share.files)

    def test_copy_blob_creates_destination_chain(self) -> None:
        self.share.add_file("src/a.txt", b"a")

        self.storage.copy_blob("src/a.txt", "new/chain/b.txt")

        self.assertIn("new/chain", self.share.dirs)
        self.assertEqual(bytes(self.share.files["new/chain/b.txt"]["data"]), b"a")

    def test_copy_missing_source_raises_not_found(self) -> None:
        self.storage.create_folder("src")

        with self.assertRaises(NotFoundError):
            self.storage.copy_blob("nodir/a.txt", "dst/a.txt")
        with self.assertRaises(NotFoundError):
            self.storage.copy_blob("src/a.txt", "dst/a.txt")

    def test_copy_onto_itself_keeps_content(self) -> None:
        self.share.add_file("a/f.txt", b"hello")

        self.storage.copy_blob("a/f.txt", "/a/f.txt")
        self.storage.copy_blob("a/f.txt", "a/")

        self.assertEqual(bytes(self.share.files["a/f.txt"]["data"]), b"hello")
        self.assertFalse([c for c in self.share.calls if c[0] in ("delete_file", "create_file")])

    def test_copy_into_directory_keeps_source_name(self) -> None:
        self.share.add_file("src/a.txt", b"a")

        self.storage.copy_blob("src/a.txt", "dst/")

        self.assertEqual(bytes(self.share.files["dst/a.txt"]["data"]), b"a")
        self.assertNotIn("a.txt", self.share.files)

    def test_rename_within_directory(self) -> None:
        self.share.add_file("d/old.txt", b"x")

        self.storage.rename("/d/old.txt", "new.txt")

        self.assertNotIn("d/old.txt", self.share.files)
        self.assertIn("d/new.txt", self.share.files)

    def test_rename_missing_source_raises_store_error(self) -> None:
        self.storage.create_folder("d")

        with self.assertRaises(ResourceNotFoundError):
            self.storage.rename("d/missing.txt", "new.txt")

    def test_rename_rejects_paths(self) -> None:
        self.share.add_file("d/old.txt", b"x")

        with self.assertRaises(InvalidArgumentError):
            self.storage.rename("d/old.txt", "other/new.txt")
        with self.assertRaises(InvalidArgumentError):
            self.storage.rename("d/old.txt", "")

    def test_inventory_is_not_implemented(self) -> None:
        with self.assertRaises(UnsupportedOperationError):
            self.storage.get_inventory()
        with self.assertRaises(NotImplementedError):
            self.storage.get_inventory()


if __name__ == "__main__":
    unittest.main()
