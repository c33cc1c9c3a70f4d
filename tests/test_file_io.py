from __future__ import annotations

import tests._path_setup  # noqa: F401

import errno
import os
import stat
import tempfile
import unittest
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

from sysutils import file_io
from sysutils.errors import RequestError, ResourceError
from sysutils.file_io import atomic_write, create_temp_file, remove_path


class CreateTempFileTest(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.root = self._td.name
        self._orig_cwd = os.getcwd()

    def tearDown(self) -> None:
        os.chdir(self._orig_cwd)
        self._td.cleanup()

    def _assert_fresh_private_file(self, path: str) -> None:
        st = os.lstat(path)
        self.assertTrue(stat.S_ISREG(st.st_mode))
        self.assertEqual(st.st_size, 0)
        self.assertTrue(st.st_mode & stat.S_IWUSR)
        self.assertEqual(st.st_mode & 0o077, 0)

    def test_many_calls_yield_distinct_private_files(self) -> None:
        paths = [create_temp_file(self.root) for _ in range(150)]
        self.assertEqual(len(set(paths)), len(paths))
        for path in paths:
            self._assert_fresh_private_file(path)

    def test_name_follows_template(self) -> None:
        path = create_temp_file(self.root)
        name = os.path.basename(path)
        self.assertTrue(name.startswith("tmp_"))
        self.assertEqual(len(name), len("tmp_") + 6)
        self.assertEqual(os.path.dirname(path), self.root)

    def test_trailing_separator_on_directory_not_duplicated(self) -> None:
        path = create_temp_file(self.root + os.sep)
        self.assertNotIn(os.sep + os.sep, path)
        self.assertEqual(os.path.dirname(path), self.root)

    def test_custom_prefix_and_width(self) -> None:
        path = create_temp_file(self.root, prefix="job-", width=16)
        name = os.path.basename(path)
        self.assertTrue(name.startswith("job-"))
        self.assertEqual(len(name), 4 + 16)

    def test_defaults_to_current_directory_at_call_time(self) -> None:
        first = Path(self.root) / "a"
        second = Path(self.root) / "b"
        first.mkdir()
        second.mkdir()
        os.chdir(first)
        p1 = create_temp_file()
        os.chdir(second)
        p2 = create_temp_file()
        self.assertEqual(os.path.realpath(os.path.dirname(p1)), os.path.realpath(first))
        self.assertEqual(os.path.realpath(os.path.dirname(p2)), os.path.realpath(second))

    def test_missing_directory_is_resource_error_and_creates_nothing(self) -> None:
        missing = os.path.join(self.root, "nope")
        with self.assertRaises(ResourceError) as ctx:
            create_temp_file(missing)
        self.assertEqual(ctx.exception.errno, errno.ENOENT)
        self.assertFalse(os.path.exists(missing))
        self.assertEqual(os.listdir(self.root), [])

    def test_rejects_narrow_width_and_bad_prefix(self) -> None:
        with self.assertRaises(RequestError):
            create_temp_file(self.root, width=3)
        with self.assertRaises(RequestError):
            create_temp_file(self.root, prefix="a/b")
        with self.assertRaises(RequestError):
            create_temp_file("")

    def test_collision_draws_a_new_name(self) -> None:
        taken = os.path.join(self.root, "tmp_AAAAAA")
        Path(taken).write_text("occupied", encoding="utf-8")
        names = iter(["tmp_AAAAAA", "tmp_BBBBBB"])
        with patch("sysutils.file_io._random_name", side_effect=lambda prefix, width: next(names)):
            path = create_temp_file(self.root)
        self.assertEqual(path, os.path.join(self.root, "tmp_BBBBBB"))
        self.assertEqual(Path(taken).read_text(encoding="utf-8"), "occupied")

    def test_collisions_exhausted(self) -> None:
        Path(self.root, "tmp_AAAAAA").touch()
        with patch("sysutils.file_io._random_name", return_value="tmp_AAAAAA"), patch.object(
            file_io, "TMP_MAX", 5
        ):
            with self.assertRaises(ResourceError) as ctx:
                create_temp_file(self.root)
        self.assertEqual(ctx.exception.errno, errno.EEXIST)

    @unittest.skipUnless(hasattr(os, "O_NOFOLLOW") and hasattr(os, "symlink"), "needs O_NOFOLLOW")
    def test_does_not_follow_planted_symlink(self) -> None:
        target = os.path.join(self.root, "target")
        os.symlink(target, os.path.join(self.root, "tmp_AAAAAA"))
        names = iter(["tmp_AAAAAA", "tmp_BBBBBB"])
        with patch("sysutils.file_io._random_name", side_effect=lambda prefix, width: next(names)):
            path = create_temp_file(self.root)
        self.assertEqual(os.path.basename(path), "tmp_BBBBBB")
        self.assertFalse(os.path.exists(target))

    def test_close_failure_is_logged_and_path_returned(self) -> None:
        real_close = os.close

        def _failing_close(fd: int) -> None:
            real_close(fd)
            raise OSError(errno.EIO, "Input/output error")

        with patch("sysutils.file_io.os.close", side_effect=_failing_close), self.assertLogs(
            "sysutils.file_io", level="WARNING"
        ) as logs:
            path = create_temp_file(self.root)
        self.assertTrue(os.path.exists(path))
        self.assertIn("close failed", logs.output[0])

    def test_umask_left_untouched(self) -> None:
        previous = os.umask(0o027)
        try:
            create_temp_file(self.root)
            current = os.umask(previous)
        except BaseException:
            os.umask(previous)
            raise
        self.assertEqual(current, 0o027)

    def test_concurrent_calls_never_share_a_path(self) -> None:
        with ThreadPoolExecutor(max_workers=8) as ex:
            paths = list(ex.map(lambda _: create_temp_file(self.root), range(200)))
        self.assertEqual(len(set(paths)), 200)
        self.assertEqual(len(os.listdir(self.root)), 200)


class RemovePathTest(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_removes_file(self) -> None:
        path = self.root / "f.txt"
        path.write_text("x", encoding="utf-8")
        self.assertTrue(remove_path(str(path)))
        self.assertFalse(path.exists())

    def test_removes_empty_directory(self) -> None:
        path = self.root / "empty"
        path.mkdir()
        self.assertTrue(remove_path(str(path)))
        self.assertFalse(path.exists())

    def test_non_empty_directory_is_kept(self) -> None:
        path = self.root / "full"
        path.mkdir()
        (path / "child").write_text("x", encoding="utf-8")
        with self.assertRaises(ResourceError) as ctx:
            remove_path(str(path))
        self.assertIn(ctx.exception.errno, (errno.ENOTEMPTY, errno.EEXIST))
        self.assertTrue((path / "child").exists())

    def test_missing_path(self) -> None:
        with self.assertRaises(ResourceError) as ctx:
            remove_path(str(self.root / "missing"))
        self.assertEqual(ctx.exception.errno, errno.ENOENT)

    @unittest.skipUnless(hasattr(os, "symlink"), "needs symlinks")
    def test_symlink_removes_link_not_target(self) -> None:
        target = self.root / "target"
        target.write_text("keep", encoding="utf-8")
        link = self.root / "link"
        os.symlink(target, link)
        remove_path(str(link))
        self.assertFalse(os.path.lexists(link))
        self.assertEqual(target.read_text(encoding="utf-8"), "keep")

    def test_removes_temp_file_it_created(self) -> None:
        path = create_temp_file(str(self.root))
        self.assertTrue(remove_path(path))
        self.assertEqual(list(self.root.iterdir()), [])


class AtomicWriteTest(unittest.TestCase):
    def test_writes_data_with_private_mode(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "nested" / "config.json"
            atomic_write(target, b'{"a": 1}\n')
            self.assertEqual(target.read_bytes(), b'{"a": 1}\n')
            self.assertEqual(os.stat(target).st_mode & 0o777, 0o600)
            self.assertEqual(os.listdir(target.parent), ["config.json"])

    def test_replaces_existing_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "config.json"
            target.write_text("old", encoding="utf-8")
            atomic_write(target, b"new", mode=0o640)
            self.assertEqual(target.read_text(encoding="utf-8"), "new")
            self.assertEqual(os.stat(target).st_mode & 0o777, 0o640)


if __name__ == "__main__":
    unittest.main()
