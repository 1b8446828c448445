"""Unit tests for sharedrive.api.storage module."""
import os

import pytest

from sharedrive.api.storage import DirEntry, LocalStorage, natural_sort_key


@pytest.fixture
def storage():
    return LocalStorage()


class TestNaturalSortKey:

    def test_numeric_runs(self):
        names = ['file10.txt', 'file2.txt', 'file1.txt']
        assert sorted(names, key=natural_sort_key) == ['file1.txt', 'file2.txt', 'file10.txt']

    def test_case_insensitive(self):
        assert natural_sort_key('Apple') == natural_sort_key('apple')

    def test_accent_insensitive(self):
        assert natural_sort_key('café') == natural_sort_key('cafe')

    def test_mixed(self):
        names = ['b', 'A10', 'a9', 'Zeta', 'alpha']
        assert sorted(names, key=natural_sort_key) == ['a9', 'A10', 'alpha', 'b', 'Zeta']


class TestLocalStorageListDir:

    def test_empty(self, storage, storage_root):
        assert storage.list_dir(storage_root) == []

    def test_directories_first_then_natural(self, storage, storage_root):
        (storage_root / 'zdir').mkdir()
        (storage_root / 'Adir').mkdir()
        (storage_root / 'file10.txt').write_text('')
        (storage_root / 'file2.txt').write_text('')
        (storage_root / 'B.txt').write_text('')

        assert storage.list_dir(storage_root) == [
            DirEntry('Adir', True),
            DirEntry('zdir', True),
            DirEntry('B.txt', False),
            DirEntry('file2.txt', False),
            DirEntry('file10.txt', False),
        ]

    def test_missing_directory(self, storage, storage_root):
        with pytest.raises(FileNotFoundError):
            storage.list_dir(storage_root / 'nope')


class TestLocalStorageMutations:

    def test_make_dir_creates_parents(self, storage, storage_root):
        storage.make_dir(storage_root / 'a' / 'b')
        assert (storage_root / 'a' / 'b').is_dir()

    def test_make_dir_existing(self, storage, storage_root):
        (storage_root / 'a').mkdir()
        with pytest.raises(FileExistsError):
            storage.make_dir(storage_root / 'a')

    def test_ensure_dir_is_idempotent(self, storage, storage_root):
        storage.ensure_dir(storage_root / 'a')
        storage.ensure_dir(storage_root / 'a')
        assert (storage_root / 'a').is_dir()

    def test_delete_file(self, storage, storage_root):
        target = storage_root / 'f.txt'
        target.write_text('x')
        storage.delete(target)
        assert not target.exists()

    def test_delete_directory_recursively(self, storage, storage_root):
        (storage_root / 'd' / 'e').mkdir(parents=True)
        (storage_root / 'd' / 'e' / 'f.txt').write_text('x')
        storage.delete(storage_root / 'd')
        assert not (storage_root / 'd').exists()

    def test_delete_missing(self, storage, storage_root):
        with pytest.raises(FileNotFoundError):
            storage.delete(storage_root / 'nope')

    def test_delete_symlink_does_not_follow(self, storage, storage_root):
        (storage_root / 'real').mkdir()
        (storage_root / 'real' / 'keep.txt').write_text('keep')
        os.symlink(storage_root / 'real', storage_root / 'link')

        storage.delete(storage_root / 'link')

        assert not os.path.lexists(storage_root / 'link')
        assert (storage_root / 'real' / 'keep.txt').read_text() == 'keep'

    def test_move(self, storage, storage_root):
        (storage_root / 'a.txt').write_text('a')
        (storage_root / 'dest').mkdir()
        storage.move(storage_root / 'a.txt', storage_root / 'dest' / 'a.txt')
        assert (storage_root / 'dest' / 'a.txt').read_text() == 'a'
        assert not (storage_root / 'a.txt').exists()

    def test_text_round_trip_is_utf8(self, storage, storage_root):
        target = storage_root / 'note.txt'
        target.write_text('')
        storage.write_text(target, 'naïve ☃')
        assert target.read_bytes() == 'naïve ☃'.encode('utf-8')
        assert storage.read_text(target) == 'naïve ☃'

    def test_line_endings_are_preserved(self, storage, storage_root):
        target = storage_root / 'mixed.txt'
        target.write_bytes(b'unix\nwindows\r\nold mac\r')
        assert storage.read_text(target) == 'unix\nwindows\r\nold mac\r'
        storage.write_text(target, 'a\r\nb\n')
        assert target.read_bytes() == b'a\r\nb\n'


class TestLocalStoragePredicates:

    def test_exists_sees_dangling_symlink(self, storage, storage_root):
        os.symlink(storage_root / 'gone', storage_root / 'dangling')
        assert storage.exists(storage_root / 'dangling')
        assert not storage.is_file(storage_root / 'dangling')

    def test_is_file_and_is_dir(self, storage, storage_root):
        (storage_root / 'f').write_text('')
        (storage_root / 'd').mkdir()
        assert storage.is_file(storage_root / 'f')
        assert not storage.is_dir(storage_root / 'f')
        assert storage.is_dir(storage_root / 'd')
        assert not storage.is_file(storage_root / 'd')
