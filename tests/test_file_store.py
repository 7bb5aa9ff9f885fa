"""Tests for LocalFileStore."""

import os

import pytest

from common import constants
from common.exceptions import NotFoundError, StorageFaultError
from filestore import file_store
from filestore.file_store import LocalFileStore, ManagedFile


def names(files):
    return [f.name for f in files]


class TestManagedFile:

    def test_equality_uses_name_only(self):
        assert ManagedFile('a.ipa', '1 B') == ManagedFile('a.ipa', '2.00 KiB')
        assert ManagedFile('a.ipa') != ManagedFile('b.ipa')
        assert len({ManagedFile('a.ipa', 'x'), ManagedFile('a.ipa', 'y')}) == 1


class TestListing:

    def test_store_creates_missing_root(self, tmp_path):
        root = tmp_path / 'nested' / 'store'
        LocalFileStore(root)
        assert root.is_dir()

    def test_default_inbox_is_inside_root(self, tmp_path):
        store = LocalFileStore(tmp_path / 'store')
        assert store.inbox == tmp_path / 'store' / 'Inbox'

    def test_list_filters_by_extension(self, store, store_root):
        (store_root / 'one.ipa').write_bytes(b'1')
        (store_root / 'notes.txt').write_text('x')
        (store_root / 'upper.IPA').write_bytes(b'1')
        (store_root / 'dir.ipa').mkdir()

        assert names(store.list()) == ['one.ipa']

    def test_list_sorts_naturally_and_case_insensitively(self, store, store_root):
        for name in ['a_10.ipa', 'B.ipa', 'a_2.ipa', 'a.ipa']:
            (store_root / name).write_bytes(b'x')

        assert names(store.list()) == ['a.ipa', 'a_2.ipa', 'a_10.ipa', 'B.ipa']

    def test_list_reports_sizes(self, store, store_root):
        (store_root / 'small.ipa').write_bytes(b'x' * 512)
        (store_root / 'big.ipa').write_bytes(b'x' * 1536)

        sizes = {f.name: f.size_display for f in store.list()}
        assert sizes == {'big.ipa': '1.50 KiB', 'small.ipa': '512 B'}

    def test_list_is_idempotent(self, store, store_root, inbox):
        (store_root / 'a.ipa').write_bytes(b'x')
        (inbox / 'a.ipa').write_bytes(b'y')

        first = names(store.list())
        second = names(store.list())

        assert first == second == ['a.ipa', 'a_1.ipa']

    def test_list_adopts_inbox_first(self, store, inbox):
        (inbox / 'new.ipa').write_bytes(b'x')

        assert names(store.list()) == ['new.ipa']
        assert not (inbox / 'new.ipa').exists()

    def test_list_hides_scratch_directories(self, store, store_root):
        (store_root / '.extract-abc').mkdir()
        (store_root / 'a.ipa').write_bytes(b'x')

        assert names(store.list()) == ['a.ipa']


class TestPaths:

    def test_resolve_path_is_pure_join(self, store, store_root):
        assert store.resolve_path('missing.ipa') == store_root / 'missing.ipa'
        assert not (store_root / 'missing.ipa').exists()

    def test_resolve_contained_returns_file(self, store, store_root):
        (store_root / 'a.ipa').write_bytes(b'x')
        assert store.resolve_contained('a.ipa') == (store_root / 'a.ipa').resolve()

    @pytest.mark.parametrize('name', ['', '.', '..', '../etc/passwd', '../../etc/passwd', 'a/b.ipa', '..\\x', 'a\x00'])
    def test_resolve_contained_rejects_traversal(self, store, name):
        with pytest.raises(NotFoundError):
            store.resolve_contained(name)

    def test_resolve_contained_rejects_symlink_escape(self, store, store_root, tmp_path):
        outside = tmp_path / 'secret.txt'
        outside.write_text('secret')
        (store_root / 'link.ipa').symlink_to(outside)

        with pytest.raises(NotFoundError):
            store.resolve_contained('link.ipa')

    def test_resolve_contained_rejects_missing_and_directories(self, store, store_root):
        (store_root / 'folder').mkdir()
        with pytest.raises(NotFoundError):
            store.resolve_contained('missing.ipa')
        with pytest.raises(NotFoundError):
            store.resolve_contained('folder')


class TestSize:

    def test_size_of_missing_file_is_empty(self, store):
        assert store.size('missing.ipa') == ''

    def test_size_formats_bytes(self, store, store_root):
        (store_root / 'a.ipa').write_bytes(b'x' * 100)
        assert store.size('a.ipa') == '100 B'


class TestRename:

    def test_rename_moves_file(self, store, store_root):
        (store_root / 'a.ipa').write_bytes(b'data')

        store.rename(ManagedFile('a.ipa'), 'b.ipa')

        assert names(store.list()) == ['b.ipa']
        assert (store_root / 'b.ipa').read_bytes() == b'data'

    def test_rename_missing_file_is_noop(self, store, store_root):
        (store_root / 'keep.ipa').write_bytes(b'x')
        before = names(store.list())

        store.rename(ManagedFile('ghost.ipa'), 'new.ipa')

        assert not (store_root / 'new.ipa').exists()
        assert names(store.list()) == before

    def test_rename_onto_existing_name_faults(self, store, store_root):
        (store_root / 'a.ipa').write_bytes(b'a')
        (store_root / 'b.ipa').write_bytes(b'b')

        with pytest.raises(StorageFaultError):
            store.rename(ManagedFile('a.ipa'), 'b.ipa')

        assert (store_root / 'a.ipa').read_bytes() == b'a'
        assert (store_root / 'b.ipa').read_bytes() == b'b'

    def test_rename_outside_root_faults(self, store, store_root):
        (store_root / 'a.ipa').write_bytes(b'a')

        with pytest.raises(StorageFaultError):
            store.rename(ManagedFile('a.ipa'), '../escaped.ipa')

    def test_rename_source_outside_root_faults(self, store, store_root):
        outside = store_root.parent / 'outside.ipa'
        outside.write_bytes(b'keep')

        with pytest.raises(StorageFaultError):
            store.rename(ManagedFile('../outside.ipa'), 'moved.ipa')

        assert outside.read_bytes() == b'keep'
        assert not (store_root / 'moved.ipa').exists()

    def test_rename_os_failure_faults(self, store, store_root, monkeypatch):
        (store_root / 'a.ipa').write_bytes(b'a')

        def failing_rename(self, target):
            raise PermissionError("denied")

        monkeypatch.setattr(file_store.Path, 'rename', failing_rename)

        with pytest.raises(StorageFaultError):
            store.rename(ManagedFile('a.ipa'), 'b.ipa')


class TestDelete:

    def test_delete_removes_only_that_entry(self, store, store_root):
        for name in ['a.ipa', 'b.ipa', 'c.ipa']:
            (store_root / name).write_bytes(b'x')

        store.delete(ManagedFile('b.ipa'))

        assert names(store.list()) == ['a.ipa', 'c.ipa']

    def test_delete_missing_file_is_noop(self, store, store_root):
        (store_root / 'a.ipa').write_bytes(b'x')

        store.delete(ManagedFile('ghost.ipa'))

        assert names(store.list()) == ['a.ipa']

    @pytest.mark.parametrize('name', ['../outside.ipa', '..', 'sub/../../outside.ipa'])
    def test_delete_outside_root_is_noop(self, store, store_root, name):
        outside = store_root.parent / 'outside.ipa'
        outside.write_bytes(b'keep')

        store.delete(ManagedFile(name))

        assert outside.read_bytes() == b'keep'

    def test_delete_not_deletable_is_noop(self, store, store_root, monkeypatch):
        (store_root / 'a.ipa').write_bytes(b'x')
        monkeypatch.setattr(file_store.os, 'access', lambda path, mode: False)

        store.delete(ManagedFile('a.ipa'))

        assert (store_root / 'a.ipa').exists()

    def test_stale_value_survives_delete(self, store, store_root):
        (store_root / 'a.ipa').write_bytes(b'x')
        stale = store.list()[0]

        store.delete(stale)

        assert stale.name == 'a.ipa'
        assert store.list() == []


class TestAdoptInbox:

    def test_repeated_arrivals_get_numbered_names(self, store, inbox):
        for _ in range(3):
            (inbox / 'a.ipa').write_bytes(b'x')
            store.adopt_inbox(inbox)

        assert names(store.list()) == ['a.ipa', 'a_1.ipa', 'a_2.ipa']
        assert list(inbox.iterdir()) == []

    def test_adopt_returns_assigned_names(self, store, store_root, inbox):
        (store_root / 'a.ipa').write_bytes(b'old')
        (inbox / 'a.ipa').write_bytes(b'new')
        (inbox / 'b.ipa').write_bytes(b'b')

        assert store.adopt_inbox(inbox) == ['a_1.ipa', 'b.ipa']
        assert (store_root / 'a.ipa').read_bytes() == b'old'
        assert (store_root / 'a_1.ipa').read_bytes() == b'new'

    def test_adopt_skips_other_extensions(self, store, inbox):
        (inbox / 'readme.txt').write_text('x')

        assert store.adopt_inbox(inbox) == []
        assert (inbox / 'readme.txt').exists()

    def test_adopt_missing_inbox_is_noop(self, store, tmp_path):
        assert store.adopt_inbox(tmp_path / 'nowhere') == []

    def test_adopt_failure_is_isolated_per_file(self, store, store_root, inbox, monkeypatch):
        (inbox / 'bad.ipa').write_bytes(b'x')
        (inbox / 'good.ipa').write_bytes(b'y')
        real_move = file_store.shutil.move

        def flaky_move(src, dst):
            if src.endswith('bad.ipa'):
                raise OSError("device full")
            return real_move(src, dst)

        monkeypatch.setattr(file_store.shutil, 'move', flaky_move)

        assert store.adopt_inbox(inbox) == ['good.ipa']
        assert (store_root / 'good.ipa').exists()
        assert (inbox / 'bad.ipa').exists()

    def test_collision_search_falls_back_to_random_token(self, store, store_root, inbox, monkeypatch):
        monkeypatch.setattr(file_store, 'MAX_COLLISION_SUFFIX', 2)
        for name in ['a.ipa', 'a_1.ipa', 'a_2.ipa']:
            (store_root / name).write_bytes(b'x')
        (inbox / 'a.ipa').write_bytes(b'new')

        adopted = store.adopt_inbox(inbox)

        assert len(adopted) == 1
        assert adopted[0].startswith('a_')
        assert len(adopted[0]) == len('a_.ipa') + constants.RANDOM_SUFFIX_LENGTH
        assert len(store.list()) == 4

    def test_exhausted_names_leave_file_in_inbox(self, store, store_root, inbox, monkeypatch):
        monkeypatch.setattr(file_store, 'MAX_COLLISION_SUFFIX', 0)
        monkeypatch.setattr(file_store, 'RANDOM_SUFFIX_ATTEMPTS', 0)
        (store_root / 'a.ipa').write_bytes(b'x')
        (inbox / 'a.ipa').write_bytes(b'new')

        assert store.adopt_inbox(inbox) == []
        assert (inbox / 'a.ipa').exists()

    def test_adopted_files_never_share_names(self, store, store_root, inbox):
        (store_root / 'a_1.ipa').write_bytes(b'x')
        (store_root / 'a.ipa').write_bytes(b'x')
        (inbox / 'a.ipa').write_bytes(b'new')
        (inbox / 'a_1.ipa').write_bytes(b'new')

        store.adopt_inbox(inbox)

        listed = names(store.list())
        assert listed == ['a.ipa', 'a_1.ipa', 'a_1_1.ipa', 'a_2.ipa']
        assert len(os.listdir(store_root)) == len(listed)
