"""Unit tests for sharedrive.api.paths module."""
import os
import sys

import pytest

from sharedrive.api.errors import InvalidPathError
from sharedrive.api.paths import PathResolver, decode_path


def _symlinks_supported():
    """Check if the platform supports symlinks without special privileges."""
    return sys.platform != 'win32'


@pytest.fixture
def resolver(storage_root):
    (storage_root / 'docs' / 'deep').mkdir(parents=True)
    (storage_root / 'docs' / 'a.txt').write_text('a')
    return PathResolver(storage_root)


class TestResolveAccepts:
    """Paths that stay inside the root."""

    @pytest.mark.parametrize('suffix', ['', '.', './', 'docs/..', 'docs/deep/../..'])
    def test_root_aliases(self, resolver, storage_root, suffix):
        assert resolver.resolve(suffix) == storage_root
        assert resolver.is_root(resolver.resolve(suffix))

    def test_none_means_root(self, resolver, storage_root):
        assert resolver.resolve(None) == storage_root

    def test_nested(self, resolver, storage_root):
        assert resolver.resolve('docs/deep') == storage_root / 'docs' / 'deep'

    def test_normalizes_separators_and_dots(self, resolver, storage_root):
        assert resolver.resolve('docs//./deep/') == storage_root / 'docs' / 'deep'

    def test_inner_dotdot_that_stays_inside(self, resolver, storage_root):
        assert resolver.resolve('docs/deep/../a.txt') == storage_root / 'docs' / 'a.txt'

    def test_percent_encoded(self, resolver, storage_root):
        assert resolver.resolve('docs%2Fa.txt') == storage_root / 'docs' / 'a.txt'

    def test_nonexistent_path_is_still_resolved(self, resolver, storage_root):
        assert resolver.resolve('new/file.txt') == storage_root / 'new' / 'file.txt'


class TestResolveRejects:
    """Traversal attempts never produce a usable path."""

    @pytest.mark.parametrize('suffix', [
        '..',
        '../',
        '../etc/passwd',
        'docs/../../outside',
        'docs/deep/../../../outside',
        '%2e%2e/outside',
        '..%2Foutside',
        '/etc/passwd',
        '//etc/passwd',
    ])
    def test_escape(self, resolver, suffix):
        with pytest.raises(InvalidPathError):
            resolver.resolve(suffix)

    def test_sibling_with_common_prefix(self, resolver, storage_root):
        sibling = storage_root.parent / (storage_root.name + '-evil')
        sibling.mkdir()
        with pytest.raises(InvalidPathError):
            resolver.resolve(f'../{sibling.name}/x')

    @pytest.mark.parametrize('suffix', ['100%', '%zz', 'a%2', '%E0%A4%A'])
    def test_malformed_encoding(self, resolver, suffix):
        with pytest.raises(InvalidPathError):
            resolver.resolve(suffix)

    def test_nul_byte(self, resolver):
        with pytest.raises(InvalidPathError):
            resolver.resolve('docs/a.txt%00.png')

    def test_rejection_is_a_client_error(self, resolver):
        with pytest.raises(InvalidPathError) as exc_info:
            resolver.resolve('../x')
        assert exc_info.value.status_code == 400
        assert exc_info.value.to_dict() == {
            'error': 'Invalid path',
            'details': 'Path escapes the storage root',
        }

    @pytest.mark.skipif(not _symlinks_supported(), reason='symlinks not supported')
    def test_symlink_pointing_outside(self, resolver, storage_root, tmp_path):
        outside = tmp_path / 'outside'
        outside.mkdir()
        (outside / 'secret.txt').write_text('secret')
        os.symlink(outside, storage_root / 'link')
        with pytest.raises(InvalidPathError):
            resolver.resolve('link/secret.txt')

    @pytest.mark.skipif(not _symlinks_supported(), reason='symlinks not supported')
    def test_symlink_inside_root_is_allowed(self, resolver, storage_root):
        os.symlink(storage_root / 'docs', storage_root / 'alias')
        assert resolver.resolve('alias/a.txt') == storage_root / 'alias' / 'a.txt'


class TestSandboxInvariant:
    """Anything accepted is the root or beneath it."""

    @pytest.mark.parametrize('suffix', [
        'a', 'a/b/c', 'a/../b', './a/./b', 'a/b/../../c', 'x%20y', 'docs/deep/..',
    ])
    def test_accepted_paths_are_contained(self, resolver, storage_root, suffix):
        resolved = resolver.resolve(suffix)
        assert resolved == storage_root or str(resolved).startswith(str(storage_root) + os.sep)


class TestRelative:

    def test_root_is_empty_string(self, resolver, storage_root):
        assert resolver.relative(storage_root) == ''

    def test_nested_is_posix(self, resolver, storage_root):
        assert resolver.relative(storage_root / 'docs' / 'deep') == 'docs/deep'


class TestDecodePath:

    def test_plain(self):
        assert decode_path('a/b.txt') == 'a/b.txt'

    def test_utf8(self):
        assert decode_path('caf%C3%A9') == 'café'

    def test_invalid_utf8(self):
        with pytest.raises(InvalidPathError, match='Invalid path'):
            decode_path('%FF')
