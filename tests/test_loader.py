"""
Loader tests

Tests view name resolution, fragment caching and recompilation.
"""

import hashlib
import os
from pathlib import Path

import pytest

from blade.lib import Loader
from blade.lib.exceptions import ViewNotFoundError


class TestPathResolution:
    """Test mapping view names to template files"""

    def test_default_view(self, loader, templates):
        assert loader.fullPath_get('home') == f"{templates.path}/home.blade.html"

    def test_dotted_view(self, loader, templates):
        assert loader.fullPath_get('users.index') == f"{templates.path}/users/index.blade.html"

    def test_namespaced_view(self, loader, tmp_path):
        loader.templatePath_add('admin', str(tmp_path / 'admin') + '/')

        assert loader.fullPath_get('admin::users.list') == f"{tmp_path}/admin/users/list.blade.html"

    def test_literal_path(self, loader):
        assert loader.fullPath_get('path: /srv/views/x.html') == '/srv/views/x.html'

    def test_unregistered_namespace(self, loader):
        with pytest.raises(ViewNotFoundError):
            loader.fullPath_get('nope::home')

    def test_exists(self, loader, templates):
        templates.write('home', 'x')

        assert loader.exists('home') is True
        assert loader.exists('missing') is False
        assert loader.exists('nope::home') is False


class TestFragmentCache:
    """Test compiled fragment storage"""

    def test_missing_view(self, loader):
        with pytest.raises(ViewNotFoundError) as info:
            loader.path_get('missing')
        assert info.value.view == 'missing'

    def test_cache_file_named_by_md5(self, loader, templates, tmp_path):
        source = templates.write('home', 'Hello {{ name }}')
        digest = hashlib.md5(str(source).encode('utf-8')).hexdigest()

        cache_path = loader.path_get('home')

        assert cache_path == f"{tmp_path / 'cache'}/{digest}"
        assert Path(cache_path).read_text() == "__echo('Hello ')\n__echo(name)\n"

    def test_compiled_get(self, loader, templates):
        templates.write('home', '{{ x }}')

        assert loader.compiled_get('home') == "__echo(x)\n"

    def test_literal_path_view(self, loader, tmp_path):
        source = tmp_path / 'loose.html'
        source.write_text('loose')

        assert loader.compiled_get(f'path: {source}') == "__echo('loose')\n"

    def test_fresh_fragment_not_recompiled(self, loader, templates, monkeypatch):
        templates.write('home', 'one')
        loader.path_get('home')
        templates.write('home', 'two')

        monkeypatch.setattr(loader, 'expired_is', lambda path, cache_path: False)
        assert loader.compiled_get('home') == "__echo('one')\n"

        monkeypatch.setattr(loader, 'expired_is', lambda path, cache_path: True)
        assert loader.compiled_get('home') == "__echo('two')\n"


class TestExpiry:
    """Test staleness decisions"""

    def test_missing_cache_is_expired(self, loader, templates, tmp_path):
        source = templates.write('home', 'x')

        assert loader.expired_is(str(source), str(tmp_path / 'absent')) is True

    def test_newer_cache_is_fresh(self, loader, templates, tmp_path):
        source = templates.write('home', 'x')
        cache = tmp_path / 'fragment'
        cache.write_text('')
        os.utime(source, (1000, 1000))
        os.utime(cache, (2000, 2000))

        assert loader.expired_is(str(source), str(cache)) is False

    def test_same_mtime_is_expired(self, loader, templates, tmp_path):
        source = templates.write('home', 'x')
        cache = tmp_path / 'fragment'
        cache.write_text('')
        os.utime(source, (2000, 2000))
        os.utime(cache, (2000, 2000))

        assert loader.expired_is(str(source), str(cache)) is True


class TestLoaderMake:
    def test_make_creates_compiler(self, tmp_path):
        loader = Loader.make(str(tmp_path), str(tmp_path / 'cache'))

        assert loader.compiler is not None
        assert loader.paths['*'] == str(tmp_path)
