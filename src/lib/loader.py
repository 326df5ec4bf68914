"""
Template store: view name resolution and compiled-fragment cache

Maps logical view names to template files and keeps a compiled fragment for
each one in a cache directory, recompiling when the source is newer.

View names:
    "users.index"          <default path>/users/index.blade.html
    "admin::users.index"   <path registered as "admin">/users/index.blade.html
    "path: /tmp/x.html"    /tmp/x.html, used literally

Compiled fragments are stored under the md5 of the template's full path, so
the cache is keyed by where a template lives rather than by what it says.
Staleness is decided from modification times alone: touching a file without
editing it recompiles it, and a clock running backwards can leave a stale
fragment in place.
"""

import hashlib
from pathlib import Path
from typing import Dict, Optional

from ..config import appsettings
from .compiler import Compiler
from .exceptions import ViewNotFoundError
from .log import LOG


class Loader:
    """
    Resolves view names to files and serves their compiled fragments

    Responsibilities:
    - Resolve default, namespaced, dotted and literal-path view names
    - Recompile a template when its fragment is missing or older
    - Persist fragments to the cache directory
    """

    def __init__(self, compiler: Compiler, path: str, cache: str) -> None:
        """
        Initialize loader

        Args:
            compiler: Compiler used to (re)compile templates
            path: Default template directory
            cache: Directory for compiled fragments
        """
        self.compiler = compiler
        self.cache = str(cache)
        self.paths: Dict[str, str] = {}
        self.templatePath_add(appsettings.default_namespace, path)

    @classmethod
    def make(cls, path: str, cache: str) -> "Loader":
        """Create a loader with a default Compiler"""
        return cls(Compiler(), path, cache)

    def exists(self, view: str) -> bool:
        """
        Determine if a view's template file exists

        A view in an unregistered namespace does not exist.
        """
        try:
            full_path = self.fullPath_get(view)
        except ViewNotFoundError:
            return False
        return Path(full_path).is_file()

    def path_get(self, view: str) -> str:
        """
        Path of the up-to-date compiled fragment for a view

        Recompiles the template first if its fragment is expired.

        Raises:
            ViewNotFoundError: If the view's template does not exist
        """
        full_path = self.fullPath_get(view)
        if not Path(full_path).is_file():
            raise ViewNotFoundError(view, f"no template at {full_path}")

        cache_path = self.cachePath_get(hashlib.md5(full_path.encode('utf-8')).hexdigest())

        if self.expired_is(full_path, cache_path):
            self.recompile(full_path, cache_path, view)

        return cache_path

    def compiled_get(self, view: str) -> str:
        """Compiled fragment text for a view (recompiled if expired)"""
        return Path(self.path_get(view)).read_text(encoding='utf-8')

    def expired_is(self, path: str, cache_path: str) -> bool:
        """
        Determine if a compiled fragment is older than its template

        A missing fragment is expired; so is one whose modification time is
        not strictly newer than the template's.
        """
        cached = Path(cache_path)
        if not cached.exists():
            return True

        return Path(path).stat().st_mtime >= cached.stat().st_mtime

    def recompile(self, path: str, cache_path: str, view: Optional[str] = None) -> None:
        """Compile the template at path and write the fragment to cache_path"""
        LOG(f"Compiling {path}", level=2)
        source = Path(path).read_text(encoding='utf-8')
        fragment = self.compiler.compile(source, name=view or path)

        cached = Path(cache_path)
        cached.parent.mkdir(parents=True, exist_ok=True)
        cached.write_text(fragment, encoding='utf-8')
        LOG(f"Wrote fragment {cache_path}", level=3)

    def fullPath_get(self, view: str) -> str:
        """
        Fully qualified template path for a view name

        Raises:
            ViewNotFoundError: If a namespaced view's namespace is not registered
        """
        if view.startswith(appsettings.path_prefix):
            return view[len(appsettings.path_prefix):]

        if appsettings.namespace_delimiter in view:
            return self.namedViewPath_get(view)

        return self.path_join(self.paths[appsettings.default_namespace], appsettings.viewFile_make(view))

    def namedViewPath_get(self, view: str) -> str:
        """
        Template path for a "namespace::view" name

        Raises:
            ViewNotFoundError: If the namespace has no registered path
        """
        namespace, name = view.split(appsettings.namespace_delimiter, 1)

        if namespace not in self.paths:
            raise ViewNotFoundError(view, f"namespace '{namespace}' is not registered")

        return self.path_join(self.paths[namespace], appsettings.viewFile_make(name))

    def cachePath_get(self, digest: str) -> str:
        """Fully qualified path of a compiled fragment"""
        return self.path_join(self.cache, digest)

    def templatePath_add(self, name: str, path: str) -> None:
        """Register a template directory under a namespace"""
        self.paths[name] = str(path)

    @staticmethod
    def path_join(directory: str, name: str) -> str:
        """Join without normalising, so the same view always hashes the same"""
        return directory.rstrip('/') + '/' + name
