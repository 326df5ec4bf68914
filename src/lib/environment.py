"""
Rendering environment

The Environment is the long-lived entry point: it owns the Loader, the
data shared with every view, composing listeners, and a cache of compiled
code objects. It holds no section state; each top-level render gets its own
Composition (see View.get), so one Environment can serve concurrent renders.

Shared data is meant to be set up before rendering starts and only read
afterwards.

Example:
    >>> env = Environment(Loader.make('templates', '.blade-cache'))
    >>> env.share('site', 'Example')
    >>> html = env.make('home', {'user': 'ada'}).get()
"""

import os
from pathlib import Path
from types import CodeType
from typing import Any, Callable, Dict, List, Tuple

from .loader import Loader
from .view import View
from .log import LOG


class Environment:
    """
    Factory for views plus environment-lifetime data

    Responsibilities:
    - Create top-level views
    - Hold shared data merged under every view's parameters
    - Fire composing listeners before a view renders
    - Cache compiled code objects per fragment file
    """

    def __init__(self, loader: Loader) -> None:
        """
        Args:
            loader: Template store used to find and compile views
        """
        self.loader = loader
        self.shared: Dict[str, Any] = {}
        self.listeners: Dict[str, List[Callable[[View], None]]] = {}
        self.code_cache: Dict[str, Tuple[int, CodeType]] = {}

    def exists(self, view: str) -> bool:
        """Determine if the given view exists"""
        return self.loader.exists(view)

    def make(self, view: str, parameters: Dict[str, Any] = None) -> View:
        """
        Create a top-level view

        Rendering it starts a new Composition, so its sections are separate
        from every other top-level render.
        """
        return View(self, view, parameters)

    def share(self, key: str, value: Any) -> "Environment":
        """Add a piece of data visible to every view"""
        self.shared[key] = value
        return self

    def shared_get(self) -> Dict[str, Any]:
        """Data shared with every view"""
        return self.shared

    def templatePath_add(self, name: str, path: str) -> "Environment":
        """Register a namespaced template directory with the loader"""
        self.loader.templatePath_add(name, path)
        return self

    def composing_listen(self, view: str, callback: Callable[[View], None]) -> "Environment":
        """
        Call callback with the View each time view is about to render

        Listeners may add parameters with view.with_value(). A view name of
        "*" listens to every view.
        """
        self.listeners.setdefault(view, []).append(callback)
        return self

    def composing_fire(self, view: View) -> None:
        """Run the composing listeners for a view"""
        for callback in self.listeners.get(view.view, []) + self.listeners.get('*', []):
            callback(view)

    def code_get(self, view: str) -> CodeType:
        """
        Code object of a view's compiled fragment

        The loader recompiles stale templates; the code object is rebuilt
        whenever the fragment file's modification time changes.

        Raises:
            ViewNotFoundError: If the view does not exist
            SyntaxError: If the fragment is not valid Python
        """
        cache_path = self.loader.path_get(view)
        modified = os.stat(cache_path).st_mtime_ns

        cached = self.code_cache.get(cache_path)
        if cached and cached[0] == modified:
            return cached[1]

        LOG(f"Loading fragment for '{view}'", level=3)
        fragment = Path(cache_path).read_text(encoding='utf-8')
        code = compile(fragment, self.loader.fullPath_get(view), 'exec')
        self.code_cache[cache_path] = (modified, code)
        return code
