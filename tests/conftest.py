"""
Shared fixtures: a template directory with a loader, environment and
composition built on it.
"""

import pytest

from blade.lib import Composition, Environment, Loader


@pytest.fixture
def templates(tmp_path):
    """Directory for template files; write(name, text) adds one by view name"""
    root = tmp_path / "views"
    root.mkdir()

    class Templates:
        path = root

        def write(self, view, text):
            target = root / (view.replace('.', '/') + '.blade.html')
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding='utf-8')
            return target

    return Templates()


@pytest.fixture
def loader(templates, tmp_path):
    return Loader.make(str(templates.path), str(tmp_path / "cache"))


@pytest.fixture
def environment(loader):
    return Environment(loader)


@pytest.fixture
def composition(environment):
    return Composition(environment)
