"""
Composition tests

Tests @each rendering, view creation for @include and view data merging.
"""

import pytest

from blade.lib import View


@pytest.fixture
def recorded(composition, monkeypatch):
    """Replace make() so each_show's renders are visible as text"""
    def fake_make(view, parameters=None):
        return f"[{view}|{parameters}]"

    monkeypatch.setattr(composition, 'make', fake_make)
    return composition


class TestEachShow:
    """Test per-entry rendering"""

    def test_list_binds_index_and_value(self, recorded):
        output = recorded.each_show('row', ['x', 'y'], 'item')

        assert output == "[row|{'key': 0, 'item': 'x'}][row|{'key': 1, 'item': 'y'}]"

    def test_mapping_binds_key_and_value(self, recorded):
        output = recorded.each_show('row', {'a': 1, 'b': 2}, 'n')

        assert output == "[row|{'key': 'a', 'n': 1}][row|{'key': 'b', 'n': 2}]"

    def test_generator(self, recorded):
        output = recorded.each_show('row', (c for c in 'ab'), 'c')

        assert output == "[row|{'key': 0, 'c': 'a'}][row|{'key': 1, 'c': 'b'}]"

    def test_empty_default(self, recorded):
        """The default fallback is empty raw text"""
        assert recorded.each_show('row', [], 'item') == ''

    def test_empty_raw_text(self, recorded):
        assert recorded.each_show('row', [], 'item', 'raw|hi') == 'hi'

    def test_empty_view(self, recorded):
        """A fallback without the raw prefix is rendered as a view"""
        assert recorded.each_show('row', {}, 'item', 'empty') == '[empty|None]'

    def test_none_is_empty(self, recorded):
        assert recorded.each_show('row', None, 'item', 'raw|none') == 'none'


class TestMake:
    """Test views created from inside a render"""

    def test_view_shares_composition(self, composition):
        view = composition.make('partials.header')

        assert isinstance(view, View)
        assert view.composition is composition
        assert view.view == 'partials.header'

    def test_scope_forwarded_without_runtime_names(self, composition):
        """Caller variables are forwarded; explicit parameters win"""
        scope = {'a': 0, 'b': 2, '__echo': print, '__builtins__': {}}
        view = composition.make('v', {'a': 1}, scope=scope)

        assert view.parameters == {'a': 1, 'b': 2}


class TestViewData:
    """Test shared data merging"""

    def test_parameters_override_shared(self, environment, composition):
        environment.share('g', 'global').share('l', 'shared')
        data = composition.viewData_get({'l': 'local'})

        assert data['g'] == 'global'
        assert data['l'] == 'local'
        assert data['__blade'] is composition

    def test_no_parameters(self, environment, composition):
        environment.share('g', 1)

        assert composition.viewData_get() == {'g': 1, '__blade': composition}
