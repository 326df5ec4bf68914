"""
Command line pipeline tests

Runs the render pipeline stages on a ProgramState, without going through
argument parsing.
"""

from pathlib import Path

import pytest

from blade.__main__ import env_check, data_load, view_render, listing_write, results_report
from blade.models import ProgramState, pipeline


@pytest.fixture
def state(tmp_path):
    inputdir = tmp_path / "in"
    inputdir.mkdir()
    (inputdir / "home.blade.html").write_text("{{ site }}: Hello {{ name }}")
    (inputdir / "home.yml").write_text("name: Ada\n")
    return ProgramState(
        inputdir=inputdir,
        outputdir=tmp_path / "out",
        verbosity=0,
        view="home",
        dataFile="home.yml",
        share=["site=Example"],
    )


class TestStages:
    """Test individual pipeline stages"""

    def test_env_check(self, state):
        checked = env_check(state)

        assert checked.envOK is True
        assert checked.cacheOutputdir.is_dir()
        assert checked.outputTarget == state.outputdir / "index.html"
        assert state.envOK is False

    def test_env_check_missing_inputdir(self, state, tmp_path):
        state.inputdir = tmp_path / "absent"

        with pytest.raises(SystemExit):
            env_check(state)

    def test_data_load(self, state):
        loaded = data_load(state)

        assert loaded.viewData == {'name': 'Ada'}
        assert loaded.sharedData == {'site': 'Example'}

    def test_bad_share_pair(self, state):
        state.share = ["novalue"]

        with pytest.raises(SystemExit):
            data_load(state)

    def test_data_file_not_mapping(self, state):
        (state.inputdir / "list.yml").write_text("- a\n- b\n")
        state.dataFile = "list.yml"

        with pytest.raises(SystemExit):
            data_load(state)

    def test_missing_view_exits(self, state):
        state.view = "missing"

        with pytest.raises(SystemExit):
            pipeline(state, env_check, data_load, view_render)


class TestPipeline:
    """Test the whole render pipeline"""

    def test_render(self, state):
        final = pipeline(state, env_check, data_load, view_render, listing_write, results_report)

        assert final.outputTarget.read_text() == "Example: Hello Ada"
        assert final.renderResult['status'] is True
        assert final.renderResult['characters'] == len("Example: Hello Ada")
        assert final.listingFile is None

    def test_listing(self, state):
        state.listing = True
        final = pipeline(state, env_check, data_load, view_render, listing_write)

        assert final.listingFile == Path(state.outputdir) / "index.html.listing.html"
        listing = final.listingFile.read_text()
        assert "<html>" in listing
        assert "compiled fragment" in listing

    def test_custom_cache_dir(self, state, tmp_path):
        state.cacheDir = str(tmp_path / "fragments")
        final = pipeline(state, env_check, data_load, view_render)

        assert any((tmp_path / "fragments").iterdir())
