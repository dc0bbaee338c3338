import os
import shutil

import pytest
import yaml

from stackr.quotes.engine.engine_loader import EngineLoader
from stackr.quotes.engine.tables import vertical_root


@pytest.fixture
def workspace(tmp_path):
    src = vertical_root()
    shutil.copytree(src / "rules", tmp_path / "rules")
    shutil.copytree(src / "data", tmp_path / "data")
    return tmp_path


def _bump_mtime(path, step=10_000_000_000):
    st = os.stat(path)
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + step))


def _loader(ws):
    return EngineLoader(ws / "rules" / "rule_sets" / "v1.yaml", ws / "data" / "tables")


def test_unchanged_files_return_same_engine(workspace):
    loader = _loader(workspace)
    assert loader.get() is loader.get()


def test_changed_table_is_reloaded(workspace):
    loader = _loader(workspace)
    before = loader.get()

    path = workspace / "data" / "tables" / "industries.yaml"
    doc = yaml.safe_load(path.read_text(encoding="utf-8"))
    doc["industries"]["automotive"]["baseMargin"] = 0.33
    path.write_text(yaml.safe_dump(doc), encoding="utf-8")
    _bump_mtime(path)

    after = loader.get()
    assert after is not before
    assert str(after.tables.industries["automotive"].base_margin) == "0.33"


def test_invalid_reload_keeps_last_known_good(workspace):
    loader = _loader(workspace)
    before = loader.get()

    path = workspace / "rules" / "rule_sets" / "v1.yaml"
    path.write_text("executionOrder: [ghost]\nrules: []\n", encoding="utf-8")
    _bump_mtime(path)

    assert loader.get() is before


def test_missing_file_keeps_last_known_good(workspace):
    loader = _loader(workspace)
    before = loader.get()

    os.remove(workspace / "data" / "tables" / "benchmarks.yaml")
    assert loader.get() is before


def test_initial_load_fails_fast(workspace):
    (workspace / "data" / "tables" / "regions.yaml").write_text("regions: nope\n", encoding="utf-8")

    with pytest.raises(ValueError):
        _loader(workspace)
