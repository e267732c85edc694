import pytest

from swayfocus.algorithm import EdgeMode, Kind, Target


def _target(kind: str, direction: str, edge: str = "s") -> Target:
    return Target(
        kind=Kind(kind),
        backward=direction in ("l", "u"),
        vertical=direction in ("u", "d"),
        edge_mode=EdgeMode(edge),
    )


@pytest.fixture
def target():
    """`target("split", "r", "w")` builds a forward horizontal wrapping split target"""
    return _target


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("SWAYFOCUS", str(tmp_path / "config"))
    monkeypatch.delenv("SWAYFOCUS_LOG", raising=False)
    monkeypatch.delenv("SWAYSOCK", raising=False)
    monkeypatch.delenv("I3SOCK", raising=False)
