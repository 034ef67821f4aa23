import sys
from pathlib import Path

import pytest

# Allow `import sbm` without installing the package.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _block_network_and_desktop(monkeypatch):
    """Tests must never download pages or launch a browser."""

    def _blocked(*_args, **_kwargs):
        raise AssertionError("network or desktop access attempted during tests")

    import sbm.fetch as fetch
    import sbm.opener as opener

    monkeypatch.setattr(fetch, "fetch_head", _blocked)
    monkeypatch.setattr(opener.subprocess, "run", _blocked)
    monkeypatch.delenv("SBM_STORE", raising=False)
    monkeypatch.delenv("SBM_LIST_UNIQUE", raising=False)
    monkeypatch.delenv("SBM_ASSUME_YES", raising=False)
    monkeypatch.delenv("SBM_FETCH_TITLES", raising=False)
    monkeypatch.delenv("SBM_OPENER", raising=False)
    monkeypatch.delenv("SBM_LOG_LEVEL", raising=False)
