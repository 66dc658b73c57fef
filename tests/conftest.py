import pytest
from ntscj_tool.core.env import ENV_CURVE, ENV_DITHER, ENV_WORKERS


@pytest.fixture(autouse=True)
def clean_tool_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset NTSCJ_TOOL_* for each test and restore the caller's values afterwards."""
    for key in (ENV_DITHER, ENV_CURVE, ENV_WORKERS):
        # setenv first so the original value (or its absence) is recorded for undo
        monkeypatch.setenv(key, '')
        monkeypatch.delenv(key)
