import pytest


@pytest.fixture(autouse=True)
def use_80_columns(monkeypatch):
    """Render rich output as if the terminal were 80 columns wide."""
    monkeypatch.setenv("COLUMNS", "80")
