import sys
import os

import pytest

# Project root on sys.path so tests import the flat top-level packages ('ingest', 'ranking', 'report', ...)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture(autouse=True)
def _no_gemini_calls(monkeypatch):
    """Fail loudly if a test reaches the real Gemini SDK instead of a mock."""
    import google.generativeai as genai

    def _blocked(*args, **kwargs):
        raise RuntimeError("real Gemini client used in tests")

    monkeypatch.setattr(genai, 'GenerativeModel', _blocked)
