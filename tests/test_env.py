"""Tests for agrivoice.core.env."""

from __future__ import annotations

import os

from agrivoice.core.env import setup_environment, suppress_output


class TestSetupEnvironment:
    def test_sets_library_defaults(self, monkeypatch) -> None:
        for key in ("HF_HUB_DISABLE_PROGRESS_BARS", "TOKENIZERS_PARALLELISM", "LITELLM_LOG"):
            monkeypatch.delenv(key, raising=False)
        setup_environment()
        assert os.environ["HF_HUB_DISABLE_PROGRESS_BARS"] == "1"
        assert os.environ["TOKENIZERS_PARALLELISM"] == "false"
        assert os.environ["LITELLM_LOG"] == "ERROR"

    def test_user_values_win(self, monkeypatch) -> None:
        monkeypatch.setenv("LITELLM_LOG", "DEBUG")
        setup_environment()
        assert os.environ["LITELLM_LOG"] == "DEBUG"


class TestSuppressOutput:
    def test_hides_native_stderr_only(self, capfd) -> None:
        with suppress_output():
            os.write(2, b"metal noise\n")
            print("still visible")
        os.write(2, b"after\n")
        out, err = capfd.readouterr()
        assert "still visible" in out
        assert "metal noise" not in err
        assert "after" in err
