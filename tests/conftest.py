from pathlib import Path
from typing import List

import pytest

from ipa_tts.synthesis import BackendError, SilentWavBackend
from ipa_tts.workflow import Toolchain


class RecordingBackend:
    """Backend stub that remembers what it was asked to render."""

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.inner = SilentWavBackend()

    def render(self, text: str) -> bytes:
        self.calls.append(text)
        return self.inner.render(text)


class FailingBackend:
    def __init__(self, message: str = "engine offline") -> None:
        self.message = message

    def render(self, text: str) -> bytes:
        raise BackendError(self.message)


@pytest.fixture()
def recording_backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture()
def failing_backend() -> FailingBackend:
    return FailingBackend()


@pytest.fixture()
def toolchain(tmp_path: Path) -> Toolchain:
    return Toolchain(out_dir=tmp_path / "out")
