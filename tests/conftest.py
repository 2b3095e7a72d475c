"""Shared fixtures for the CHIP-8 test suite."""

import pytest

from chip8.cpu import InstructionEngine
from chip8.frames import FramePublisher
from chip8.machine import initialize, load_program


def assemble(*words):
    """Pack 16-bit instruction words big-endian."""
    return b"".join(w.to_bytes(2, "big") for w in words)


@pytest.fixture
def machine():
    return initialize()


@pytest.fixture
def publisher():
    return FramePublisher()


@pytest.fixture
def engine(machine, publisher):
    return InstructionEngine(machine, publisher)


@pytest.fixture
def load_words(machine):
    def _load(*words):
        load_program(machine, assemble(*words))
    return _load


class FakeTime:
    """Time source for pyglet.clock.Clock that only moves when slept on."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += max(seconds, 1e-6)


@pytest.fixture
def fake_time():
    return FakeTime()
