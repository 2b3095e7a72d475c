"""Hand-off of framebuffer snapshots to the presentation layer.

The engine publishes an immutable copy of the screen every time it clears
or draws. Publishing never blocks: frames queue up until the consumer
takes them, and a consumer that only cares about the current picture can
call ``latest()`` to skip everything older.
"""

import queue

import numpy as np

from . import config

_CLOSED = object()


class FramePublisher:

    def __init__(self):
        self._frames = queue.SimpleQueue()
        self._closed = False
        self.published = 0

    def publish(self, frame):
        if self._closed:
            return
        self._frames.put(frame)
        self.published += 1

    def pending(self):
        return self._frames.qsize()

    def latest(self):
        """Drain the queue and return the newest frame, or None if nothing is queued."""
        frame = None
        while True:
            try:
                item = self._frames.get_nowait()
            except queue.Empty:
                return frame
            if item is _CLOSED:
                # keep the sentinel for anyone blocked in next_frame()
                self._frames.put(_CLOSED)
                return frame
            frame = item

    def next_frame(self, timeout=None):
        """Block until a frame is published. Returns None on timeout or after close()."""
        try:
            item = self._frames.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            self._frames.put(_CLOSED)
            return None
        return item

    def close(self):
        """Wake up waiting consumers; later publishes are dropped."""
        if not self._closed:
            self._closed = True
            self._frames.put(_CLOSED)

    @property
    def closed(self):
        return self._closed


def frame_to_text(frame, on="#", off="."):
    """Render a (height, width) frame as text, one line per row."""
    return "\n".join("".join(on if px else off for px in row) for row in frame)


def blank_frame():
    frame = np.zeros((config.height, config.width), dtype=bool)
    frame.flags.writeable = False
    return frame
