# pyglet presentation layer.
# Takes the newest published frame on every draw and blits it scaled up with numpy.
# Keeping this in its own module means the engine and the tests never import
# pyglet.window (which needs a display).

import numpy as np
import pyglet

from . import config
from .config import log, set_logs
from .frames import blank_frame


class Chip8Window(pyglet.window.Window):

    def __init__(self, coordinator, scale=config.scale):
        self.scale = scale
        window_width, window_height = config.width * scale, config.height * scale
        super().__init__(window_width, window_height, caption="CHIP-8 Emulator", resizable=False, vsync=False)
        self.coordinator = coordinator
        self.publisher = coordinator.publisher
        self.frame = blank_frame()

        # RGBA framebuffer, rows flipped because pyglet's origin is bottom-left
        self._rgba = np.zeros((config.height, config.width, 4), dtype=np.uint8)
        self._rgba[..., 3] = 255
        self.image = pyglet.image.ImageData(window_width, window_height, 'RGBA', self._scaled().tobytes())

        # ---- Performance Counters ----
        self._fps_counter = 0
        self._last_steps = 0
        self.fps_label = pyglet.text.Label("FPS: 0", font_size=12, x=5, y=window_height - 15,
                                           anchor_x='left', anchor_y='center', color=(255, 255, 255, 255))
        self.cps_label = pyglet.text.Label("Cycles/s: 0", font_size=12, x=5, y=window_height - 30,
                                           anchor_x='left', anchor_y='center', color=(255, 255, 255, 255))
        self.fault_label = pyglet.text.Label("", font_size=12, x=5, y=15,
                                             anchor_x='left', anchor_y='center', color=(255, 80, 80, 255))
        pyglet.clock.schedule_interval(self._update_bench, 1.0)

    def _scaled(self):
        pixels = self.frame[::-1].astype(np.uint8) * 255
        self._rgba[..., 0] = pixels
        self._rgba[..., 1] = pixels
        self._rgba[..., 2] = pixels
        if self.scale == 1:
            return self._rgba
        return np.repeat(np.repeat(self._rgba, self.scale, axis=0), self.scale, axis=1)

    def _update_bench(self, dt):
        steps = self.coordinator.cpu_steps
        self.fps_label.text = f"FPS: {self._fps_counter / dt:.1f}"
        self.cps_label.text = f"Cycles/s: {steps - self._last_steps}"
        self._fps_counter = 0
        self._last_steps = steps
        if self.coordinator.fault is not None:
            self.fault_label.text = str(self.coordinator.fault)

    # ---- Drawing ----
    def on_draw(self):
        frame = self.publisher.latest()
        if frame is not None:
            self.frame = frame
            self.image.set_data('RGBA', self.width * 4, self._scaled().tobytes())

        self.clear()
        self.image.blit(0, 0)
        self.fps_label.draw()
        self.cps_label.draw()
        self.fault_label.draw()
        self._fps_counter += 1

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        #@Override
        if symbol == pyglet.window.key.ESCAPE:
            self.close()
        elif symbol == pyglet.window.key.F1:
            set_logs(not config.logs_on)
            log("logs_on:", config.logs_on)

    def on_close(self):
        self.coordinator.stop()
        self.publisher.close()
        pyglet.clock.unschedule(self._update_bench)
        super().on_close()
