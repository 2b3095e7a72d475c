# Clock coordination.
#
# Two independent pyglet clock schedules drive the machine:
#   CPU clock   - cpu_hz,   one fetch/decode/execute step per tick
#   timer clock - timer_hz, one delay/sound timer decrement per tick
# They never share a counter. Both callbacks run on the thread that ticks the
# pyglet clock, so CPU steps are serialized, timer decrements are serialized,
# and the machine state is only ever touched from that thread. The only thing
# that leaves it is the frame copies handed to the FramePublisher.

import time

import pyglet

from . import config
from .config import log
from .cpu import InstructionEngine
from .errors import MachineFault
from .frames import FramePublisher
from .machine import initialize, load_program
from .rng import Lfsr8
from .timers import TimerScheduler


class Coordinator:

    def __init__(self, program=b"", cpu_hz=config.cpu_hz, timer_hz=config.timer_hz,
                 seed=config.lfsr_seed, wrap_sprites=False, publisher=None, clock=None):
        if cpu_hz <= 0 or timer_hz <= 0:
            raise ValueError("clock rates must be positive")
        self.program = bytes(program)
        self.cpu_hz = cpu_hz
        self.timer_hz = timer_hz
        self.seed = seed
        self.wrap_sprites = wrap_sprites
        self.publisher = publisher if publisher is not None else FramePublisher()
        self.clock = clock if clock is not None else pyglet.clock.get_default()
        self.running = False
        self.reset()

    def reset(self):
        """Rebuild the machine from scratch and reload the program. Leaves the clocks stopped."""
        self.stop()
        self.machine = initialize()
        load_program(self.machine, self.program)
        self.engine = InstructionEngine(self.machine, self.publisher, Lfsr8(self.seed), self.wrap_sprites)
        self.timers = TimerScheduler(self.machine)
        self.fault = None
        self.cpu_steps = 0
        self.timer_ticks = 0
        self.last_frame = None

    @property
    def halted(self):
        return self.fault is not None

    # ---- Scheduling ----
    def start(self):
        if self.running or self.halted:
            return
        self.clock.schedule_interval(self.cpu_tick, 1.0 / self.cpu_hz)
        self.clock.schedule_interval(self.timer_tick, 1.0 / self.timer_hz)
        self.running = True
        log("Clocks started: cpu", self.cpu_hz, "Hz, timers", self.timer_hz, "Hz")

    def stop(self):
        if not self.running:
            return
        self.clock.unschedule(self.cpu_tick)
        self.clock.unschedule(self.timer_tick)
        self.running = False

    # ---- CPU cycle ----
    def cpu_tick(self, dt):
        if self.halted:
            return
        try:
            self.engine.step()
        except MachineFault as e:
            print("Emulation error:", e)
            self.fault = e
            self.stop()
            return
        self.cpu_steps += 1

    # ---- timers ----
    def timer_tick(self, dt):
        self.timers.tick()
        self.timer_ticks += 1

    def _keep_latest_frame(self):
        frame = self.publisher.latest()
        if frame is not None:
            self.last_frame = frame

    def run_for(self, seconds, sleep=time.sleep):
        """Headless loop: tick the clock for `seconds`, sleeping until the next due tick.

        Acts as its own frame consumer: each iteration drains the publisher and
        keeps only the newest frame in `last_frame`. Returns early if the
        machine faults.
        """
        self.start()
        end = self.clock.time() + seconds
        try:
            while self.running:
                now = self.clock.time()
                if now >= end:
                    break
                self.clock.tick()
                self._keep_latest_frame()
                delay = self.clock.get_sleep_time(True)
                if delay is None:
                    delay = end - now
                if delay > 0:
                    sleep(min(delay, end - now))
        finally:
            self.stop()
            self._keep_latest_frame()
        return self.fault
