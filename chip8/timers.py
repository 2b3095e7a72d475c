# 60 Hz delay/sound timers. Each tick decrements both independently and stops at 0.
# The sound timer is a plain counter here; nothing is played.

from .config import log


class TimerScheduler:

    def __init__(self, machine):
        self.machine = machine

    def tick(self):
        m = self.machine
        # Delay timer
        if m.delay_timer > 0:
            m.delay_timer -= 1
        # Sound timer
        if m.sound_timer > 0:
            m.sound_timer -= 1
            if m.sound_timer == 0:
                log("Sound timer expired")
