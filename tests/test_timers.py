from chip8.machine import initialize
from chip8.timers import TimerScheduler


def test_delay_decays_to_zero_and_saturates():
    m = initialize()
    timers = TimerScheduler(m)
    m.delay_timer = 3
    for expected in (2, 1, 0):
        timers.tick()
        assert m.delay_timer == expected
    timers.tick()
    assert m.delay_timer == 0


def test_timers_are_independent():
    m = initialize()
    timers = TimerScheduler(m)
    m.delay_timer = 3
    m.sound_timer = 1
    timers.tick()
    assert (m.delay_timer, m.sound_timer) == (2, 0)
    timers.tick()
    assert (m.delay_timer, m.sound_timer) == (1, 0)


def test_tick_leaves_everything_else_alone():
    m = initialize()
    m.V[3] = 9
    TimerScheduler(m).tick()
    assert m.pc == 0x200
    assert m.V[3] == 9
    assert (m.delay_timer, m.sound_timer) == (0, 0)
