import pyglet
import pytest

from chip8.clock import Coordinator
from chip8.errors import StackUnderflow

from conftest import assemble

LOOP = assemble(0x1200)  # jump to self


def make(fake_time, program=LOOP, **kwargs):
    clock = pyglet.clock.Clock(time_function=fake_time)
    return Coordinator(program, clock=clock, **kwargs)


def test_ticks_drive_engine_and_timers_separately(fake_time):
    c = make(fake_time, assemble(0x6105, 0x6206, 0x1204))
    c.machine.delay_timer = 2
    c.cpu_tick(0)
    assert c.machine.V[1] == 5
    assert c.machine.delay_timer == 2
    c.timer_tick(0)
    c.timer_tick(0)
    c.timer_tick(0)
    assert c.machine.delay_timer == 0
    assert c.machine.V[2] == 0
    assert (c.cpu_steps, c.timer_ticks) == (1, 3)


def test_run_for_one_second(fake_time):
    c = make(fake_time, cpu_hz=700, timer_hz=60)
    c.run_for(1.0, sleep=fake_time.sleep)
    assert 680 <= c.cpu_steps <= 705
    assert 57 <= c.timer_ticks <= 61
    assert not c.running


def test_timer_rate_does_not_follow_cpu_rate(fake_time):
    c = make(fake_time, cpu_hz=100, timer_hz=60)
    c.run_for(1.0, sleep=fake_time.sleep)
    assert 95 <= c.cpu_steps <= 101
    assert 57 <= c.timer_ticks <= 61


def test_delay_timer_observed_by_program(fake_time):
    # V0 = 30, DT = V0, then spin reading DT into V1
    program = assemble(0x601E, 0xF015, 0xF107, 0x1204)
    c = make(fake_time, program)
    c.run_for(0.25, sleep=fake_time.sleep)
    # 30 ticks at 60 Hz is half a second, so about half of it is left
    assert 12 <= c.machine.delay_timer <= 18
    assert abs(c.machine.V[1] - c.machine.delay_timer) <= 1


def test_fault_halts_and_keeps_published_frames(fake_time):
    program = assemble(0x00E0, 0xA050, 0xD015, 0x00EE)
    c = make(fake_time, program)
    fault = c.run_for(1.0, sleep=fake_time.sleep)
    assert isinstance(fault, StackUnderflow)
    assert c.halted
    assert not c.running
    assert c.cpu_steps == 3
    assert c.publisher.published == 2
    assert c.last_frame[0, :4].all()
    assert c.publisher.pending() == 0


def test_headless_run_keeps_only_newest_frame(fake_time):
    c = make(fake_time, assemble(0xA050, 0xD015, 0x1202))  # draw forever
    queued = []

    def sleep(seconds):
        queued.append(c.publisher.pending())
        fake_time.sleep(seconds)

    c.run_for(5.0, sleep=sleep)
    assert c.publisher.published > 1000
    assert max(queued) <= 1
    assert c.publisher.pending() == 0
    assert c.last_frame is not None


def test_halted_machine_does_not_restart(fake_time):
    c = make(fake_time, assemble(0x00EE))
    c.cpu_tick(0)
    assert c.halted
    c.start()
    assert not c.running
    c.cpu_tick(0)
    assert c.cpu_steps == 0


def test_reset_reloads_program(fake_time):
    c = make(fake_time, assemble(0x6107, 0x00EE))
    c.run_for(0.1, sleep=fake_time.sleep)
    assert c.halted
    c.reset()
    assert c.fault is None
    assert c.machine.pc == 0x200
    assert c.machine.V[1] == 0
    assert c.machine.memory[0x200:0x204] == assemble(0x6107, 0x00EE)
    c.cpu_tick(0)
    assert c.machine.V[1] == 7


def test_start_stop_are_idempotent(fake_time):
    c = make(fake_time)
    c.start()
    c.start()
    assert c.running
    c.stop()
    c.stop()
    assert not c.running


def test_same_seed_same_run(fake_time):
    program = assemble(0xC0FF, 0xC1FF, 0xC2FF, 0x1206)
    a = make(fake_time, program, seed=0x21)
    b = make(fake_time, program, seed=0x21)
    for c in (a, b):
        for _ in range(4):
            c.cpu_tick(0)
    assert a.machine.V[:3] == b.machine.V[:3]


@pytest.mark.parametrize("kwargs", [{"cpu_hz": 0}, {"timer_hz": -1}])
def test_bad_rates(fake_time, kwargs):
    with pytest.raises(ValueError):
        make(fake_time, **kwargs)


def test_bad_seed(fake_time):
    with pytest.raises(ValueError):
        make(fake_time, seed=0)
