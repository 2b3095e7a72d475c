import pytest

from chip8 import config
from chip8.rng import PERIOD, Lfsr8


def test_same_seed_same_sequence():
    a = Lfsr8(0x5A)
    b = Lfsr8(0x5A)
    assert [a.next_byte() for _ in range(500)] == [b.next_byte() for _ in range(500)]


def test_default_seed():
    assert Lfsr8().state == config.lfsr_seed


def test_different_seeds_differ():
    a = Lfsr8(1)
    b = Lfsr8(2)
    assert [a.step() for _ in range(8)] != [b.step() for _ in range(8)]


@pytest.mark.parametrize("seed", [1, 0x80, 0xB8, 0xFF])
def test_never_reaches_zero(seed):
    rng = Lfsr8(seed)
    for _ in range(1000):
        assert rng.step() != 0


def test_full_period():
    rng = Lfsr8(1)
    seen = [rng.step() for _ in range(PERIOD)]
    assert sorted(seen) == list(range(1, 256))
    assert rng.state == 1


def test_step_shifts_right_and_feeds_bit_7():
    rng = Lfsr8(0b00000001)
    # bit 0 is the only set tap -> feedback 1
    assert rng.step() == 0b10000000
    rng = Lfsr8(0b00000100)
    # bit 2 set -> feedback 1
    assert rng.step() == 0b10000010
    rng = Lfsr8(0b00000010)
    # bit 1 is not a tap
    assert rng.step() == 0b00000001


@pytest.mark.parametrize("seed", [0, -1, 256])
def test_bad_seed(seed):
    with pytest.raises(ValueError):
        Lfsr8(seed)


def test_iterates():
    rng = Lfsr8(7)
    ref = Lfsr8(7)
    assert [next(rng) for _ in range(3)] == [ref.step() for _ in range(3)]
