# Cxkk random source: 8-bit linear-feedback shift register.
#
# Taps are numbered in shift order: tap 7 is the bit about to leave the
# register (bit 0), tap 5 is bit 2, tap 4 is bit 3, tap 2 is bit 5.
# The feedback bit goes into bit 7 and everything else moves right by one.
# This is the polynomial x^8 + x^5 + x^3 + x^2 + 1, which is primitive, so
# any nonzero seed cycles through all 255 nonzero states and never hits 0.

from . import config

PERIOD = 255


class Lfsr8:

    def __init__(self, seed=config.lfsr_seed):
        if not 0 < seed <= 0xFF:
            raise ValueError("LFSR seed must be in 1..255, got %r" % (seed,))
        self.state = seed

    def step(self):
        s = self.state
        bit = (s ^ (s >> 2) ^ (s >> 3) ^ (s >> 5)) & 1
        self.state = (s >> 1) | (bit << 7)
        return self.state

    def next_byte(self):
        return self.step()

    def __iter__(self):
        return self

    def __next__(self):
        return self.step()
