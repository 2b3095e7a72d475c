# CHIP-8 machine state: memory, registers, index, program counter, call stack,
# the two timers and the 64x32 framebuffer.
# Built once by initialize(), then mutated only by the instruction engine
# and the timer scheduler.

import numpy as np

from . import config
from .config import log
from .errors import ProgramTooLarge


class MachineState:

    def __init__(self):
        self.memory = bytearray(config.memory_size)  # max 4096 bytes
        self.V = [0] * 16                             # registers, VF doubles as carry/borrow/shift flag
        self.I = 0                                    # index register (memory pointer)
        self.pc = config.program_start                # program counter starts at 0x200
        self.stack = []                               # return addresses, at most config.stack_depth
        self.delay_timer = 0
        self.sound_timer = 0
        self.display_buffer = np.zeros(config.width * config.height, dtype=np.uint8)  # row-major, y*64 + x

        # Load fontset into memory
        self.memory[config.font_start:config.font_end] = bytes(config.fontset)

    def pixel(self, x, y):
        return int(self.display_buffer[y * config.width + x])

    def snapshot(self):
        """Read-only (height, width) bool copy of the framebuffer."""
        frame = self.display_buffer.reshape(config.height, config.width).astype(bool)
        frame.flags.writeable = False
        return frame

    def __repr__(self):
        return "<MachineState pc=%03X I=%03X sp=%d DT=%d ST=%d>" % (
            self.pc, self.I, len(self.stack), self.delay_timer, self.sound_timer)


def initialize():
    return MachineState()


def load_program(machine, data):
    """Copy program bytes verbatim into memory starting at 0x200.

    Raises ProgramTooLarge (and writes nothing) if the program does not fit.
    """
    data = bytes(data)
    if len(data) > config.max_program_size:
        raise ProgramTooLarge(
            "program is %d bytes, at most %d fit above 0x%03X"
            % (len(data), config.max_program_size, config.program_start))
    start = config.program_start
    machine.memory[start:start + len(data)] = data
    log("Loaded program:", len(data), "bytes")
    return len(data)
