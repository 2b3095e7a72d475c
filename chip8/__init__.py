"""CHIP-8 interpreter: machine state, instruction engine, timers and clock coordination."""

from .clock import Coordinator
from .cpu import Instruction, InstructionEngine, decode
from .errors import (MachineFault, MemoryFault, ProgramTooLarge, StackOverflow,
                     StackUnderflow, UnknownOpcode)
from .frames import FramePublisher, frame_to_text
from .machine import MachineState, initialize, load_program
from .rng import Lfsr8
from .timers import TimerScheduler

__version__ = "0.1.0"
