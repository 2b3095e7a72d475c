"""Machine faults raised by the interpreter.

Every fault stops instruction processing. None of them is retried; the
coordinator records the fault and halts, leaving already published frames
untouched.
"""


class MachineFault(Exception):
    """Base class for faults raised while executing a program.

    ``opcode`` is the instruction word being executed and ``pc`` the
    address it was fetched from. Either may be ``None`` when the fault is
    not tied to a decoded instruction (e.g. a fetch past the end of memory).
    """

    def __init__(self, message, opcode=None, pc=None):
        self.opcode = opcode
        self.pc = pc
        details = []
        if opcode is not None:
            details.append(f"opcode={opcode:04X}")
        if pc is not None:
            details.append(f"pc={pc:03X}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class StackUnderflow(MachineFault):
    """00EE executed with an empty call stack."""


class StackOverflow(MachineFault):
    """2NNN executed with the call stack already at its maximum depth."""


class UnknownOpcode(MachineFault):
    """Instruction word matches no entry in the dispatch table."""


class MemoryFault(MachineFault):
    """Access outside 0x000-0xFFF, or a write into the font region."""


class ProgramTooLarge(ValueError):
    """Program does not fit between 0x200 and the end of memory."""
