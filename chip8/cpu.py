# CHIP-8 instruction engine: fetch, decode and execute one instruction at a time
# against a MachineState.
#
# Operand names follow Cowgod's reference:
#   x   = bits 11-8  register index
#   y   = bits 7-4   register index
#   n   = bits 3-0   4-bit immediate
#   nn  = bits 7-0   8-bit immediate
#   nnn = bits 11-0  12-bit address
#
# VF (register 0xF) is a general register AND the flag output of 8xy4, 8xy5,
# 8xy6, 8xy7, 8xyE and Dxyn. Flags are computed from the original operands.
# 8xy4 writes the result then the flag, so with x == 0xF VF keeps the flag;
# 8xy5, 8xy6, 8xy7 and 8xyE write the flag then the result, so VF keeps the result.

from collections import namedtuple

import numpy as np

from . import config
from .config import log
from .errors import MemoryFault, StackOverflow, StackUnderflow, UnknownOpcode
from .rng import Lfsr8

Instruction = namedtuple("Instruction", "opcode x y n nn nnn")


def decode(opcode):
    return Instruction(
        opcode,
        (opcode >> 8) & 0xF,
        (opcode >> 4) & 0xF,
        opcode & 0xF,
        opcode & 0xFF,
        opcode & 0xFFF,
    )


class InstructionEngine:

    def __init__(self, machine, publisher=None, rng=None, wrap_sprites=False):
        self.machine = machine
        self.publisher = publisher
        self.rng = rng if rng is not None else Lfsr8()
        self.wrap_sprites = wrap_sprites
        self._pc = machine.pc  # address of the instruction being executed

        # dispatch table, scanned in order
        self.opcodes = [
            (0xFFFF, 0x00E0, self.op_CLS),
            (0xFFFF, 0x00EE, self.op_RET),

            (0xF000, 0x1000, self.op_JP),
            (0xF000, 0x2000, self.op_CALL),
            (0xF000, 0x3000, self.op_SE_Vx_nn),
            (0xF000, 0x4000, self.op_SNE_Vx_nn),
            (0xF00F, 0x5000, self.op_SE_Vx_Vy),
            (0xF000, 0x6000, self.op_LD_Vx_nn),
            (0xF000, 0x7000, self.op_ADD_Vx_nn),

            (0xF00F, 0x8000, self.op_LD_Vx_Vy),
            (0xF00F, 0x8001, self.op_OR),
            (0xF00F, 0x8002, self.op_AND),
            (0xF00F, 0x8003, self.op_XOR),
            (0xF00F, 0x8004, self.op_ADD),
            (0xF00F, 0x8005, self.op_SUB),
            (0xF00F, 0x8006, self.op_SHR),
            (0xF00F, 0x8007, self.op_SUBN),
            (0xF00F, 0x800E, self.op_SHL),

            (0xF00F, 0x9000, self.op_SNE_Vx_Vy),
            (0xF000, 0xA000, self.op_LD_I),
            (0xF000, 0xB000, self.op_JP_V0),
            (0xF000, 0xC000, self.op_RND),
            (0xF000, 0xD000, self.op_DRW),

            (0xF0FF, 0xF007, self.op_LD_Vx_DT),
            (0xF0FF, 0xF015, self.op_LD_DT_Vx),
            (0xF0FF, 0xF018, self.op_LD_ST_Vx),
            (0xF0FF, 0xF01E, self.op_ADD_I_Vx),
            (0xF0FF, 0xF029, self.op_FONT),
            (0xF0FF, 0xF033, self.op_BCD),
            (0xF0FF, 0xF055, self.op_STORE),
            (0xF0FF, 0xF065, self.op_LOAD),
        ]

    # ---- Cycle ----
    def fetch(self):
        """Read the big-endian word at PC and advance PC by 2."""
        m = self.machine
        pc = m.pc
        if pc < 0 or pc + 1 >= config.memory_size:
            raise MemoryFault("PC out of bounds", pc=pc)
        opcode = (m.memory[pc] << 8) | m.memory[pc + 1]
        m.pc = pc + 2
        return opcode

    def step(self):
        """Execute one instruction and return it decoded.

        PC is advanced before the handler runs, so jumps and calls simply
        overwrite it. Raises a MachineFault subclass on stack errors, bad
        memory accesses and unrecognized opcodes.
        """
        self._pc = self.machine.pc
        opcode = self.fetch()
        ins = decode(opcode)

        for mask, pattern, handler in self.opcodes:
            if (opcode & mask) == pattern:
                handler(ins)
                return ins

        raise UnknownOpcode("Unknown opcode", opcode, self._pc)

    def run(self, steps):
        for _ in range(steps):
            self.step()

    # ---- Helpers ----
    def _publish(self):
        if self.publisher is not None:
            self.publisher.publish(self.machine.snapshot())

    def _check_read(self, ins, addr, count):
        if addr < 0 or addr + count > config.memory_size:
            raise MemoryFault("read of %d bytes at %03X out of bounds" % (count, addr), ins.opcode, self._pc)

    def _check_write(self, ins, addr, count):
        if addr < 0 or addr + count > config.memory_size:
            raise MemoryFault("write of %d bytes at %03X out of bounds" % (count, addr), ins.opcode, self._pc)
        if addr < config.font_end and addr + count > config.font_start:
            raise MemoryFault("write into font region at %03X" % addr, ins.opcode, self._pc)

    def _skip(self):
        self.machine.pc += 2

    # ---- Opcode handlers ----

    # 00E0 - CLS
    def op_CLS(self, ins):
        self.machine.display_buffer[:] = 0
        log("Clear the display (all pixels turned off)")
        self._publish()

    # 00EE - RET
    def op_RET(self, ins):
        m = self.machine
        if not m.stack:
            raise StackUnderflow("Stack underflow on 00EE", ins.opcode, self._pc)
        m.pc = m.stack.pop()
        log("Return to", hex(m.pc))

    # 1nnn - JP addr
    def op_JP(self, ins):
        self.machine.pc = ins.nnn
        log("Jump to address", hex(ins.nnn))

    # 2nnn - CALL addr
    def op_CALL(self, ins):
        m = self.machine
        if len(m.stack) >= config.stack_depth:
            raise StackOverflow("Stack overflow on CALL", ins.opcode, self._pc)
        m.stack.append(m.pc)
        m.pc = ins.nnn
        log("Call subroutine at", hex(ins.nnn))

    # 3xnn - SE Vx, byte
    def op_SE_Vx_nn(self, ins):
        if self.machine.V[ins.x] == ins.nn:
            self._skip()
            log(f"Skip next instruction: V{ins.x:X} == {ins.nn}")

    # 4xnn - SNE Vx, byte
    def op_SNE_Vx_nn(self, ins):
        if self.machine.V[ins.x] != ins.nn:
            self._skip()
            log(f"Skip next instruction: V{ins.x:X} != {ins.nn}")

    # 5xy0 - SE Vx, Vy
    def op_SE_Vx_Vy(self, ins):
        V = self.machine.V
        if V[ins.x] == V[ins.y]:
            self._skip()
            log(f"Skip next instruction: V{ins.x:X} == V{ins.y:X}")

    # 6xnn - LD Vx, byte
    def op_LD_Vx_nn(self, ins):
        self.machine.V[ins.x] = ins.nn
        log(f"Set V{ins.x:X} = {ins.nn}")

    # 7xnn - ADD Vx, byte (wraps, VF untouched)
    def op_ADD_Vx_nn(self, ins):
        V = self.machine.V
        V[ins.x] = (V[ins.x] + ins.nn) & 0xFF
        log(f"Add {ins.nn} to V{ins.x:X}: {V[ins.x]}")

    # 8xy0 - LD Vx, Vy
    def op_LD_Vx_Vy(self, ins):
        V = self.machine.V
        V[ins.x] = V[ins.y]
        log(f"Copy V{ins.y:X} ({V[ins.y]}) into V{ins.x:X}")

    # 8xy1 - OR
    def op_OR(self, ins):
        V = self.machine.V
        V[ins.x] |= V[ins.y]
        log(f"V{ins.x:X} = V{ins.x:X} OR V{ins.y:X} -> {V[ins.x]}")

    # 8xy2 - AND
    def op_AND(self, ins):
        V = self.machine.V
        V[ins.x] &= V[ins.y]
        log(f"V{ins.x:X} = V{ins.x:X} AND V{ins.y:X} -> {V[ins.x]}")

    # 8xy3 - XOR
    def op_XOR(self, ins):
        V = self.machine.V
        V[ins.x] ^= V[ins.y]
        log(f"V{ins.x:X} = V{ins.x:X} XOR V{ins.y:X} -> {V[ins.x]}")

    def op_ADD(self, ins):
        """8xy4 - Vx += Vy, wrapping. Clobbers VF: 1 on carry out of bit 7, else 0."""
        V = self.machine.V
        total = V[ins.x] + V[ins.y]
        V[ins.x] = total & 0xFF
        V[0xF] = 1 if total > 0xFF else 0
        log(f"Add V{ins.y:X} to V{ins.x:X}: result {V[ins.x]}, carry={V[0xF]}")

    def op_SUB(self, ins):
        """8xy5 - Vx -= Vy, wrapping. Clobbers VF: 1 if Vy > Vx beforehand (borrow), else 0."""
        V = self.machine.V
        vx, vy = V[ins.x], V[ins.y]
        borrow = 1 if vy > vx else 0
        V[0xF] = borrow
        V[ins.x] = (vx - vy) & 0xFF
        log(f"Subtract V{ins.y:X} from V{ins.x:X}: result {V[ins.x]}, borrow={borrow}")

    def op_SHR(self, ins):
        """8xy6 - Vx >>= 1. Clobbers VF with the bit shifted out. Vy is ignored."""
        V = self.machine.V
        vx = V[ins.x]
        V[0xF] = vx & 1
        V[ins.x] = vx >> 1
        log(f"Shift V{ins.x:X} right by 1: {V[ins.x]}, least significant bit={vx & 1}")

    def op_SUBN(self, ins):
        """8xy7 - Vx = Vy - Vx, wrapping. Clobbers VF: 1 if Vx > Vy beforehand (borrow), else 0."""
        V = self.machine.V
        vx, vy = V[ins.x], V[ins.y]
        borrow = 1 if vx > vy else 0
        V[0xF] = borrow
        V[ins.x] = (vy - vx) & 0xFF
        log(f"Set V{ins.x:X} = V{ins.y:X} - V{ins.x:X}: result {V[ins.x]}, borrow={borrow}")

    def op_SHL(self, ins):
        """8xyE - Vx <<= 1, dropping bit 8. Clobbers VF with the bit shifted out. Vy is ignored."""
        V = self.machine.V
        vx = V[ins.x]
        V[0xF] = (vx >> 7) & 1
        V[ins.x] = (vx << 1) & 0xFF
        log(f"Shift V{ins.x:X} left by 1: {V[ins.x]}, most significant bit={(vx >> 7) & 1}")

    # 9xy0 - SNE Vx, Vy
    def op_SNE_Vx_Vy(self, ins):
        V = self.machine.V
        if V[ins.x] != V[ins.y]:
            self._skip()
            log(f"Skip next instruction: V{ins.x:X} != V{ins.y:X}")

    # Annn - LD I, addr
    def op_LD_I(self, ins):
        self.machine.I = ins.nnn
        log(f"Set I = {ins.nnn:03X}")

    # Bnnn - JP V0, addr (a target past 0xFFF faults on the next fetch)
    def op_JP_V0(self, ins):
        m = self.machine
        m.pc = m.V[0] + ins.nnn
        log(f"Jump to address V0 + {ins.nnn:03X} = {m.pc:03X}")

    # Cxnn - RND Vx, byte
    def op_RND(self, ins):
        V = self.machine.V
        V[ins.x] = self.rng.next_byte() & ins.nn
        log(f"Set V{ins.x:X} = random_byte & {ins.nn} -> {V[ins.x]}")

    def op_DRW(self, ins):
        """Dxyn - XOR an 8xn sprite from memory[I] onto the screen at (Vx mod 64, Vy mod 32).

        Pixels past the right or bottom edge are clipped, or wrapped when
        ``wrap_sprites`` is set. Clobbers VF: 1 if any lit pixel was turned
        off, else 0. Publishes a frame afterwards.
        """
        m = self.machine
        n = ins.n
        self._check_read(ins, m.I, n)
        x0 = m.V[ins.x] % config.width
        y0 = m.V[ins.y] % config.height

        # one row per byte, MSB is the leftmost pixel
        rows = np.fromiter(m.memory[m.I:m.I + n], dtype=np.uint8, count=n)
        sprite = np.unpackbits(rows).reshape(n, 8)
        screen = m.display_buffer.reshape(config.height, config.width)

        if self.wrap_sprites:
            ys = (y0 + np.arange(n)) % config.height
            xs = (x0 + np.arange(8)) % config.width
            region = np.ix_(ys, xs)
            collision = bool(np.any(screen[region] & sprite))
            screen[region] ^= sprite
        else:
            region = screen[y0:y0 + n, x0:x0 + 8]
            sprite = sprite[:region.shape[0], :region.shape[1]]
            collision = bool(np.any(region & sprite))
            region ^= sprite

        m.V[0xF] = 1 if collision else 0
        log(f"Drew sprite at ({x0}, {y0}), {n} rows, collision={m.V[0xF]}")
        self._publish()

    # Fx07 - LD Vx, DT
    def op_LD_Vx_DT(self, ins):
        m = self.machine
        m.V[ins.x] = m.delay_timer
        log(f"Set V{ins.x:X} = delay timer ({m.delay_timer})")

    # Fx15 - LD DT, Vx
    def op_LD_DT_Vx(self, ins):
        m = self.machine
        m.delay_timer = m.V[ins.x]
        log(f"Set delay timer = V{ins.x:X} ({m.delay_timer})")

    # Fx18 - LD ST, Vx
    def op_LD_ST_Vx(self, ins):
        m = self.machine
        m.sound_timer = m.V[ins.x]
        log(f"Set sound timer = V{ins.x:X} ({m.sound_timer})")

    # Fx1E - ADD I, Vx (VF untouched)
    def op_ADD_I_Vx(self, ins):
        m = self.machine
        m.I = (m.I + m.V[ins.x]) & 0xFFFF
        log(f"Add V{ins.x:X} to I: {m.I:03X}")

    # Fx29 - LD F, Vx
    def op_FONT(self, ins):
        m = self.machine
        m.I = config.font_start + (m.V[ins.x] & 0xF) * 5
        log(f"Set I = font sprite for digit {m.V[ins.x] & 0xF:X} ({m.I:03X})")

    # Fx33 - LD B, Vx
    def op_BCD(self, ins):
        m = self.machine
        self._check_write(ins, m.I, 3)
        v = m.V[ins.x]
        m.memory[m.I] = v // 100
        m.memory[m.I + 1] = (v // 10) % 10
        m.memory[m.I + 2] = v % 10
        log(f"Store BCD of V{ins.x:X} ({v}) at {m.I:03X}")

    # Fx55 - LD [I], V0..Vx
    def op_STORE(self, ins):
        m = self.machine
        count = ins.x + 1
        self._check_write(ins, m.I, count)
        m.memory[m.I:m.I + count] = bytes(m.V[:count])
        log(f"Store V0..V{ins.x:X} at {m.I:03X}")

    # Fx65 - LD V0..Vx, [I]
    def op_LOAD(self, ins):
        m = self.machine
        count = ins.x + 1
        self._check_read(ins, m.I, count)
        m.V[:count] = list(m.memory[m.I:m.I + count])
        log(f"Load V0..V{ins.x:X} from {m.I:03X}")
