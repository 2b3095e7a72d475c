"""
CHIP-8 interpreter command line.

Usage:
  chip8 ROM [--cpu-hz HZ] [--scale N] [--seed S] [--wrap-sprites] [--logs]
  chip8 ROM --headless [--seconds T]
"""

import argparse

import pyglet

from . import config
from .clock import Coordinator
from .config import set_logs
from .errors import ProgramTooLarge
from .frames import frame_to_text


def read_rom(path):
    with open(path, "rb") as f:
        return f.read()


def int_auto(text):
    return int(text, 0)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="chip8",
        description="CHIP-8 interpreter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  chip8 pong.ch8\n"
               "  chip8 ibm.ch8 --headless --seconds 2\n",
    )
    parser.add_argument("rom", help="program image, loaded at 0x200")
    parser.add_argument("--cpu-hz", type=int, default=config.cpu_hz,
                        help=f"instructions per second (default: {config.cpu_hz})")
    parser.add_argument("--timer-hz", type=int, default=config.timer_hz,
                        help=f"delay/sound timer rate (default: {config.timer_hz})")
    parser.add_argument("--scale", type=int, default=config.scale,
                        help=f"window pixels per CHIP-8 pixel (default: {config.scale})")
    parser.add_argument("--seed", type=int_auto, default=config.lfsr_seed,
                        help="random source seed, 1..255 (default: 0x%02X)" % config.lfsr_seed)
    parser.add_argument("--wrap-sprites", action="store_true",
                        help="wrap sprites around the screen edges instead of clipping")
    parser.add_argument("--headless", action="store_true",
                        help="run without a window and print the last frame")
    parser.add_argument("--seconds", type=float, default=1.0,
                        help="how long to run in headless mode (default: 1.0)")
    parser.add_argument("--logs", action="store_true", help="log every executed instruction")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    set_logs(args.logs)

    if args.cpu_hz <= 0 or args.timer_hz <= 0:
        parser.error("clock rates must be positive")
    if not 0 < args.seed <= 0xFF:
        parser.error("--seed must be in 1..255")

    try:
        program = read_rom(args.rom)
    except OSError as e:
        parser.error(f"cannot read {args.rom}: {e}")

    try:
        coordinator = Coordinator(program, cpu_hz=args.cpu_hz, timer_hz=args.timer_hz,
                                  seed=args.seed, wrap_sprites=args.wrap_sprites,
                                  clock=pyglet.clock.Clock() if args.headless else None)
    except ProgramTooLarge as e:
        parser.error(str(e))

    if args.headless:
        coordinator.run_for(args.seconds)
        frame = coordinator.last_frame
        if frame is None:
            frame = coordinator.machine.snapshot()
        print(frame_to_text(frame))
        print("cpu steps: %d, timer ticks: %d" % (coordinator.cpu_steps, coordinator.timer_ticks))
    else:
        from .window import Chip8Window

        Chip8Window(coordinator, scale=args.scale)
        coordinator.start()
        pyglet.app.run()

    if coordinator.fault is not None:
        return 1
    return 0