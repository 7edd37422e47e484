"""Command line entry point running a ROM in a window."""

from __future__ import annotations

import argparse
import time
from typing import Any, Sequence

from .chip8 import Chip8, RomError
from .isa import Chip8Error
from .messages import MessageType, write_message

TEST_ROM = "test/test_opcode.ch8"
CYCLE_DELAY = 0.001428  # about 700 Hz


def run(machine: Any, hmi: Any, cycle_delay: float = CYCLE_DELAY) -> int:
    """Run the machine until the interface stops; return the cycles executed."""
    cycles = 0
    while hmi.running:
        hmi.handle_events(machine)
        machine.cycle()
        cycles += 1
        if machine.flag_sound:
            machine.flag_sound = False
            hmi.beep()
        if machine.flag_draw:
            machine.flag_draw = False
            hmi.update_video(machine)
        machine.update_timers()
        if cycle_delay > 0:
            time.sleep(cycle_delay)
    return cycles


def main(argv: Sequence[str] | None = None) -> int:
    """Load a ROM, open the window and run until it is closed."""
    parser = argparse.ArgumentParser(prog="chipemu", description="CHIP-8 emulator")
    parser.add_argument("rom", nargs="?", help="ROM file to run")
    args = parser.parse_args(argv)

    machine = Chip8()
    rom = args.rom
    if rom is None:
        write_message(MessageType.ERROR, "Expected usage: EMU ROM")
        write_message(MessageType.WARNING, "Reverting to test ROM...")
        rom = TEST_ROM

    try:
        machine.load_rom(rom)
    except RomError as exc:
        write_message(MessageType.ERROR, str(exc))
        return 1

    try:
        hmi = _open_interface()
    except RuntimeError as exc:
        write_message(MessageType.ERROR, str(exc))
        return 1

    try:
        hmi.boot_beep()
        run(machine, hmi)
    except Chip8Error as exc:
        write_message(MessageType.ERROR, str(exc))
        return 1
    finally:
        hmi.close()

    try:
        machine.dump_state()
    except Chip8Error as exc:
        write_message(MessageType.ERROR, str(exc))
        return 1
    return 0


def _open_interface() -> Any:
    from .hmi import Hmi

    return Hmi()


if __name__ == "__main__":
    raise SystemExit(main())