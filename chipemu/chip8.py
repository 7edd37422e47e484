"""The CHIP-8 machine state, ROM loading and the fetch-execute cycle."""

from __future__ import annotations

import random
from pathlib import Path

from .isa import (
    DISPLAY_SIZE,
    FONT_OFFSET,
    KEY_COUNT,
    REGISTER_COUNT,
    Chip8Error,
    Instruction,
    execute,
)
from .messages import MessageType, debug, write_message

MEMORY_SIZE = 0x1000
PROGRAM_OFFSET = 0x200
DEFAULT_DUMP_FILE = "mem_dump.bin"
CYCLES_PER_TIMER_UPDATE = 12  # ~700 Hz CPU / 60 Hz timers

FONT = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


class RomError(Chip8Error):
    """Raised when a ROM cannot be loaded."""


class Chip8:
    """Memory, registers, timers, display and keypad of one machine."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.reset()

    def reset(self) -> None:
        """Clear all state, load the font and point PC at the program area."""
        self.memory = bytearray(MEMORY_SIZE)
        self.memory[FONT_OFFSET:FONT_OFFSET + len(FONT)] = FONT
        self.pc = PROGRAM_OFFSET
        self.i = 0
        self.v = bytearray(REGISTER_COUNT)
        self.stack: list[int] = []
        self.timer_sound = 0
        self.timer_delay = 0
        self.flag_sound = False
        self.gfx = bytearray(DISPLAY_SIZE)
        self.flag_draw = False
        self.keys = bytearray(KEY_COUNT)
        self._timer_counter = 0
        debug("CPU is READY")

    def load_bytes(self, data: bytes) -> None:
        """Copy a program into memory at the program offset."""
        if len(data) > MEMORY_SIZE - PROGRAM_OFFSET:
            raise RomError("Not enough memory space for ROM.")
        self.memory[PROGRAM_OFFSET:PROGRAM_OFFSET + len(data)] = data

    def load_rom(self, path: str | Path) -> None:
        """Load a ROM file into memory."""
        try:
            data = Path(path).read_bytes()
        except FileNotFoundError as exc:
            raise RomError("ROM not found.") from exc
        except OSError as exc:
            raise RomError("Unable to read ROM file.") from exc
        self.load_bytes(data)
        debug(f"Successfully loaded ROM: {path}")

    def dump_state(self, path: str | Path = DEFAULT_DUMP_FILE) -> Path:
        """Write the whole memory to ``path`` and return it."""
        target = Path(path)
        try:
            target.write_bytes(bytes(self.memory))
        except OSError as exc:
            raise Chip8Error("Unable to open memory dump file for writing.") from exc
        write_message(MessageType.INFORMATION, "Memory dumped successfully.")
        return target

    def update_timers(self) -> None:
        """Tick the timers once every CYCLES_PER_TIMER_UPDATE calls."""
        self._timer_counter += 1
        if self._timer_counter < CYCLES_PER_TIMER_UPDATE:
            return
        self._timer_counter = 0
        if self.timer_delay > 0:
            self.timer_delay -= 1
        if self.timer_sound > 0:
            self.flag_sound = True
            self.timer_sound -= 1

    def fetch(self) -> int:
        """Return the big-endian opcode at PC."""
        return (self.memory[self.pc] << 8) | self.memory[self.pc + 1]

    def cycle(self) -> Instruction:
        """Fetch, decode and execute one instruction."""
        return execute(self, self.fetch())