"""CHIP-8 instruction decoding and execution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
DISPLAY_SIZE = DISPLAY_WIDTH * DISPLAY_HEIGHT
STACK_DEPTH = 16
REGISTER_COUNT = 16
KEY_COUNT = 16
FONT_OFFSET = 0x0
FONT_GLYPH_SIZE = 5


class Chip8Error(Exception):
    """Base error for the emulated machine."""


class UndefinedOpcodeError(Chip8Error):
    """Raised for an opcode the instruction set does not define."""

    def __init__(self, opcode: int) -> None:
        super().__init__(f"Undefined opcode, got {opcode:04X}")
        self.opcode = opcode


class StackOverflowError(Chip8Error):
    """Raised when a call would nest deeper than the stack allows."""

    def __init__(self) -> None:
        super().__init__("Stack overflow during subroutine call.")


class StackUnderflowError(Chip8Error):
    """Raised when returning with an empty stack."""

    def __init__(self) -> None:
        super().__init__("Stack underflow while returning from subroutine.")


@dataclass(frozen=True)
class Instruction:
    """A 16-bit opcode with its decoded fields."""

    opcode: int

    @classmethod
    def decode(cls, opcode: int) -> "Instruction":
        if not 0 <= opcode <= 0xFFFF:
            raise ValueError(f"opcode out of range: {opcode:#x}")
        return cls(opcode)

    @property
    def f(self) -> int:
        return (self.opcode & 0xF000) >> 12

    @property
    def x(self) -> int:
        return (self.opcode & 0x0F00) >> 8

    @property
    def y(self) -> int:
        return (self.opcode & 0x00F0) >> 4

    @property
    def n(self) -> int:
        return self.opcode & 0x000F

    @property
    def kk(self) -> int:
        return self.opcode & 0x00FF

    @property
    def nnn(self) -> int:
        return self.opcode & 0x0FFF


Handler = Callable[[Any, Instruction], None]


def _advance(m: Any, steps: int = 1) -> None:
    m.pc = (m.pc + 2 * steps) & 0xFFFF


def _skip_if(m: Any, condition: bool) -> None:
    _advance(m, 2 if condition else 1)


# --- group 0 -------------------------------------------------------------

def _cls(m: Any, ins: Instruction) -> None:
    m.gfx[:] = bytes(len(m.gfx))
    m.flag_draw = True
    _advance(m)


def _ret(m: Any, ins: Instruction) -> None:
    if not m.stack:
        raise StackUnderflowError()
    m.pc = m.stack.pop()
    _advance(m)


_SET_0: dict[int, Handler] = {0x00E0: _cls, 0x00EE: _ret}


def _group_0(m: Any, ins: Instruction) -> None:
    handler = _SET_0.get(ins.opcode)
    # Any other 0NNN is the obsolete SYS call: ignored, and PC stays put.
    if handler is not None:
        handler(m, ins)


# --- flow and immediate --------------------------------------------------

def _jp(m: Any, ins: Instruction) -> None:
    m.pc = ins.nnn


def _call(m: Any, ins: Instruction) -> None:
    if len(m.stack) >= STACK_DEPTH:
        raise StackOverflowError()
    m.stack.append(m.pc)
    m.pc = ins.nnn


def _se_byte(m: Any, ins: Instruction) -> None:
    _skip_if(m, m.v[ins.x] == ins.kk)


def _sne_byte(m: Any, ins: Instruction) -> None:
    _skip_if(m, m.v[ins.x] != ins.kk)


def _se_reg(m: Any, ins: Instruction) -> None:
    _skip_if(m, m.v[ins.x] == m.v[ins.y])


def _ld_byte(m: Any, ins: Instruction) -> None:
    m.v[ins.x] = ins.kk
    _advance(m)


def _add_byte(m: Any, ins: Instruction) -> None:
    m.v[ins.x] = (m.v[ins.x] + ins.kk) & 0xFF
    _advance(m)


# --- group 8 -------------------------------------------------------------

def _ld_reg(m: Any, ins: Instruction) -> None:
    m.v[ins.x] = m.v[ins.y]
    _advance(m)


def _or(m: Any, ins: Instruction) -> None:
    m.v[ins.x] |= m.v[ins.y]
    _advance(m)


def _and(m: Any, ins: Instruction) -> None:
    m.v[ins.x] &= m.v[ins.y]
    _advance(m)


def _xor(m: Any, ins: Instruction) -> None:
    m.v[ins.x] ^= m.v[ins.y]
    _advance(m)


def _add_reg(m: Any, ins: Instruction) -> None:
    total = m.v[ins.x] + m.v[ins.y]
    m.v[0xF] = int(total > 0xFF)
    m.v[ins.x] = total & 0xFF
    _advance(m)


def _sub(m: Any, ins: Instruction) -> None:
    m.v[0xF] = int(m.v[ins.x] >= m.v[ins.y])
    m.v[ins.x] = (m.v[ins.x] - m.v[ins.y]) & 0xFF
    _advance(m)


def _shr(m: Any, ins: Instruction) -> None:
    m.v[0xF] = m.v[ins.x] & 0x1
    m.v[ins.x] >>= 1
    _advance(m)


def _subn(m: Any, ins: Instruction) -> None:
    # The flag compares Vx >= Vy, as the reference machine does.
    m.v[0xF] = int(m.v[ins.x] >= m.v[ins.y])
    m.v[ins.x] = (m.v[ins.y] - m.v[ins.x]) & 0xFF
    _advance(m)


def _shl(m: Any, ins: Instruction) -> None:
    m.v[0xF] = m.v[ins.x] & 0x80
    m.v[ins.x] = (m.v[ins.x] << 1) & 0xFF
    _advance(m)


_SET_8: dict[int, Handler] = {
    0x0: _ld_reg,
    0x1: _or,
    0x2: _and,
    0x3: _xor,
    0x4: _add_reg,
    0x5: _sub,
    0x6: _shr,
    0x7: _subn,
    0xE: _shl,
}


# --- misc ----------------------------------------------------------------

def _sne_reg(m: Any, ins: Instruction) -> None:
    _skip_if(m, m.v[ins.x] != m.v[ins.y])


def _ld_i(m: Any, ins: Instruction) -> None:
    m.i = ins.nnn
    _advance(m)


def _jp_v0(m: Any, ins: Instruction) -> None:
    m.pc = m.v[0] + ins.nnn


def _rnd(m: Any, ins: Instruction) -> None:
    m.v[ins.x] = m.rng.randrange(256) & ins.kk
    _advance(m)


def _drw(m: Any, ins: Instruction) -> None:
    cx = m.v[ins.x]
    cy = m.v[ins.y]
    m.flag_draw = True
    m.v[0xF] = 0
    for row in range(ins.n):
        sprite = m.memory[m.i + row]
        for col in range(8):
            if sprite & (0x80 >> col):
                idx = ((cy + row) * DISPLAY_WIDTH + cx + col) % DISPLAY_SIZE
                if m.gfx[idx]:
                    m.v[0xF] = 1
                m.gfx[idx] ^= 1
    _advance(m)


def _skp(m: Any, ins: Instruction) -> None:
    _skip_if(m, bool(m.keys[m.v[ins.x] & 0x0F]))


def _sknp(m: Any, ins: Instruction) -> None:
    _skip_if(m, not m.keys[m.v[ins.x] & 0x0F])


_SET_E: dict[int, Handler] = {0x9E: _skp, 0xA1: _sknp}


# --- group F -------------------------------------------------------------

def _ld_vx_dt(m: Any, ins: Instruction) -> None:
    m.v[ins.x] = m.timer_delay
    _advance(m)


def _ld_vx_key(m: Any, ins: Instruction) -> None:
    pressed = next((k for k, down in enumerate(m.keys) if down), None)
    if pressed is not None:
        m.v[ins.x] = pressed
        _advance(m)


def _ld_dt(m: Any, ins: Instruction) -> None:
    m.timer_delay = m.v[ins.x]
    _advance(m)


def _ld_st(m: Any, ins: Instruction) -> None:
    m.timer_sound = m.v[ins.x]
    _advance(m)


def _add_i(m: Any, ins: Instruction) -> None:
    m.i = (m.i + m.v[ins.x]) & 0xFFFF
    _advance(m)


def _ld_font(m: Any, ins: Instruction) -> None:
    m.i = m.v[ins.x] * FONT_GLYPH_SIZE + FONT_OFFSET
    _advance(m)


def _ld_bcd(m: Any, ins: Instruction) -> None:
    value = m.v[ins.x]
    m.memory[m.i] = value // 100
    m.memory[m.i + 1] = (value // 10) % 10
    m.memory[m.i + 2] = value % 10
    _advance(m)


def _store_regs(m: Any, ins: Instruction) -> None:
    count = ins.x + 1
    m.memory[m.i:m.i + count] = m.v[:count]
    _advance(m)


def _load_regs(m: Any, ins: Instruction) -> None:
    count = ins.x + 1
    m.v[:count] = m.memory[m.i:m.i + count]
    _advance(m)


_SET_F: dict[int, Handler] = {
    0x07: _ld_vx_dt,
    0x0A: _ld_vx_key,
    0x15: _ld_dt,
    0x18: _ld_st,
    0x1E: _add_i,
    0x29: _ld_font,
    0x33: _ld_bcd,
    0x55: _store_regs,
    0x65: _load_regs,
}


def _from_table(table: dict[int, Handler], field: Callable[[Instruction], int]) -> Handler:
    def dispatch(m: Any, ins: Instruction) -> None:
        handler = table.get(field(ins))
        if handler is None:
            raise UndefinedOpcodeError(ins.opcode)
        handler(m, ins)

    return dispatch


_TABLE: dict[int, Handler] = {
    0x0: _group_0,
    0x1: _jp,
    0x2: _call,
    0x3: _se_byte,
    0x4: _sne_byte,
    0x5: _se_reg,
    0x6: _ld_byte,
    0x7: _add_byte,
    0x8: _from_table(_SET_8, lambda ins: ins.n),
    0x9: _sne_reg,
    0xA: _ld_i,
    0xB: _jp_v0,
    0xC: _rnd,
    0xD: _drw,
    0xE: _from_table(_SET_E, lambda ins: ins.kk),
    0xF: _from_table(_SET_F, lambda ins: ins.kk),
}


def execute(machine: Any, opcode: int) -> Instruction:
    """Decode ``opcode`` and apply it to ``machine``; return the instruction."""
    ins = Instruction.decode(opcode)
    _TABLE[ins.f](machine, ins)
    return ins