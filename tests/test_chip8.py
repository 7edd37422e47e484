import random

import pytest

from chipemu.chip8 import (
    CYCLES_PER_TIMER_UPDATE,
    FONT,
    MEMORY_SIZE,
    PROGRAM_OFFSET,
    Chip8,
    RomError,
)


@pytest.fixture
def m():
    return Chip8(rng=random.Random(7))


def test_initial_state(m):
    assert m.pc == PROGRAM_OFFSET
    assert len(m.memory) == MEMORY_SIZE
    assert bytes(m.memory[:len(FONT)]) == FONT
    assert bytes(m.memory[:5]) == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])
    assert not any(m.v) and m.stack == [] and not any(m.gfx)


def test_load_bytes_places_program(m):
    m.load_bytes(b"\x12\x34\x56")
    assert bytes(m.memory[PROGRAM_OFFSET:PROGRAM_OFFSET + 3]) == b"\x12\x34\x56"
    assert m.memory[PROGRAM_OFFSET + 3] == 0


def test_load_bytes_fills_all_free_space(m):
    data = bytes(range(256)) * ((MEMORY_SIZE - PROGRAM_OFFSET) // 256)
    m.load_bytes(data)
    assert bytes(m.memory[PROGRAM_OFFSET:]) == data


def test_load_bytes_too_large(m):
    with pytest.raises(RomError, match="Not enough memory space for ROM."):
        m.load_bytes(bytes(MEMORY_SIZE - PROGRAM_OFFSET + 1))


def test_load_rom_from_file(m, tmp_path):
    rom = tmp_path / "game.ch8"
    rom.write_bytes(b"\x00\xE0\x12\x00")
    m.load_rom(rom)
    assert m.fetch() == 0x00E0


def test_load_rom_missing(m, tmp_path):
    with pytest.raises(RomError, match="ROM not found."):
        m.load_rom(tmp_path / "missing.ch8")


def test_dump_state_roundtrip(m, tmp_path, capsys):
    m.load_bytes(b"\xAB\xCD")
    out = m.dump_state(tmp_path / "dump.bin")
    assert out.read_bytes() == bytes(m.memory)
    assert len(out.read_bytes()) == MEMORY_SIZE
    assert "Memory dumped successfully." in capsys.readouterr().out


def test_cycle_executes_instruction(m):
    m.load_bytes(b"\x6A\x42\x12\x00")
    ins = m.cycle()
    assert ins.opcode == 0x6A42
    assert m.v[0xA] == 0x42
    assert m.pc == PROGRAM_OFFSET + 2
    m.cycle()
    assert m.pc == PROGRAM_OFFSET


def test_update_timers_ticks_every_period(m):
    m.timer_delay = 3
    m.timer_sound = 1
    for _ in range(CYCLES_PER_TIMER_UPDATE - 1):
        m.update_timers()
    assert m.timer_delay == 3 and m.timer_sound == 1 and not m.flag_sound
    m.update_timers()
    assert m.timer_delay == 2
    assert m.timer_sound == 0
    assert m.flag_sound


def test_update_timers_stop_at_zero(m):
    for _ in range(CYCLES_PER_TIMER_UPDATE * 3):
        m.update_timers()
    assert m.timer_delay == 0 and m.timer_sound == 0
    assert not m.flag_sound


def test_reset_restores_state(m):
    m.load_bytes(b"\xFF\xFF")
    m.v[3] = 9
    m.stack.append(0x300)
    m.pc = 0x400
    m.reset()
    assert m.pc == PROGRAM_OFFSET
    assert m.v[3] == 0 and m.stack == []
    assert m.memory[PROGRAM_OFFSET] == 0