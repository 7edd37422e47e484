import pytest

from chipemu.chip8 import Chip8
from chipemu.cli import main, run
from chipemu.isa import UndefinedOpcodeError


class FakeHmi:
    def __init__(self, limit):
        self.limit = limit
        self.running = True
        self.events = 0
        self.beeps = 0
        self.frames = []

    def handle_events(self, machine):
        self.events += 1
        if self.events >= self.limit:
            self.running = False
        return self.running

    def beep(self):
        self.beeps += 1

    def update_video(self, machine):
        self.frames.append(bytes(machine.gfx))


def _machine(program):
    machine = Chip8()
    machine.load_bytes(bytes(program))
    return machine


def test_run_counts_cycles_until_stopped():
    machine = _machine([0x12, 0x00])  # JP 0x200
    hmi = FakeHmi(limit=5)
    assert run(machine, hmi, 0) == 5
    assert machine.pc == 0x200


def test_run_redraws_after_clear():
    machine = _machine([0x00, 0xE0, 0x12, 0x02])
    hmi = FakeHmi(limit=3)
    run(machine, hmi, 0)
    assert len(hmi.frames) == 1
    assert machine.flag_draw is False


def test_run_beeps_when_sound_timer_ticks():
    # V0 = 5; ST = V0; loop forever
    machine = _machine([0x60, 0x05, 0xF0, 0x18, 0x12, 0x04])
    hmi = FakeHmi(limit=13)
    run(machine, hmi, 0)
    assert hmi.beeps == 1
    assert machine.timer_sound == 4
    assert machine.flag_sound is False


def test_run_propagates_undefined_opcode():
    machine = _machine([0xFF, 0xFF])
    with pytest.raises(UndefinedOpcodeError):
        run(machine, FakeHmi(limit=10), 0)


def test_run_does_nothing_when_stopped():
    machine = _machine([0x12, 0x00])
    hmi = FakeHmi(limit=1)
    hmi.running = False
    assert run(machine, hmi, 0) == 0


def test_main_missing_rom(tmp_path, capsys):
    assert main([str(tmp_path / "missing.ch8")]) == 1
    assert "ROM not found." in capsys.readouterr().out


def test_main_without_arguments_reverts_to_test_rom(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main([]) == 1
    out = capsys.readouterr().out
    assert "Expected usage: EMU ROM" in out
    assert "Reverting to test ROM..." in out
    assert "ROM not found." in out


def test_main_rom_too_large(tmp_path, capsys):
    rom = tmp_path / "big.ch8"
    rom.write_bytes(bytes(0x1000))
    assert main([str(rom)]) == 1
    assert "Not enough memory space for ROM." in capsys.readouterr().out