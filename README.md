# chipemu

A CHIP-8 interpreter. It runs 64×32 monochrome CHIP-8 programs in a
640×320 pygame window, reads a sixteen-key hex keypad from the keyboard
and plays a short square-wave beep whenever the sound timer fires.

## Installing

```
pip install .
```

This pulls in `pygame`, which is used for the window, the keyboard and
the audio output.

## Running a program

```
chipemu path/to/program.ch8
```

When no ROM is given, the emulator prints an error and a warning and
falls back to `test/test_opcode.ch8` relative to the current directory.

The ROM is loaded at address `0x200`, after the built-in hex font at
`0x000`. A ROM larger than the free 3584 bytes, or one that cannot be
found or read, is rejected with an error message and exit status 1.

On start-up a long tone plays. The interpreter then runs at roughly 700
instructions a second; the delay and sound timers count down once every
12 instructions, about 60 Hz. Each time the sound timer counts down, a
short beep plays.

Close the window to stop. The whole 4 KiB memory image is then written to
`mem_dump.bin` in the current directory.

An undefined opcode, a call nested deeper than 16 levels or a return with
an empty stack stops the program with an error message and exit status 1;
no memory dump is written in that case.

Set the environment variable `CHIPEMU_DEBUG=1` to have trace lines
written to standard error.

## Keypad

The CHIP-8 keypad is mapped onto the left-hand side of an AZERTY
keyboard:

```
Keyboard            CHIP-8
1  2  3  4          1  2  3  C
A  Z  E  R          4  5  6  D
Q  S  D  F          7  8  9  E
W  X  C  V          A  0  B  F
```

## Using it as a library

`chipemu.chip8.Chip8` holds the machine and does not depend on the
window, so it can be driven directly:

```python
from chipemu.chip8 import Chip8

machine = Chip8()
machine.load_bytes(bytes([0x60, 0x2A, 0x12, 0x02]))  # V0 = 0x2A; loop
machine.cycle()
assert machine.v[0] == 0x2A
assert machine.pc == 0x202
```

The machine exposes `memory`, `v`, `i`, `pc`, `stack`, `gfx`, `keys`,
`timer_delay`, `timer_sound`, `flag_draw` and `flag_sound`. Besides
`load_bytes` and `cycle` it has `load_rom(path)`, `fetch()`,
`update_timers()`, `reset()` and `dump_state(path="mem_dump.bin")`.
A `random.Random` may be passed to `Chip8(rng)` to make the `CXKK`
instruction reproducible.

`chipemu.isa.execute(machine, opcode)` runs a single opcode and returns
the decoded `Instruction`; `chipemu.isa.Instruction.decode(opcode)`
splits an opcode into its `f`, `x`, `y`, `n`, `kk` and `nnn` fields.
Faults are raised as subclasses of `chipemu.isa.Chip8Error`:
`UndefinedOpcodeError`, `StackOverflowError`, `StackUnderflowError` and
`chipemu.chip8.RomError`.

`chipemu.hmi.Beeper` generates the decaying square-wave tone as signed
16-bit samples, and `chipemu.cli.run(machine, hmi, cycle_delay)` is the
main loop used by the command.

## Tests

```
pip install .[test]
pytest
```