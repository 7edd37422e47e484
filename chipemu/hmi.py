"""Window, keypad and beeper: the human-machine interface of the emulator."""

from __future__ import annotations

import math
import os
import threading
from array import array
from typing import Any, Iterable, Iterator

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from .isa import DISPLAY_HEIGHT, DISPLAY_WIDTH, KEY_COUNT  # noqa: E402
from .messages import debug  # noqa: E402

CONTEXT_WIDTH = 640
CONTEXT_HEIGHT = 320
CONTEXT_SCALE = CONTEXT_WIDTH // DISPLAY_WIDTH
WINDOW_TITLE = "CHIP-8 Emulator"

BACKGROUND = (0, 0, 0, 255)
FOREGROUND = (255, 255, 255, 255)

SAMPLE_RATE = 44100
AMPLITUDE = 8000
AUDIO_BUFFER = 4096

BOOT_BEEP = (900.0, 0.8)
BEEP = (1600.0, 0.08)

# Keypad laid out on the left half of an AZERTY keyboard:
#   1 2 3 4        1 2 3 C
#   A Z E R  --->  4 5 6 D
#   Q S D F  --->  7 8 9 E
#   W X C V        A 0 B F
KEYPAD: tuple[int, ...] = (
    pygame.K_x,  # 0
    pygame.K_1,  # 1
    pygame.K_2,  # 2
    pygame.K_3,  # 3
    pygame.K_a,  # 4
    pygame.K_z,  # 5
    pygame.K_e,  # 6
    pygame.K_q,  # 7
    pygame.K_s,  # 8
    pygame.K_d,  # 9
    pygame.K_w,  # A
    pygame.K_c,  # B
    pygame.K_4,  # C
    pygame.K_r,  # D
    pygame.K_f,  # E
    pygame.K_v,  # F
)
assert len(KEYPAD) == KEY_COUNT

_KEY_TO_INDEX = {key: index for index, key in enumerate(KEYPAD)}


def key_index(key: int) -> int | None:
    """Return the keypad index bound to a keyboard key, or ``None``."""
    return _KEY_TO_INDEX.get(key)


def lit_cells(gfx: Iterable[int]) -> Iterator[tuple[int, int]]:
    """Yield the ``(x, y)`` coordinates of every lit display cell, row by row."""
    for index, pixel in enumerate(gfx):
        if pixel:
            y, x = divmod(index, DISPLAY_WIDTH)
            yield x, y


class Beeper:
    """A decaying square-wave tone generator, safe to drive from two threads."""

    def __init__(self, sample_rate: int = SAMPLE_RATE, amplitude: int = AMPLITUDE) -> None:
        if sample_rate <= 0:
            raise ValueError("sample rate must be positive")
        self.sample_rate = sample_rate
        self.amplitude = amplitude
        self._freq = 0.0
        self._duration = 0.0
        self._cursor = 0.0
        self._playing = False
        self._lock = threading.Lock()

    @property
    def playing(self) -> bool:
        with self._lock:
            return self._playing

    @property
    def remaining(self) -> int:
        """Number of samples still to be produced by the current tone."""
        with self._lock:
            if not self._playing:
                return 0
            return max(0, math.ceil(self._duration - self._cursor))

    def start(self, freq: float, duration_secs: float) -> None:
        """Begin a new tone, replacing any tone in progress."""
        with self._lock:
            self._freq = freq
            self._duration = duration_secs * self.sample_rate
            self._cursor = 0.0
            self._playing = True

    def render(self, count: int) -> list[int]:
        """Produce the next ``count`` signed 16-bit samples."""
        samples: list[int] = []
        with self._lock:
            for _ in range(count):
                if self._playing and self._duration > self._cursor:
                    t = self._cursor / self.sample_rate
                    decay = max(0.0, 1.0 - self._cursor / self._duration)
                    sign = 1 if math.sin(2 * math.pi * self._freq * t) > 0 else -1
                    samples.append(int(self.amplitude * decay * sign))
                    self._cursor += 1
                else:
                    samples.append(0)
                    if self._playing:
                        self._playing = False
                        self._cursor = 0.0
        return samples


class Hmi:
    """A pygame window showing the display, reading the keypad and beeping."""

    def __init__(self) -> None:
        try:
            pygame.display.init()
        except pygame.error as exc:
            raise RuntimeError(f"SDL Initialisation Failed: {exc}") from exc
        try:
            self._screen = pygame.display.set_mode((CONTEXT_WIDTH, CONTEXT_HEIGHT))
        except pygame.error as exc:
            pygame.quit()
            raise RuntimeError(f"SDL Window Creation Failed: {exc}") from exc
        pygame.display.set_caption(WINDOW_TITLE)
        debug("Created window.")
        try:
            pygame.mixer.init(
                frequency=SAMPLE_RATE, size=-16, channels=1, buffer=AUDIO_BUFFER
            )
        except pygame.error as exc:
            pygame.quit()
            raise RuntimeError(f"Audio device error: {exc}") from exc
        frequency, _format, channels = pygame.mixer.get_init()
        self._channels = channels
        self._beeper = Beeper(sample_rate=frequency)
        self._sound: pygame.mixer.Sound | None = None
        debug("Created audio device.")
        self.running = True

    def __enter__(self) -> "Hmi":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def handle_events(self, machine: Any) -> bool:
        """Apply pending window events to the keypad; return whether to keep running."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
                index = key_index(event.key)
                if index is not None:
                    machine.keys[index] = 1 if event.type == pygame.KEYDOWN else 0
        return self.running

    def update_video(self, machine: Any) -> None:
        """Redraw the window from the machine's display buffer."""
        self._screen.fill(BACKGROUND)
        for x, y in lit_cells(machine.gfx):
            rect = pygame.Rect(
                x * CONTEXT_SCALE, y * CONTEXT_SCALE, CONTEXT_SCALE, CONTEXT_SCALE
            )
            self._screen.fill(FOREGROUND, rect)
        pygame.display.flip()

    def _play(self, freq: float, duration_secs: float) -> None:
        self._beeper.start(freq, duration_secs)
        mono = self._beeper.render(self._beeper.remaining)
        if not mono:
            return
        samples = array("h", (s for s in mono for _ in range(self._channels)))
        pygame.mixer.stop()
        self._sound = pygame.mixer.Sound(buffer=samples.tobytes())
        self._sound.play()

    def boot_beep(self) -> None:
        """Play the long start-up tone."""
        self._play(*BOOT_BEEP)

    def beep(self) -> None:
        """Play the short sound-timer tone."""
        self._play(*BEEP)

    def close(self) -> None:
        """Release audio and the window."""
        if pygame.mixer.get_init():
            pygame.mixer.quit()
        pygame.display.quit()
        pygame.quit()
        self.running = False