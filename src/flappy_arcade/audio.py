"""
audio.py: Synthesized sound cues and the mute setting.
"""

import logging
import math
from array import array
from dataclasses import dataclass

import pygame

logger = logging.getLogger("flappy.audio")

SAMPLE_RATE = 44100


@dataclass
class AudioSettings:
    """Mute flag shared by the controller's cues and the HUD toggle."""
    muted: bool = False

    def toggle(self) -> bool:
        self.muted = not self.muted
        return self.muted


def make_tone(freq: float, length_ms: int, volume: float) -> bytes:
    """Hann-windowed sine burst as signed 16-bit stereo PCM."""
    count = int(SAMPLE_RATE * length_ms / 1000)
    samples = array("h")
    for i in range(count):
        window = 0.5 - 0.5 * math.cos(2 * math.pi * i / max(count - 1, 1))
        value = int(32767 * volume * window * math.sin(2 * math.pi * freq * i / SAMPLE_RATE))
        samples.append(value)
        samples.append(value)
    return samples.tobytes()


class SoundCues:
    """Success/hit/flap cues. Silently does nothing when no audio device is available."""

    def __init__(self, settings: AudioSettings):
        self.settings = settings
        self.sounds = {}
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=2)
            self.sounds = {
                "flap": pygame.mixer.Sound(buffer=make_tone(720, 85, 0.15)),
                "success": pygame.mixer.Sound(buffer=make_tone(1400, 120, 0.18)),
                "hit": pygame.mixer.Sound(buffer=make_tone(120, 280, 0.26)),
            }
        except pygame.error as e:
            logger.warning("Audio disabled: %s", e)

    def _play(self, name: str):
        sound = self.sounds.get(name)
        if sound is not None and not self.settings.muted:
            sound.play()

    def play_flap(self):
        self._play("flap")

    def play_success(self):
        self._play("success")

    def play_hit(self):
        self._play("hit")
