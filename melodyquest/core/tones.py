from __future__ import annotations

import numpy as np

SAMPLE_RATE = 44100


def synthesize_tone(frequency: float, duration_ms: int = 600, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Mono int16 sine with a 20 ms attack and exponential decay."""
    count = int(sample_rate * duration_ms / 1000)
    t = np.arange(count, dtype=np.float32) / sample_rate
    attack = np.minimum(1.0, t / 0.02)
    decay = np.exp(-5.0 * t / (duration_ms / 1000.0))
    wave = 0.15 * np.sin(2.0 * np.pi * frequency * t) * attack * decay
    return (wave * 32767).astype(np.int16)


__all__ = ["SAMPLE_RATE", "synthesize_tone"]
