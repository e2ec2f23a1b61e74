"""
Block-based sound synthesis with NumPy.

Oscillators, envelopes, stereo panning and the shared output stage (master
gain and reverb). Everything renders in blocks of frames and keeps its state
between blocks, so a voice can sound for as long as it is held.

Audio blocks are float arrays of shape (2, frames): row 0 is the left
channel, row 1 the right.
"""

import math

import numpy as np

from image_to_sound.models import AudioParameters, SynthParams, Timbre, Waveform

# Fourier-series shapes used when a voice has timbre settings
_HARMONIC_SHAPES = {
    Waveform.SINE: lambda n: 1.0 if n == 1 else 0.0,
    Waveform.TRIANGLE: lambda n: (
        (8 / math.pi**2) * (-1) ** ((n - 1) // 2) / n**2 if n % 2 else 0.0
    ),
    Waveform.SAWTOOTH: lambda n: (2 / math.pi) * (-1) ** (n + 1) / n,
    Waveform.SQUARE: lambda n: (4 / math.pi) / n if n % 2 else 0.0,
}

# Schroeder comb delays at 44.1 kHz
_COMB_DELAYS = (1116, 1188, 1277, 1356)


# ---------- Oscillators ----------


def naive_waveform(waveform: Waveform, phase: np.ndarray) -> np.ndarray:
    """Evaluate a waveform at phases given in cycles (0-1)."""
    if waveform == Waveform.SINE:
        return np.sin(2.0 * np.pi * phase)
    if waveform == Waveform.TRIANGLE:
        return 4.0 * np.abs(phase - 0.5) - 1.0
    if waveform == Waveform.SAWTOOTH:
        return 2.0 * phase - 1.0
    return np.where(phase < 0.5, 1.0, -1.0)


def harmonic_weights(
    waveform: Waveform, frequency: float, timbre: Timbre, sample_rate: int
) -> tuple[np.ndarray, np.ndarray]:
    """Harmonic numbers and amplitudes for a band-limited voice.

    Harmonics above ``timbre.harmonic_count`` or the Nyquist frequency are
    dropped. The rest are shaped by a gentle low-pass around the timbre's
    cutoff, with a resonant bump of height ``timbre.resonance`` at the cutoff.

    Returns:
        Tuple of (harmonic numbers, amplitudes), both 1D arrays.
    """
    nyquist = sample_rate / 2
    numbers: list[int] = []
    amplitudes: list[float] = []
    for n in range(1, timbre.harmonic_count + 1):
        partial = n * frequency
        if partial >= nyquist:
            break
        amplitude = _HARMONIC_SHAPES[waveform](n)
        if amplitude == 0.0:
            continue
        ratio = partial / timbre.filter_cutoff
        amplitude /= math.sqrt(1.0 + ratio**2)
        amplitude *= 1.0 + timbre.resonance * math.exp(-(((ratio - 1.0) / 0.25) ** 2))
        numbers.append(n)
        amplitudes.append(amplitude)
    if not numbers:
        numbers, amplitudes = [1], [1.0]
    return np.array(numbers, dtype=np.float64), np.array(amplitudes, dtype=np.float64)


def pan_gains(pan: float) -> tuple[float, float]:
    """Equal-power left and right gains for a pan position in [-1, 1]."""
    angle = (max(-1.0, min(1.0, pan)) + 1.0) * math.pi / 4
    return math.cos(angle), math.sin(angle)


# ---------- Envelopes ----------


class Envelope:
    """Attack/decay/sustain/release gain curve evaluated block by block.

    Time is counted in samples since note-on. The release can be scheduled
    ahead (for notes of known duration) or triggered immediately.
    """

    def __init__(
        self,
        attack: float,
        decay: float,
        sustain: float,
        release: float,
        sample_rate: int,
    ):
        self.attack = max(attack, 1e-4)
        self.decay = max(decay, 1e-4)
        self.sustain = sustain
        self.release_time = max(release, 1e-4)
        self.sample_rate = sample_rate
        self.position = 0
        self.release_at: int | None = None

    def _held(self, t: np.ndarray) -> np.ndarray:
        """Gain while the note is held: attack ramp, decay, then sustain."""
        decay_part = np.maximum(
            1.0 - (1.0 - self.sustain) * (t - self.attack) / self.decay, self.sustain
        )
        return np.where(t < self.attack, t / self.attack, decay_part)

    def render(self, frames: int) -> np.ndarray:
        """Gain values for the next ``frames`` samples."""
        t = (self.position + np.arange(frames)) / self.sample_rate
        gain = self._held(t)
        if self.release_at is not None:
            release_t = self.release_at / self.sample_rate
            start_level = float(self._held(np.array([release_t]))[0])
            released = start_level * np.clip(
                1.0 - (t - release_t) / self.release_time, 0.0, 1.0
            )
            gain = np.where(t >= release_t, released, gain)
        self.position += frames
        return gain

    def schedule_release(self, sample: int) -> None:
        """Start the release at an absolute sample position."""
        self.release_at = max(0, int(sample))

    def release(self) -> None:
        """Start the release now, unless it has already started."""
        if self.release_at is None or self.release_at > self.position:
            self.release_at = self.position

    @property
    def releasing(self) -> bool:
        return self.release_at is not None and self.position >= self.release_at

    @property
    def finished(self) -> bool:
        if self.release_at is None:
            return False
        end = self.release_at + int(math.ceil(self.release_time * self.sample_rate))
        return self.position >= end


# ---------- Voices ----------


class SynthVoice:
    """One oscillator with an envelope, rendered to stereo blocks.

    Args:
        params: Audio parameters of the voice.
        synth: Shared synthesis settings (sample rate, decay, sustain).
        duration: Seconds until the release starts on its own, or None to
            hold until ``release`` is called.
    """

    def __init__(
        self,
        params: AudioParameters,
        synth: SynthParams,
        duration: float | None = None,
    ):
        self.params = params
        self.sample_rate = synth.sample_rate
        self._phase = 0.0
        self._increment = params.frequency / synth.sample_rate
        self._left, self._right = pan_gains(params.pan)

        self._harmonics: tuple[np.ndarray, np.ndarray] | None = None
        if params.timbre is not None:
            self._harmonics = harmonic_weights(
                params.waveform, params.frequency, params.timbre, synth.sample_rate
            )

        self.envelope = Envelope(
            attack=params.attack,
            decay=synth.decay,
            sustain=synth.sustain,
            release=params.release,
            sample_rate=synth.sample_rate,
        )
        if duration is not None:
            self.envelope.schedule_release(duration * synth.sample_rate)

    def _oscillate(self, phase: np.ndarray) -> np.ndarray:
        if self._harmonics is None:
            return naive_waveform(self.params.waveform, phase)
        numbers, amplitudes = self._harmonics
        partials = np.sin(2.0 * np.pi * np.outer(numbers, phase))
        return amplitudes @ partials

    def render(self, frames: int) -> np.ndarray:
        """Render the next ``frames`` samples as a (2, frames) block."""
        phase = (self._phase + self._increment * np.arange(frames)) % 1.0
        self._phase = (self._phase + self._increment * frames) % 1.0

        mono = self._oscillate(phase) * self.envelope.render(frames) * self.params.volume
        return np.stack([mono * self._left, mono * self._right])

    def release(self) -> None:
        self.envelope.release()

    @property
    def finished(self) -> bool:
        return self.envelope.finished


# ---------- Output stage ----------


class ReverbStage:
    """Parallel feedback comb reverb with state kept across blocks.

    Args:
        decay: Time in seconds for the tail to fall by 60 dB.
        wet: Share of reverberated signal in the output (0-1).
        sample_rate: Sample rate in Hz.
    """

    def __init__(self, decay: float, wet: float, sample_rate: int):
        self.wet = wet
        scale = sample_rate / 44100
        self._delays = [max(1, int(d * scale)) for d in _COMB_DELAYS]
        self._feedback = [10 ** (-3 * d / (decay * sample_rate)) for d in self._delays]
        self._history = [np.zeros(d) for d in self._delays]

    def _process_chunk(self, mono: np.ndarray) -> np.ndarray:
        frames = len(mono)
        out = np.zeros(frames)
        for i, (delay, feedback) in enumerate(zip(self._delays, self._feedback)):
            history = self._history[i]
            comb = mono + feedback * history[:frames]
            self._history[i] = np.concatenate([history[frames:], comb])
            out += comb
        return out / len(self._delays)

    def process(self, block: np.ndarray) -> np.ndarray:
        """Mix reverb into a (2, frames) block."""
        frames = block.shape[1]
        if self.wet <= 0.0 or frames == 0:
            return block
        mono = block.mean(axis=0)
        # A comb can only look back one delay length per pass
        step = min(self._delays)
        tail = np.concatenate(
            [self._process_chunk(mono[i : i + step]) for i in range(0, frames, step)]
        )
        return (1.0 - self.wet) * block + self.wet * tail[None, :]

    def reset(self) -> None:
        self._history = [np.zeros(d) for d in self._delays]


class MasterBus:
    """Shared output stage: reverb followed by the master gain."""

    def __init__(self, synth: SynthParams, gain: float = 0.3):
        self.gain = gain
        self.reverb = ReverbStage(synth.reverb_decay, synth.reverb_wet, synth.sample_rate)

    def process(self, block: np.ndarray) -> np.ndarray:
        out = self.reverb.process(block) * self.gain
        return np.clip(out, -1.0, 1.0)

    def reset(self) -> None:
        self.reverb.reset()
