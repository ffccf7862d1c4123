"""
Reaction-time signal pipeline.

Turns a game's per-trial RT series into spectral features:

  preprocess_rt     — drop anticipations, winsorize, impute misses, detrend, Hann window
  extract_features  — zero-pad, radix-2 FFT, band power fractions, peak frequency

All functions are pure and work on plain lists. Degenerate input (no valid RTs,
empty series, zero spectral power) yields zeros rather than an error.
"""
from __future__ import annotations

import math
import statistics
from typing import Sequence

MIN_RT_MS = 150
MAX_RT_MS = 3000
# Scales the MAD to a standard-deviation estimate under normality.
MAD_SCALE = 1.4826
IMPUTE_SIGMAS = 2

# (low, high] band edges in Hz
BANDS = {
    "r_l": (0.01, 0.05),
    "r_m": (0.05, 0.10),
    "r_h": (0.10, 0.25),
}

ZERO_FEATURES = {"r_l": 0.0, "r_m": 0.0, "r_h": 0.0, "fpeak": 0.0, "slope": 0.0}


def median_absolute_deviation(values: Sequence[float], center: float | None = None) -> float:
    """Median of absolute deviations from *center* (defaults to the upper median)."""
    if not values:
        return 0.0
    if center is None:
        center = statistics.median_high(values)
    return statistics.median_high([abs(v - center) for v in values])


def linear_detrend(values: Sequence[float]) -> list[float]:
    """Subtract the ordinary-least-squares line fitted over the sample index."""
    n = len(values)
    if n == 0:
        return []
    sum_x = sum_y = sum_xy = sum_xx = 0.0
    for i, y in enumerate(values):
        sum_x += i
        sum_y += y
        sum_xy += i * y
        sum_xx += i * i
    denominator = n * sum_xx - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator else 0.0
    intercept = (sum_y - slope * sum_x) / n
    return [y - (slope * i + intercept) for i, y in enumerate(values)]


def hann_window(values: Sequence[float]) -> list[float]:
    n = len(values)
    if n < 2:
        return [float(v) for v in values]
    return [v * 0.5 * (1 - math.cos(2 * math.pi * i / (n - 1))) for i, v in enumerate(values)]


def preprocess_rt(
    raw_rts: Sequence[float | None],
    min_rt: float = MIN_RT_MS,
    max_rt: float = MAX_RT_MS,
) -> list[float]:
    """
    Clean an RT series for spectral analysis. Output has the same length as input.

    1. None stays None (miss); RTs below *min_rt* become None (anticipation);
       RTs above *max_rt* are winsorized to *max_rt*.
    2. With no valid RTs left the result is all zeros.
    3. Misses are imputed as median + 2 * 1.4826 * MAD of the valid RTs.
    4. The series is linearly detrended, then Hann-windowed.
    """
    cleaned = []
    for rt in raw_rts:
        if rt is None or rt < min_rt:
            cleaned.append(None)
        elif rt > max_rt:
            cleaned.append(float(max_rt))
        else:
            cleaned.append(float(rt))

    valid = [rt for rt in cleaned if rt is not None]
    if not valid:
        return [0.0] * len(raw_rts)

    median = statistics.median_high(valid)
    mad = median_absolute_deviation(valid, center=median)
    imputed = median + IMPUTE_SIGMAS * MAD_SCALE * mad

    filled = [imputed if rt is None else rt for rt in cleaned]
    return hann_window(linear_detrend(filled))


def next_power_of_two(n: int) -> int:
    size = 1
    while size < n:
        size *= 2
    return size


def fft_in_place(real: list[float], imag: list[float]) -> None:
    """
    Iterative radix-2 Cooley-Tukey FFT (decimation in time), in place.

    Both lists must have the same power-of-two length.
    """
    n = len(real)
    if n != len(imag):
        raise ValueError("real and imag must have the same length")
    if n <= 1:
        return
    if n & (n - 1):
        raise ValueError(f"FFT length must be a power of two, got {n}")

    # Bit-reversal permutation
    j = 0
    for i in range(n - 1):
        if i < j:
            real[i], real[j] = real[j], real[i]
            imag[i], imag[j] = imag[j], imag[i]
        m = n >> 1
        while m >= 1 and j >= m:
            j -= m
            m >>= 1
        j += m

    size = 2
    while size <= n:
        half = size // 2
        angle_step = -2 * math.pi / size
        for start in range(0, n, size):
            for k in range(half):
                angle = k * angle_step
                w_real = math.cos(angle)
                w_imag = math.sin(angle)
                even, odd = start + k, start + k + half
                t_real = w_real * real[odd] - w_imag * imag[odd]
                t_imag = w_real * imag[odd] + w_imag * real[odd]
                real[odd] = real[even] - t_real
                imag[odd] = imag[even] - t_imag
                real[even] += t_real
                imag[even] += t_imag
        size *= 2


def power_spectrum(series: Sequence[float], cycle_ms: float) -> tuple[list[float], list[float]]:
    """
    Return (freqs, powers) for bins 1 .. n/2 - 1 of the zero-padded series.

    The sampling rate is one sample per trial cycle, i.e. 1000 / cycle_ms Hz.
    """
    n = next_power_of_two(len(series))
    real = [float(v) for v in series] + [0.0] * (n - len(series))
    imag = [0.0] * n
    fft_in_place(real, imag)

    resolution = (1000.0 / cycle_ms) / n
    freqs = []
    powers = []
    for i in range(1, n // 2):
        freqs.append(i * resolution)
        powers.append((real[i] * real[i] + imag[i] * imag[i]) / n)
    return freqs, powers


def extract_features(series: Sequence[float], cycle_ms: float) -> dict:
    """
    Compute spectral features of a preprocessed RT series.

    Returns dict with:
      r_l, r_m, r_h  — fraction of total power in the (0.01, 0.05], (0.05, 0.10]
                       and (0.10, 0.25] Hz bands
      fpeak          — frequency (Hz) of the strongest bin
      slope          — first element of the linearly detrended power spectrum.
                       This is not a spectral slope in the usual sense; it is kept
                       as-is so stored values stay comparable across versions.
    """
    if not series or not cycle_ms or cycle_ms <= 0:
        return dict(ZERO_FEATURES)

    freqs, powers = power_spectrum(series, cycle_ms)
    total_power = sum(powers)
    if total_power == 0:
        return dict(ZERO_FEATURES)

    band_power = dict.fromkeys(BANDS, 0.0)
    max_power = 0.0
    fpeak = 0.0
    for freq, power in zip(freqs, powers):
        for name, (low, high) in BANDS.items():
            if low < freq <= high:
                band_power[name] += power
        if power > max_power:
            max_power = power
            fpeak = freq

    features = {name: band_power[name] / total_power for name in BANDS}
    features["fpeak"] = fpeak
    features["slope"] = linear_detrend(powers)[0]
    return features


def spectral_features(raw_rts: Sequence[float | None], cycle_ms: float) -> dict:
    """Run the full pipeline: preprocess_rt followed by extract_features."""
    return extract_features(preprocess_rt(raw_rts), cycle_ms)
