"""NeuQuant neural-network colour quantizer for RGBA pixel data.

The network is a one-dimensional Kohonen map trained on a sample of the
image's pixels. After training it yields a palette and a fast lookup from
any RGBA colour to the nearest palette entry.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional

CHANNELS = 4

RADIUS_DEC = 48
RADIUS_BIASSHIFT = 6

ALPHA_BIASSHIFT = 10
INIT_ALPHA = 1 << ALPHA_BIASSHIFT

GAMMA = 1024.0
BETA = 1.0 / GAMMA
BETAGAMMA = BETA * GAMMA

# Four primes near 500; no image length is expected to be divisible by all.
PRIMES = (499, 491, 487, 503)

_MAX_SEARCH_DIST = 2**31 - 1

__all__ = ["NeuQuant", "clamp", "is_skin_tone", "quantize"]


def clamp(a: int) -> int:
    """Clamp an integer to the byte range 0..255."""
    return min(max(a, 0), 255)


def is_skin_tone(r: float, g: float, b: float) -> bool:
    """Return True when the colour falls in the YCbCr skin-tone box."""
    cb = 128.0 - 0.168736 * r - 0.331264 * g + 0.5 * b
    cr = 128.0 + 0.5 * r - 0.418688 * g - 0.081312 * b
    return 80.0 <= cb <= 120.0 and 133.0 <= cr <= 173.0


def _round_half_away(x: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if math.isnan(x):
        return 0
    magnitude = abs(x)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return int(whole) if x >= 0 else -int(whole)


def _rgba(pixel: Iterable[int]) -> bytes:
    data = bytes(pixel)
    if len(data) != CHANNELS:
        raise ValueError(f"a pixel must have exactly {CHANNELS} channels, got {len(data)}")
    return data


class NeuQuant:
    """A colour quantizer trained on RGBA pixel data.

    ``samplefac`` selects the fraction of pixels used for training (1 uses
    all of them and gives the best result; 10 is a good compromise).
    ``colors`` is the size of the palette.
    """

    def __init__(self, samplefac: int, colors: int, pixels: Iterable[int]) -> None:
        if colors < 1:
            raise ValueError("colors must be at least 1")
        if samplefac < 1:
            raise ValueError("samplefac must be at least 1")
        self.samplefac = samplefac
        self.netsize = colors
        self._network: list[list[float]] = []
        self._colormap: list[tuple[int, int, int, int]] = []
        self._netindex: list[int] = [0] * 256
        self._bias: list[float] = []
        self._freq: list[float] = []
        self.init(pixels)

    def init(self, pixels: Iterable[int]) -> None:
        """Reset the network and train it on ``pixels`` (RGBA bytes)."""
        data = bytes(pixels)
        size = self.netsize
        self._network = []
        for i in range(size):
            grey = i * 256.0 / size
            # Dark entries start out with low alpha.
            alpha = i * 16.0 if i < 16 else 255.0
            self._network.append([grey, grey, grey, alpha])
        self._colormap = [(0, 0, 0, 255)] * size
        self._freq = [1.0 / size] * size
        self._bias = [0.0] * size
        self._learn(data)
        self._build_colormap()
        self._build_netindex()

    def map_pixel(self, pixel: Iterable[int]) -> bytes:
        """Return the palette colour that best matches an RGBA pixel."""
        r, g, b, a = _rgba(pixel)
        return bytes(self._colormap[self._search_netindex(b, g, r, a)])

    def index_of(self, pixel: Iterable[int]) -> int:
        """Return the palette index that best matches an RGBA pixel."""
        r, g, b, a = _rgba(pixel)
        return self._search_netindex(b, g, r, a)

    def lookup(self, idx: int) -> Optional[bytes]:
        """Return the RGBA colour at ``idx``, or None if out of range."""
        if 0 <= idx < len(self._colormap):
            return bytes(self._colormap[idx])
        return None

    def color_map_rgba(self) -> bytes:
        """Return the palette as packed RGBA bytes."""
        return bytes(channel for entry in self._colormap for channel in entry)

    def color_map_rgb(self) -> bytes:
        """Return the palette as packed RGB bytes."""
        return bytes(channel for entry in self._colormap for channel in entry[:3])

    def color_map_alpha(self) -> bytes:
        """Return the alpha channel of the palette, e.g. for a PNG tRNS chunk."""
        return bytes(entry[3] for entry in self._colormap)

    def _move(self, index: int, alpha: float, target: tuple[float, float, float, float]) -> None:
        neuron = self._network[index]
        neuron[:] = [v - alpha * (v - t) for v, t in zip(neuron, target)]

    def _alter_neighbours(
        self, alpha: float, rad: int, i: int, target: tuple[float, float, float, float]
    ) -> None:
        lo = max(i - rad, 0)
        hi = min(i + rad, self.netsize)
        j, k, q = i + 1, i - 1, 0
        rad_sq = float(rad) * float(rad)
        while j < hi or k > lo:
            step_alpha = (alpha * (rad_sq - float(q) * float(q))) / rad_sq
            q += 1
            if j < hi:
                self._move(j, step_alpha, target)
                j += 1
            if k > lo:
                self._move(k, step_alpha, target)
                k -= 1

    def _contest(self, b: float, g: float, r: float, a: float) -> int:
        """Find the best biased neuron and update frequencies and biases."""
        best_d = float("inf")
        best_bias_d = best_d
        best_pos = -1
        best_bias_pos = -1
        bias = self._bias
        freq = self._freq
        for i, (nr, ng, nb, na) in enumerate(self._network):
            biased_limit = best_bias_d + bias[i]
            dist = abs(nb - b)
            dist += abs(nr - r)
            if dist < best_d or dist < biased_limit:
                dist += abs(ng - g)
                dist += abs(na - a)
                if dist < best_d:
                    best_d = dist
                    best_pos = i
                bias_dist = dist - bias[i]
                if bias_dist < best_bias_d:
                    best_bias_d = bias_dist
                    best_bias_pos = i
            freq[i] -= BETA * freq[i]
            bias[i] += BETAGAMMA * freq[i]
        freq[best_pos] += BETA
        bias[best_pos] -= BETAGAMMA
        return best_bias_pos

    def _learn(self, data: bytes) -> None:
        init_rad = self.netsize // 8
        bias_radius = init_rad * (1 << RADIUS_BIASSHIFT)
        alpha_dec = 30 + (self.samplefac - 1) // 3
        length = len(data) // CHANNELS
        sample_pixels = length // self.samplefac
        n_cycles = max(self.netsize >> 1, 100)
        if (self.netsize >> 1) <= 100:
            n_cycles = 100
        delta = sample_pixels // n_cycles or 1
        alpha = INIT_ALPHA

        rad = bias_radius >> RADIUS_BIASSHIFT
        if rad <= 1:
            rad = 0

        step = next((p for p in PRIMES if length % p != 0), PRIMES[3])
        pos = 0

        for i in range(1, sample_pixels + 1):
            offset = CHANNELS * pos
            r, g, b, a = (float(c) for c in data[offset:offset + CHANNELS])
            winner = self._contest(b, g, r, a)

            scaled_alpha = alpha / INIT_ALPHA
            target = (r, g, b, a)
            self._move(winner, scaled_alpha, target)
            if rad > 0:
                self._alter_neighbours(scaled_alpha, rad, winner, target)

            pos = (pos + step) % length

            if i % delta == 0:
                alpha -= alpha // alpha_dec
                bias_radius -= bias_radius // RADIUS_DEC
                rad = bias_radius >> RADIUS_BIASSHIFT
                if rad <= 1:
                    rad = 0

    def _build_colormap(self) -> None:
        self._colormap = [
            tuple(clamp(_round_half_away(v)) for v in neuron)  # type: ignore[misc]
            for neuron in self._network
        ]

    def _build_netindex(self) -> None:
        """Sort the palette by green and index it by green value."""
        cmap = self._colormap
        netindex = self._netindex
        size = self.netsize
        previous_col = 0
        start_pos = 0
        for i in range(size):
            small_pos = min(range(i, size), key=lambda j: cmap[j][1])
            small_val = cmap[small_pos][1]
            if small_pos != i:
                cmap[i], cmap[small_pos] = cmap[small_pos], cmap[i]
            if small_val != previous_col:
                netindex[previous_col] = (start_pos + i) >> 1
                netindex[previous_col + 1:small_val] = [i] * max(small_val - previous_col - 1, 0)
                previous_col = small_val
                start_pos = i
        max_pos = size - 1
        netindex[previous_col] = (start_pos + max_pos) >> 1
        netindex[previous_col + 1:] = [max_pos] * (255 - previous_col)

    def _search_netindex(self, b: int, g: int, r: int, a: int) -> int:
        cmap = self._colormap
        first_guess = self._netindex[g]
        best_dist = _MAX_SEARCH_DIST
        best_pos = first_guess
        for direction in (range(first_guess, self.netsize), range(first_guess - 1, -1, -1)):
            for idx in direction:
                pr, pg, pb, pa = cmap[idx]
                dist = (pg - g) ** 2
                if dist > best_dist:
                    break
                dist += (pr - r) ** 2
                if dist >= best_dist:
                    continue
                dist += (pb - b) ** 2
                if dist >= best_dist:
                    continue
                dist += (pa - a) ** 2
                if dist >= best_dist:
                    continue
                best_dist = dist
                best_pos = idx
        return best_pos


def quantize(buffer: Iterable[int], width: int, height: int, color_count: int) -> bytes:
    """Quantize RGBA ``buffer`` to at most ``color_count`` colours (4..256).

    ``width`` and ``height`` are accepted for the caller's convenience and
    are not used. Every pixel is replaced by its nearest palette colour.
    """
    data = bytes(buffer)
    if len(data) % CHANNELS:
        raise ValueError("buffer length must be a multiple of 4")
    colors = min(max(color_count, 4), 256)
    nq = NeuQuant(1, colors, data)
    return b"".join(
        nq.map_pixel(data[offset:offset + CHANNELS])
        for offset in range(0, len(data), CHANNELS)
    )