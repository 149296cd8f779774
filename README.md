# neuquant

Colour quantization of RGBA pixel data with the NeuQuant neural-net
algorithm, which uses a self-organising Kohonen network. It trains a palette
of colours, alpha included, from a sample of the image. It then maps every
pixel to its nearest palette entry.

The package is pure Python and has no runtime dependencies. Everything lives
in the `neuquant.quantizer` module.

## Installation

```
pip install .
```

## Quantizing a whole buffer

`quantize(buffer, width, height, color_count)` takes a flat RGBA byte buffer.
It returns a `bytes` object of the same length in which every pixel has been
replaced by its palette colour. The colour count is clamped to the range
4–256. The whole image is used for training (a sample factor of 1).
`width` and `height` are accepted but not used. A buffer whose length is not
a multiple of 4 raises `ValueError`.

```python
from neuquant.quantizer import quantize

pixels = bytes([255, 0, 0, 255, 0, 0, 255, 255] * 50)
out = quantize(pixels, width=10, height=10, color_count=16)
assert len(out) == len(pixels)
```

## Working with the quantizer directly

```python
from neuquant.quantizer import NeuQuant

data = bytes(40)                     # ten transparent black pixels
nq = NeuQuant(10, 256, data)         # samplefac 10, 256 colours

indices = [nq.index_of(data[i:i + 4]) for i in range(0, len(data), 4)]
palette = nq.color_map_rgba()        # flat r, g, b, a bytes
rgb = nq.color_map_rgb()             # flat r, g, b bytes
alpha = nq.color_map_alpha()         # one alpha per entry, e.g. for a PNG tRNS chunk

colour = nq.lookup(indices[0])       # 4 bytes (r, g, b, a), or None if out of range

mapped = nq.map_pixel([12, 34, 56, 255])   # nearest palette colour as 4 bytes
```

- `NeuQuant(samplefac, colors, pixels)` trains a network with `colors`
  entries on `pixels`, which is any iterable of byte values in RGBA order.
  `samplefac` sets the fraction of pixels used for training. A value of 1
  uses every pixel and gives the best result, and it is the slowest. A value
  of 10 is a good compromise. `colors` and `samplefac` below 1 raise
  `ValueError`. The learning schedule is tuned for palettes of roughly 26 to
  256 colours.
- `index_of(pixel)` and `map_pixel(pixel)` take exactly four channel values.
  Any other length raises `ValueError`. `map_pixel` returns a new `bytes`
  object and does not change its argument.
- `init(pixels)` retrains an existing quantizer on new data with the same
  settings.

## Helpers

- `is_skin_tone(r, g, b)` reports whether a colour falls within a typical
  skin-tone box in YCbCr space.
- `clamp(a)` limits an integer to 0–255.

## What it does not do

The package works on raw RGBA byte buffers only. It does not read or write
image files, it does not dither, and it has no command-line tool.

## Running the tests

```
pip install .[test]
pytest
```