import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from neuquant.quantizer import NeuQuant, clamp, is_skin_tone, quantize


def _gradient(count):
    return bytes(
        channel
        for i in range(count)
        for channel in (i % 256, 255 - i % 256, (i * 7) % 256, 255)
    )


def test_clamp_bounds():
    assert clamp(-5) == 0
    assert clamp(300) == 255
    assert clamp(100) == 100


def test_skin_tone_detection():
    assert is_skin_tone(224, 172, 105) is True
    assert is_skin_tone(0, 0, 0) is False


def test_uniform_image_maps_exactly():
    color = bytes([10, 200, 30, 255])
    nq = NeuQuant(1, 16, color * 64)
    assert nq.map_pixel(color) == color
    assert nq.lookup(nq.index_of(color)) == color


def test_palette_lengths():
    nq = NeuQuant(1, 32, _gradient(300))
    assert len(nq.color_map_rgba()) == 32 * 4
    assert len(nq.color_map_rgb()) == 32 * 3
    assert len(nq.color_map_alpha()) == 32


def test_palette_views_agree():
    nq = NeuQuant(3, 16, _gradient(200))
    rgba = nq.color_map_rgba()
    rgb = nq.color_map_rgb()
    alpha = nq.color_map_alpha()
    rebuilt = b"".join(rgb[3 * i:3 * i + 3] + alpha[i:i + 1] for i in range(16))
    assert rebuilt == rgba
    assert b"".join(nq.lookup(i) for i in range(16)) == rgba


def test_palette_sorted_by_green():
    nq = NeuQuant(1, 32, _gradient(400))
    greens = list(nq.color_map_rgb()[1::3])
    assert greens == sorted(greens)


def test_lookup_out_of_range():
    nq = NeuQuant(10, 16, _gradient(50))
    assert nq.lookup(16) is None
    assert nq.lookup(-1) is None


def test_untrained_network_initial_alpha():
    nq = NeuQuant(10, 32, b"")
    alpha = nq.color_map_alpha()
    assert alpha[:16] == bytes(range(0, 256, 16))
    assert alpha[16:] == bytes([255]) * 16


def test_untrained_network_is_grey():
    nq = NeuQuant(10, 16, b"")
    rgb = nq.color_map_rgb()
    assert all(rgb[i] == rgb[i + 1] == rgb[i + 2] for i in range(0, len(rgb), 3))


def test_init_retrains():
    nq = NeuQuant(1, 16, _gradient(100))
    color = bytes([90, 20, 140, 255])
    nq.init(color * 40)
    assert nq.map_pixel(color) == color


def test_invalid_colors():
    with pytest.raises(ValueError):
        NeuQuant(1, 0, _gradient(10))


def test_invalid_samplefac():
    with pytest.raises(ValueError):
        NeuQuant(0, 16, _gradient(10))


def test_pixel_must_have_four_channels():
    nq = NeuQuant(10, 16, _gradient(20))
    with pytest.raises(ValueError):
        nq.index_of(b"\x00\x01\x02")
    with pytest.raises(ValueError):
        nq.map_pixel(b"\x00\x01\x02\x03\x04")


def test_quantize_length_and_uniform():
    color = bytes([40, 80, 120, 255])
    buffer = color * 50
    result = quantize(buffer, 10, 5, 16)
    assert result == buffer


def test_quantize_clamps_low_color_count():
    buffer = _gradient(256)
    result = quantize(buffer, 16, 16, 2)
    assert len(result) == len(buffer)
    distinct = {result[i:i + 4] for i in range(0, len(result), 4)}
    assert 1 <= len(distinct) <= 4


def test_quantize_matches_quantizer():
    buffer = _gradient(120)
    nq = NeuQuant(1, 16, buffer)
    expected = b"".join(nq.map_pixel(buffer[i:i + 4]) for i in range(0, len(buffer), 4))
    assert quantize(buffer, 12, 10, 16) == expected


def test_quantize_rejects_partial_pixel():
    with pytest.raises(ValueError):
        quantize(b"\x01\x02\x03\x04\x05", 1, 1, 16)


_pixels = st.lists(
    st.tuples(*[st.integers(min_value=0, max_value=255)] * 4), min_size=1, max_size=40
).map(lambda px: bytes(c for p in px for c in p))


@settings(max_examples=25, deadline=None)
@given(_pixels)
def test_mapping_invariants(data):
    nq = NeuQuant(1, 16, data)
    for offset in range(0, len(data), 4):
        pixel = data[offset:offset + 4]
        idx = nq.index_of(pixel)
        assert 0 <= idx < 16
        assert nq.lookup(idx) == nq.map_pixel(pixel)


@settings(max_examples=25, deadline=None)
@given(_pixels)
def test_palette_colour_maps_to_itself(data):
    nq = NeuQuant(1, 16, data)
    for idx in range(16):
        entry = nq.lookup(idx)
        assert nq.map_pixel(entry) == entry