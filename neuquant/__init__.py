"""NeuQuant neural-net colour quantization for RGBA pixel buffers."""

__version__ = "0.0.1"