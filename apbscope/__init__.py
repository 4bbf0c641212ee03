"""Analyze APB bus transactions recorded in VCD waveform dumps."""

__version__ = "0.1.0"