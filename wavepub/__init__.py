"""Waveform video publisher: render audio into spectrum videos and publish them."""
