"""langprofile: per-language usage profile built from text signals."""

__version__ = "0.1.0"
