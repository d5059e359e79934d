"""scribefix — context-aware homonym correction for speech transcripts."""

__version__ = "0.3.0"
