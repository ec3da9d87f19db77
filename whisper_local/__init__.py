"""Whisper Local - local speech-to-text via a faster-whisper server in Docker"""

__version__ = "1.0.0"
