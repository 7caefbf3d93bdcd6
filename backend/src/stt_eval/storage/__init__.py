"""Blob storage for recorded audio clips."""

from stt_eval.storage.audio import AudioStorageError, AudioStore, get_audio_store

__all__ = ["AudioStorageError", "AudioStore", "get_audio_store"]
