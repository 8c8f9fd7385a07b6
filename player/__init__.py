"""Indigo FM listener: universal player, playback backends and station client."""
