"""Indigo FM station backend: catalogue database, REST API and shared models."""
