"""
Indigo FM

Community radio station platform: a live stream, recurring weekly
programmes, a show directory and on-demand podcast episodes.

Repository Structure:
- station/: REST API, Postgres catalogue and shared models
- player/: Universal player, audio backends, station client and CLI
- tests/: Unit tests

License: MIT
"""
