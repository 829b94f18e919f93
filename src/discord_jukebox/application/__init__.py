"""
Application Layer

Use cases and the per-guild playback engine.

Structure:
- commands/: play, skip, stop, pause/resume and volume handlers
- queries/: read-only queue inspection
- services/: search resolution, stream extraction, playback sessions and suggestions
- interfaces/: ports implemented by the infrastructure adapters
"""
