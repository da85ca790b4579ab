"""Infrastructure layer — HTTP API client and filesystem access.

This layer depends on stdlib and third-party libs (httpx).
It may raise domain errors but must never import from services,
commands, or output.
"""
