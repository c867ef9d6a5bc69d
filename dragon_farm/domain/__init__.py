"""Domain layer (pure logic).

- Keep genetics, scoring and breeding rules here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI.
- Prefer deterministic functions (randomness is passed in as a seed or generator).
"""
