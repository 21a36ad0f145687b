"""worktrack - schema-typed, versioned work items over a JSON:API-shaped HTTP API.

Invariants:
    - Package root holds only the version (no import side effects)
"""

__version__ = "0.1.0"
