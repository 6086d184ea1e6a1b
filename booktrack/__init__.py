"""BookTrack library-management backend."""

from .environment import load_environment

# Load .env-style files as soon as the package is imported so the settings,
# database engine and uvicorn entry point all see the same configuration.
load_environment()

__all__ = ["load_environment"]
