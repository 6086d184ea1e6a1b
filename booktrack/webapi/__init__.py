"""FastAPI web layer for the BookTrack backend."""
