"""Service layer: one service per BookTrack resource."""
