"""Synthetic map-data engine: H3 weather cells and road-risk hotspots."""
