"""Deterministic world and cache engine for a location-based collecting game."""
