"""Utilities for the muroom admin client."""
