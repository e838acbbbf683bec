"""Puzzle backends."""
