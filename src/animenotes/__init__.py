"""Anime Notes - per-anime notes kept locally and mirrored to AniList."""

__version__ = "0.1.0"
