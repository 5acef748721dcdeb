"""Local persistence for Anime Notes."""
