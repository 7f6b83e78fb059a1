"""Flappy Bird arcade game with a small score server."""

__version__ = "1.0.0"
