"""Data access layer for the photography studio site: galleries, photos and inquiries."""

__version__ = "0.1.0"
