"""File Favorites: bookmark files and folders and organize them in groups."""

__version__ = "0.1.0"
