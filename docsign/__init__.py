"""Client-side signature capture and placement for PDF documents."""

__version__ = "1.0.0"
