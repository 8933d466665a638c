"""Repository markup checker: h1 structure, image alts, responsive overflow and W3C validation."""

__version__ = "1.0.0"
