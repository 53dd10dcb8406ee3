"""Image Browser: load a batch of local images and browse them one at a time."""

__version__ = "0.1.0"
