"""Groot - a minimal single-user version control engine.

Groot records snapshots of files into a content-addressed object store,
tracks pending changes in a staging index and threads snapshots into a
linear commit history that can be inspected and diffed.
"""

__version__ = "0.1.0"
__author__ = "Groot Contributors"

__all__ = ["__version__", "__author__"]
