"""HALO: multi-tenant workflow automation builder."""

__version__ = "0.1.0"
