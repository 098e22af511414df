# src/coreason_judge/runners/__init__.py

"""
Sandbox runner implementations.
"""

from .docker import DockerRunner

__all__ = ["DockerRunner"]
