"""
Services for the stack table copier.
"""

from .manifest import DeploymentManifest

__all__ = [
    "DeploymentManifest",
]
