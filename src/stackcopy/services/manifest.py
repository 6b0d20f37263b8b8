"""
Deployment manifest provider.

Reads a serverless-style deployment file and exposes the parts a copy run
needs: the declared resources, the provider region, the stage placeholder
token and the ``copyDataDeploy`` block.
"""

import logging
from pathlib import Path
from typing import Dict, Any, Optional, Union

import yaml

from ..exceptions import ConfigurationError
from ..models.config import DeployCopyConfig, DEFAULT_STAGE_PLACEHOLDER

logger = logging.getLogger(__name__)


class _ManifestLoader(yaml.SafeLoader):
    """SafeLoader that accepts CloudFormation short-form tags."""


def _construct_tagged(loader, tag_suffix, node):
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_mapping(node, deep=True)


_ManifestLoader.add_multi_constructor('!', _construct_tagged)


class DeploymentManifest:
    """Parsed deployment file."""

    def __init__(self, data: Dict[str, Any], source: Optional[str] = None):
        if not isinstance(data, dict):
            raise ConfigurationError(f"Deployment manifest {source or '<inline>'} is not a mapping")
        self.data = data
        self.source = source

    @classmethod
    def load(cls, path: Union[str, Path]) -> "DeploymentManifest":
        """Load a manifest from a YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            with path.open() as f:
                data = yaml.load(f, Loader=_ManifestLoader)
        except OSError as e:
            raise ConfigurationError(f"Cannot read deployment manifest {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid deployment manifest {path}: {e}") from e

        logger.info(f"Loaded deployment manifest from {path}")
        return cls(data or {}, source=str(path))

    @property
    def resources(self) -> Dict[str, Any]:
        """The ``resources.Resources`` block."""
        resources = self.data.get("resources") or {}
        return resources.get("Resources") or {}

    @property
    def custom(self) -> Dict[str, Any]:
        return self.data.get("custom") or {}

    @property
    def provider(self) -> Dict[str, Any]:
        return self.data.get("provider") or {}

    @property
    def region(self) -> Optional[str]:
        return self.provider.get("region")

    @property
    def stage_placeholder(self) -> str:
        """Token in table names that stands for the stage."""
        return self.custom.get("stage") or DEFAULT_STAGE_PLACEHOLDER

    def deploy_copy_config(self) -> DeployCopyConfig:
        """The ``custom.copyDataDeploy`` block; empty if absent."""
        block = self.custom.get("copyDataDeploy") or {}
        return DeployCopyConfig.model_validate(block)
