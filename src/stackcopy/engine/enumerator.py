"""
Table discovery from the resources declared in a deployment manifest.
"""

import logging
from typing import Dict, List, Any

logger = logging.getLogger(__name__)

TABLE_RESOURCE_TYPE = "AWS::DynamoDB::Table"


def enumerate_tables(resources: Dict[str, Any]) -> List[str]:
    """
    Return the logical table names of every table resource.

    Args:
        resources: Resource id -> ``{"Type": ..., "Properties": {...}}``

    Returns:
        Logical table names in declaration order, without duplicates
    """
    names = []
    for resource_id, resource in (resources or {}).items():
        if not isinstance(resource, dict) or resource.get("Type") != TABLE_RESOURCE_TYPE:
            continue

        table_name = (resource.get("Properties") or {}).get("TableName")
        if not isinstance(table_name, str) or not table_name:
            logger.warning(f"Skipping table resource {resource_id}: no TableName property")
            continue

        if table_name not in names:
            names.append(table_name)

    logger.debug(f"Found {len(names)} table resources: {names}")
    return names
