# aca_capacity/catalog.py
#
# Azure Container Apps dedicated workload profiles and the smallest-fit lookup.

import logging
from typing import Iterable, Optional

from .models import NodeType

logger = logging.getLogger(__name__)


def capacity_key(node: NodeType) -> tuple:
    """
    Ordering used for "smallest fitting node".

    GPU count comes first so every CPU/RAM-only profile is tried before any
    GPU profile; within a GPU tier the cpu*ram product ranks the sizes.
    """
    return (node.gpu, node.cpu * node.ram_gb, node.cpu, node.ram_gb, node.name)


_PROFILES = (
    # General purpose
    NodeType("D4", cpu=4, ram_gb=16),
    NodeType("D8", cpu=8, ram_gb=32),
    NodeType("D16", cpu=16, ram_gb=64),
    NodeType("D32", cpu=32, ram_gb=128),
    # Memory optimized
    NodeType("E4", cpu=4, ram_gb=32),
    NodeType("E8", cpu=8, ram_gb=64),
    NodeType("E16", cpu=16, ram_gb=128),
    NodeType("E32", cpu=32, ram_gb=256),
    # GPU (A100)
    NodeType("NC24-A100", cpu=24, ram_gb=220, gpu=1),
    NodeType("NC48-A100", cpu=48, ram_gb=440, gpu=2),
    NodeType("NC96-A100", cpu=96, ram_gb=880, gpu=4),
)

NODE_CATALOG: tuple[NodeType, ...] = tuple(sorted(_PROFILES, key=capacity_key))


def node_fits(node: NodeType, cpu: float, ram_gb: float, gpu: int = 0) -> bool:
    if node.cpu < cpu or node.ram_gb < ram_gb:
        return False
    if gpu > 0 and node.gpu < gpu:
        return False
    return True


def find_smallest_fitting_node(
    cpu: float,
    ram_gb: float,
    gpu: int = 0,
    catalog: Iterable[NodeType] = NODE_CATALOG,
) -> Optional[NodeType]:
    """
    Return the first catalog entry able to host one replica, or None.

    Entries are tried in ascending capacity_key order whatever order the
    caller passes them in.
    """
    for node in sorted(catalog, key=capacity_key):
        if node_fits(node, cpu, ram_gb, gpu):
            logger.debug(
                "Resolved %s cpu / %s GB / %s gpu to %s", cpu, ram_gb, gpu, node.name
            )
            return node

    logger.debug("No node type fits %s cpu / %s GB / %s gpu", cpu, ram_gb, gpu)
    return None


def get_node_type(name: str, catalog: Iterable[NodeType] = NODE_CATALOG) -> Optional[NodeType]:
    for node in catalog:
        if node.name == name:
            return node
    return None
