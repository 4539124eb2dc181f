"""Pytest fixtures for node domain tests."""

import pytest
from node_factories import make_cluster

from kubenode_mcp.domains.nodes.models import ClusterContext


@pytest.fixture
def cluster() -> ClusterContext:
    """Cluster the node operations run against."""
    return make_cluster()
