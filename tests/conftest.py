"""Pytest configuration and shared fixtures."""

import pytest

from nichevo.activations import ActivationType
from nichevo.numerics    import RandomSource
from nichevo.run.config  import ClusterConfig, NetworkConfig, SuperclusterConfig


@pytest.fixture
def rng():
    """Provide a seeded random source so that tests are reproducible."""
    return RandomSource(42)


@pytest.fixture
def network_config():
    """A small network: 2 inputs, one hidden layer of 3 neurons, 2 outputs."""
    return NetworkConfig(input_rows        = 2,
                         output_rows       = 2,
                         hidden_columns    = 1,
                         hidden_rows       = 3,
                         hidden_activation = ActivationType.TANH)


@pytest.fixture
def cluster_config():
    """Provide a cluster configuration with round quotas (2 clones, 1 traveller, 7 others)."""
    return ClusterConfig(max_networks=10, clone_ratio=0.2, traveller_ratio=0.1, heavy_mutation_rate=0.1)


@pytest.fixture
def supercluster_config():
    """Provide a supercluster configuration with 3 clusters and a roomy archive."""
    return SuperclusterConfig(max_clusters=3, clustering_angle=20.0, max_archived_networks=1000)
