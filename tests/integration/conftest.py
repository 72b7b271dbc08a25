"""
Shared fixtures for integration tests.
"""

import pytest

from nichevo.activations import ActivationType
from nichevo.run.config  import ClusterConfig, Config, NetworkConfig, SuperclusterConfig


@pytest.fixture
def xor_inputs():
    """XOR inputs."""
    return [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]


@pytest.fixture
def xor_classes():
    """XOR expected classes (index of the output that should win)."""
    return [0, 1, 1, 0]


@pytest.fixture
def xor_config():
    """A small configuration for XOR: 2 inputs, 4 tanh hidden neurons, 2 softmax outputs."""
    config = Config()
    config.network = NetworkConfig(input_rows        = 2,
                                   output_rows       = 2,
                                   hidden_columns    = 1,
                                   hidden_rows       = 4,
                                   hidden_activation = ActivationType.TANH,
                                   output_activation = ActivationType.SOFTMAX)
    config.cluster      = ClusterConfig(max_networks=12)
    config.supercluster = SuperclusterConfig(max_clusters=3, max_archived_networks=30)

    config.cluster_rate           = 5
    config.merge_rate             = 20
    config.max_number_generations = 30
    config.batch_size             = 10
    return config

