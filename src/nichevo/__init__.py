"""
nichevo - niched neuroevolution of fixed-topology neural networks.

This package evolves populations of small, dense feed-forward neural networks
with genetic operators (cloning, crossover, mutation) guided by a fitness score,
and periodically re-partitions the population into clusters of behaviourally
similar networks ("niches") to preserve diversity.

Main components:
- numerics:    Seedable random source and vector maths
- activations: Activation functions for neurons
- phenotype:   The networks and their genetic operators
- pool:        Clusters and the supercluster managing the population
- run:         Configuration and the training loop

Example:
    >>> from nichevo import Config, Trainer
    >>> config = Config("config.ini")
    >>> class MyTrainer(Trainer):
    ...     def _evaluate_fitness(self, network):
    ...         # Implement fitness evaluation
    ...         pass
    >>> trainer = MyTrainer(config, seed=42)
    >>> trainer.run()
"""

__version__ = "0.1.0"

# Import main classes for convenient access
# (configuration first: the other packages depend on it)
from nichevo.run.config  import ClusterConfig, Config, NetworkConfig, SuperclusterConfig
from nichevo.run.trainer import EvaluationMode, Trainer
from nichevo.activations import ActivationType
from nichevo.exceptions  import PopulationInvariantError, TopologyMismatchError
from nichevo.numerics    import RandomSource
from nichevo.phenotype   import Connection, Network, NetworkOrigin, Neuron
from nichevo.pool        import Cluster, Supercluster

__all__ = [
    "ActivationType",
    "Cluster",
    "ClusterConfig",
    "Config",
    "Connection",
    "EvaluationMode",
    "Network",
    "NetworkConfig",
    "NetworkOrigin",
    "Neuron",
    "PopulationInvariantError",
    "RandomSource",
    "Supercluster",
    "SuperclusterConfig",
    "TopologyMismatchError",
    "Trainer",
]
