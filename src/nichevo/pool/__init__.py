"""
Pool Package

This package contains the classes managing the population: clusters (niches of
behaviourally similar networks) and the supercluster that owns them.

Modules:
    cluster:      A single niche and its generational evolution
    supercluster: The population, its archive and the niching process

Exported Classes:
    Cluster:      A niche of behaviourally similar networks
    Supercluster: Top-level population manager
"""

from nichevo.pool.cluster      import Cluster
from nichevo.pool.supercluster import Supercluster

__all__ = [
    'Cluster',
    'Supercluster',
]
