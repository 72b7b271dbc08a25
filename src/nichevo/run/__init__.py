"""
Run Package

This package implements configuration and training for nichevo.

A training run drives a supercluster through generations: clusters evolve,
networks are evaluated, and the population is periodically re-clustered and merged.

Modules:
    config:  Configuration structs and the INI configuration loader
    trainer: Abstract base class for training a supercluster

Exported Classes:
    Config:             Configuration loaded from an INI file (or defaults)
    NetworkConfig:      Network shape, activations and mutation parameters
    ClusterConfig:      Cluster quotas and rates
    SuperclusterConfig: Niching and capacity parameters
    EvaluationMode:     Training or testing fitness evaluation
    Trainer:            Abstract base class with joblib parallelization
"""

from nichevo.run.config  import ClusterConfig, Config, NetworkConfig, SuperclusterConfig
from nichevo.run.trainer import EvaluationMode, Trainer

__all__ = ['ClusterConfig',
           'Config',
           'EvaluationMode',
           'NetworkConfig',
           'SuperclusterConfig',
           'Trainer']
