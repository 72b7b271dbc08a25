"""
Phenotype Package

This package implements the networks evolved by nichevo: fixed-topology, dense
feed-forward neural networks whose weights are the subject of the genetic operators.

Modules:
    network: NetworkOrigin, Neuron, Connection and Network classes

Exported Classes:
    Connection:    A weighted connection between neurons of adjacent layers
    Network:       A dense feed-forward network with genetic operators
    NetworkOrigin: Enumeration of the ways a network can come into being
    Neuron:        A node applying an activation function to its accumulated input
"""

from nichevo.phenotype.network import Connection, Network, NetworkOrigin, Neuron

__all__ = ['Connection',
           'Network',
           'NetworkOrigin',
           'Neuron']
