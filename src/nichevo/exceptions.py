"""
Exceptions raised by the nichevo package.

Classes:
    TopologyMismatchError:    Two networks (or a network and a weight matrix) differ in shape
    PopulationInvariantError: A supercluster broke one of its membership/count contracts
"""


class TopologyMismatchError(ValueError):
    """Raised when an operation needs identical topologies and gets different ones."""


class PopulationInvariantError(RuntimeError):
    """Raised when a population invariant is violated; this is a programming error."""
