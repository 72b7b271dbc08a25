"""
Numerics Package

Random sampling and vector maths shared by the network and population layers.

Modules:
    random_source: RandomSource class (seedable, power-biased sampling)
    vectors:       clamp, dot, vector_length, angle_between
"""

from nichevo.numerics.random_source import RandomSource
from nichevo.numerics.vectors       import angle_between, clamp, dot, vector_length

__all__ = ['RandomSource',
           'angle_between',
           'clamp',
           'dot',
           'vector_length']
