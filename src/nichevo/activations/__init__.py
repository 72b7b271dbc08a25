"""
Activations Package

This package provides the activation functions used by network neurons.

Exported:
    ActivationType:   Enumeration tagging the activation of each neuron
    activations:      Dictionary mapping activation types to functions
    activation_codes: Dictionary mapping activation types to 3-letter codes
    softmax:          Layer-wide softmax of one element of a vector
    Individual activation functions: bias_activation, passthrough_activation,
                                     softstep_activation, softplus_activation,
                                     relu_activation, leaky_relu_activation,
                                     tanh_activation
"""

from nichevo.activations.basic_activations import (
    ActivationType,
    activations,
    activation_codes,
    bias_activation,
    passthrough_activation,
    softstep_activation,
    softplus_activation,
    relu_activation,
    leaky_relu_activation,
    tanh_activation,
    softmax
)

__all__ = [
    'ActivationType',
    'activations',
    'activation_codes',
    'bias_activation',
    'passthrough_activation',
    'softstep_activation',
    'softplus_activation',
    'relu_activation',
    'leaky_relu_activation',
    'tanh_activation',
    'softmax'
]
