from enum   import Enum
from typing import Sequence

import numpy as np


class ActivationType(Enum):
    BIAS        = "bias"
    PASSTHROUGH = "passthrough"
    SOFTSTEP    = "softstep"
    SOFTPLUS    = "softplus"
    RELU        = "relu"
    LEAKY_RELU  = "leaky_relu"
    SOFTMAX     = "softmax"
    TANH        = "tanh"

    @classmethod
    def from_name(cls, name: 'str | ActivationType') -> 'ActivationType':
        """Look up an activation by its value ("leaky_relu") or member name ("LEAKY_RELU")."""
        if isinstance(name, cls):
            return name
        key = name.strip()
        for member in cls:
            if key.lower() == member.value or key.upper() == member.name:
                return member
        raise ValueError(f"Invalid activation function '{name}'")

def bias_activation(z):
    return 1.0

def passthrough_activation(z):
    return z

def softstep_activation(z):
    z = np.clip(z, -500, 500)   # to prevent overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-z))

def softplus_activation(z):
    return np.logaddexp(0.0, z)

def relu_activation(z):
    return np.maximum(0.0, z)

def leaky_relu_activation(z):
    return np.where(z < 0, 0.01 * z, z)

def tanh_activation(z):
    return np.tanh(z)

def softmax(vector: Sequence[float] | None, index: int) -> float:
    """
    Softmax of the element at 'index' of 'vector'.

    Softmax needs the whole layer, so it is the one activation that cannot be
    evaluated from a single neuron input. Intermediate values are rounded to
    6 decimals. Returns 0 for a missing vector or an out-of-range index.
    """
    if vector is None or index < 0 or index >= len(vector):
        return 0.0

    values = np.asarray(vector, dtype=float)
    exps   = np.round(np.exp(values - np.max(values)), 6)   # shifted to avoid overflow
    total  = np.round(np.sum(exps), 6)
    return float(np.round(exps[index] / total, 6))

# Softmax is absent: it is resolved layer-wide by the network.
activations = {
    ActivationType.BIAS       : bias_activation,
    ActivationType.PASSTHROUGH: passthrough_activation,
    ActivationType.SOFTSTEP   : softstep_activation,
    ActivationType.SOFTPLUS   : softplus_activation,
    ActivationType.RELU       : relu_activation,
    ActivationType.LEAKY_RELU : leaky_relu_activation,
    ActivationType.TANH       : tanh_activation
    }

# 3-letter identifiers for each activation function
activation_codes = {
    ActivationType.BIAS       : "BIA",
    ActivationType.PASSTHROUGH: "PAS",
    ActivationType.SOFTSTEP   : "SST",
    ActivationType.SOFTPLUS   : "SPL",
    ActivationType.RELU       : "RLU",
    ActivationType.LEAKY_RELU : "LRL",
    ActivationType.SOFTMAX    : "SMX",
    ActivationType.TANH       : "TNH"
    }
