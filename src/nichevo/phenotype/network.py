"""
Network Module

This module implements the network representation: a fixed-topology, dense,
feed-forward neural network whose connection weights are evolved by genetic
operators rather than trained by gradient descent.

Classes:
    NetworkOrigin: How a network came into being (bootstrap, clone, crossover, traveller)
    Neuron:        A node holding an accumulated input and an activation function
    Connection:    A weighted edge between neurons of adjacent layers (an "axion")
    Network:       The network, its forward pass and its genetic operators
"""

import json
import math
import uuid
from enum   import Enum
from typing import Any, Sequence

from nichevo.activations import ActivationType, activations, activation_codes, softmax
from nichevo.exceptions  import TopologyMismatchError
from nichevo.numerics    import RandomSource, clamp
from nichevo.run.config  import NetworkConfig


class NetworkOrigin(Enum):
    BOOTSTRAP = "bootstrap"
    CLONE     = "clone"
    CROSSOVER = "crossover"
    TRAVELLER = "traveller"


class Neuron:
    """
    A computational node in a network.

    The neuron accumulates weighted input during a forward pass and computes its
    output as activation(input), rounded to 6 decimals so that evaluations are
    reproducible. A BIAS neuron always outputs 1.

    Softmax needs the inputs of the whole layer and is therefore resolved by the
    Network; on its own, a SOFTMAX neuron outputs its input unchanged.

    Public Attributes:
        input:      The accumulated input (set externally for input-layer neurons)
        activation: The ActivationType of this neuron
    """

    def __init__(self, activation: ActivationType):
        self.input     : float          = 0.0
        self.activation: ActivationType = activation

    def output(self) -> float:
        function = activations.get(self.activation, activations[ActivationType.PASSTHROUGH])
        return round(float(function(self.input)), 6)

    def __repr__(self):
        return f"Neuron({self.activation.name}, input={self.input:+.6f})"


class Connection:
    """
    A weighted, directed connection between two neurons in adjacent layers.

    The endpoints are fixed at construction; only the weight changes, through mutation
    and crossover, which keep it within [-1, 1].

    Public Attributes:
        weight: Weight applied to the signal of the source neuron

    Public Properties:
        src_layer, src_index: Position of the source neuron
        dst_layer, dst_index: Position of the destination neuron
    """

    def __init__(self, src_layer: int, src_index: int, dst_layer: int, dst_index: int, weight: float = 0.0):
        self._src_layer = src_layer
        self._src_index = src_index
        self._dst_layer = dst_layer
        self._dst_index = dst_index
        self.weight: float = weight

    @property
    def src_layer(self) -> int:
        return self._src_layer

    @property
    def src_index(self) -> int:
        return self._src_index

    @property
    def dst_layer(self) -> int:
        return self._dst_layer

    @property
    def dst_index(self) -> int:
        return self._dst_index

    @property
    def endpoints(self) -> tuple[int, int, int, int]:
        return (self._src_layer, self._src_index, self._dst_layer, self._dst_index)

    def to_dict(self) -> dict:
        return {"src_layer": self._src_layer,
                "src_index": self._src_index,
                "dst_layer": self._dst_layer,
                "dst_index": self._dst_index,
                "weight"   : self.weight}

    def __repr__(self):
        return (f"Connection(({self._src_layer},{self._src_index})=>"
                f"({self._dst_layer},{self._dst_index}), weight={self.weight:+.6f})")


class Network:
    """
    A dense feed-forward neural network evolved by genetic operators.

    The topology is derived once from a NetworkConfig:
     + input layer:   1 bias neuron + 'input_rows' neurons
     + hidden layers: 'hidden_columns' layers of 1 bias neuron + 'hidden_rows' neurons
     + output layer:  'output_rows' neurons (no bias)
    Every neuron of a layer is connected to every neuron of the next layer.
    Connections are stored per layer pair, ordered by source then destination
    index; networks built from the same configuration can therefore be combined
    position by position.

    Public Attributes:
        id:                   Globally unique identifier
        origin:               NetworkOrigin of this network
        ancestral_generation: Lineage depth (inherited unchanged by clones and offspring)
        creation_generation:  Generation counter (parent + 1 for clones and offspring)
        strength:             Fitness score (-inf until evaluated)
        stagnant_evolutions:  Consecutive strength updates without improvement
        neurons:              Neuron layers; neurons[0][1:] receive the external inputs
        axions:               Connections, one list per adjacent layer pair

    Public Methods:
        query():                        Forward pass, returns the output vector
        set_inputs(values):             Set the input-layer neurons (bias excluded)
        update_strength(strength):      Record a new fitness score
        randomize_weights():            Assign random weights, biased towards zero
        mutate():                       Perturb or replace a few random weights
        heavily_mutate(chance):         Perturb every weight with the given probability
        clone(perfect):                 Copy this network (mutated unless perfect)
        crossover(partner, ignore_str): Breed with a network of the same topology
        to_dict(), axions_to_json():    Serializable representations
        load_axions(matrix):            Replay a weight matrix into this network
    """

    def __init__(self,
                 config             : NetworkConfig,
                 origin             : NetworkOrigin = NetworkOrigin.BOOTSTRAP,
                 creation_generation: int = 0,
                 rng                : RandomSource | None = None):
        """
        Build the neurons and connections described by 'config'. All weights start at 0.

        Parameters:
            config:              Network shape, activations and mutation parameters
            origin:              How this network came into being
            creation_generation: Generation counter of the new network
            rng:                 Random source for the genetic operators (a new unseeded one if None)
        """
        self.id                  : str           = str(uuid.uuid4())
        self.origin              : NetworkOrigin = origin
        self.ancestral_generation: int           = 0
        self.creation_generation : int           = creation_generation
        self.strength            : float         = -math.inf
        self.stagnant_evolutions : int           = 0

        self._config: NetworkConfig = config
        self._rng   : RandomSource  = rng if rng is not None else RandomSource()

        self.neurons: list[list[Neuron]]     = self._construct_neurons()
        self.axions : list[list[Connection]] = self._construct_axions()

    @property
    def config(self) -> NetworkConfig:
        return self._config

    @property
    def topology(self) -> tuple[int, ...]:
        """Number of neurons in each layer, input layer first."""
        return tuple(len(layer) for layer in self.neurons)

    @property
    def number_connections(self) -> int:
        return sum(len(layer) for layer in self.axions)

    def _construct_neurons(self) -> list[list[Neuron]]:
        config = self._config

        # Input layer
        layers = [[Neuron(ActivationType.BIAS)] +
                  [Neuron(config.input_activation) for _ in range(config.input_rows)]]

        # Hidden layers
        for _ in range(config.hidden_columns):
            layers.append([Neuron(ActivationType.BIAS)] +
                          [Neuron(config.hidden_activation) for _ in range(config.hidden_rows)])

        # Output layer
        layers.append([Neuron(config.output_activation) for _ in range(config.output_rows)])

        return layers

    def _construct_axions(self) -> list[list[Connection]]:
        axions = []
        for i in range(len(self.neurons) - 1):
            axions.append([Connection(i, j, i + 1, k)
                           for j in range(len(self.neurons[i]))
                           for k in range(len(self.neurons[i + 1]))])
        return axions

    def update_strength(self, strength: float) -> None:
        """
        Record a new strength (fitness), tracking stagnation.
        A NaN strength (e.g. from a diverging evaluation) counts as -inf.
        """
        if math.isnan(strength):
            strength = -math.inf

        if strength <= self.strength:
            self.stagnant_evolutions += 1
        else:
            self.stagnant_evolutions = 0

        self.strength = strength

    def set_inputs(self, values: Sequence[float]) -> None:
        """
        Set the inputs of the input layer, skipping the bias neuron.

        Parameters:
            values: one value per input neuron ('input_rows' values)
        """
        input_layer = self.neurons[0]
        if len(values) != len(input_layer) - 1:
            raise ValueError(f"Expected {len(input_layer) - 1} inputs, got {len(values)}")

        for neuron, value in zip(input_layer[1:], values):
            neuron.input = float(value)

    def get_layer_input_vector(self, layer_index: int) -> list[float] | None:
        if not 0 <= layer_index < len(self.neurons):
            return None
        return [neuron.input for neuron in self.neurons[layer_index]]

    def _layer_outputs(self, layer_index: int) -> list[float]:
        """Outputs of all neurons in a layer, resolving softmax against the whole layer."""
        inputs = self.get_layer_input_vector(layer_index)
        return [softmax(inputs, i) if neuron.activation == ActivationType.SOFTMAX else neuron.output()
                for i, neuron in enumerate(self.neurons[layer_index])]

    def _reset_neuron_inputs(self) -> None:
        # input neurons (layer 0) are externally controlled
        for layer in self.neurons[1:]:
            for neuron in layer:
                neuron.input = 0.0

    def query(self) -> list[float]:
        """
        Perform a forward pass, using the current inputs of the input layer.

        Connection layers are processed in order: all inputs of a layer are
        accumulated before any of its outputs are used by the next layer.

        Returns:
            The outputs of the output layer neurons
        """
        self._reset_neuron_inputs()

        for layer_index, layer in enumerate(self.axions):
            outputs = self._layer_outputs(layer_index)
            for axion in layer:
                neuron_out = self.neurons[axion.dst_layer][axion.dst_index]
                neuron_out.input += round(outputs[axion.src_index] * axion.weight, 6)

        return self._layer_outputs(len(self.neurons) - 1)

    def randomize_weights(self) -> None:
        """Assign random weights in [-1, 1], biased towards zero magnitude."""
        for layer in self.axions:
            for axion in layer:
                weight = self._rng.between(0, 1, 0.25)
                if self._rng.random() < 0.5:
                    weight *= -1.0
                axion.weight = weight

    def mutate(self) -> None:
        """
        Stochastically mutate a few connection weights.

        A mutation runs a random number of cycles, between 1 and 'max_mutation_cycles'
        (biased by 'mutation_cycle_bias'). In each cycle one connection may be picked
        at random and its weight either replaced by a new random value or perturbed by
        a small amount. Weights are clamped to [-1, 1].
        """
        config = self._config
        cycles = int(round(self._rng.between(1, config.max_mutation_cycles, config.mutation_cycle_bias)))

        for _ in range(cycles):
            chance = self._rng.random()
            if chance >= config.axion_mutation_rate:
                continue

            layer = self.axions[self._rng.index(len(self.axions))]
            axion = layer[self._rng.index(len(layer))]

            if chance < config.axion_replacement_rate:
                axion.weight = clamp(self._rng.between(-1.0, 1.0), -1.0, 1.0)
            else:
                axion.weight = clamp(axion.weight + self._rng.between(-0.1, 0.1), -1.0, 1.0)

    def heavily_mutate(self, per_axion_chance: float) -> None:
        """
        Perturb each connection weight by up to +/-0.5, with probability 'per_axion_chance'.
        """
        for layer in self.axions:
            for axion in layer:
                if self._rng.random() < per_axion_chance:
                    axion.weight = clamp(axion.weight + self._rng.between(-0.5, 0.5), -1.0, 1.0)

    def clone(self, perfect: bool = False) -> 'Network':
        """
        Create a copy of this network with origin CLONE.

        Parameters:
            perfect: if False (default) the copy is mutated once

        Returns:
            The clone
        """
        clone = Network(self._config.clone(), NetworkOrigin.CLONE, self.creation_generation + 1, self._rng)
        clone.ancestral_generation = self.ancestral_generation

        for self_layer, clone_layer in zip(self.axions, clone.axions):
            for self_axion, clone_axion in zip(self_layer, clone_layer):
                clone_axion.weight = self_axion.weight

        if not perfect:
            clone.mutate()

        return clone

    def crossover(self, partner: 'Network', ignore_strength: bool = False) -> 'Network':
        """
        Create an offspring by mixing the weights of this network and 'partner'.

        Each offspring weight is copied from one of the parents, never interpolated.
        The stronger parent passes on its weight with probability
        0.5 + random() * crossover_bias; on equal strengths this network counts as
        the stronger one. With 'ignore_strength' both parents have an even chance.

        Parameters:
            partner:         A network with the same topology as this one
            ignore_strength: if True, disregard the parents' strength

        Returns:
            The offspring, with origin CROSSOVER

        Raises:
            TopologyMismatchError: if the two networks have different topologies
        """
        if partner.topology != self.topology:
            raise TopologyMismatchError(f"cannot cross {self.topology} with {partner.topology}")

        creation_generation = max(self.creation_generation, partner.creation_generation) + 1
        offspring = Network(self._config.clone(), NetworkOrigin.CROSSOVER, creation_generation, self._rng)
        offspring.ancestral_generation = self.ancestral_generation

        partner_stronger = partner.strength > self.strength and not ignore_strength
        stronger, weaker = (partner, self) if partner_stronger else (self, partner)

        for strong_layer, weak_layer, child_layer in zip(stronger.axions, weaker.axions, offspring.axions):
            for strong_axion, weak_axion, child_axion in zip(strong_layer, weak_layer, child_layer):
                chance = 0.5 if ignore_strength else 0.5 + self._rng.random() * self._config.crossover_bias
                child_axion.weight = strong_axion.weight if self._rng.random() < chance else weak_axion.weight

        return offspring

    def load_axions(self, matrix: Sequence[Sequence[Any]]) -> None:
        """
        Copy the weights of a connection matrix into this network.

        Parameters:
            matrix: one list per layer pair of either Connection objects or dictionaries
                    as produced by Connection.to_dict()

        Raises:
            TopologyMismatchError: if the matrix does not match this network's connections
        """
        if len(matrix) != len(self.axions):
            raise TopologyMismatchError(f"expected {len(self.axions)} connection layers, got {len(matrix)}")

        for i, (layer, sample_layer) in enumerate(zip(self.axions, matrix)):
            if len(sample_layer) != len(layer):
                raise TopologyMismatchError(f"connection layer {i}: expected {len(layer)} connections, "
                                            f"got {len(sample_layer)}")
            for axion, sample in zip(layer, sample_layer):
                if isinstance(sample, Connection):
                    endpoints, weight = sample.endpoints, sample.weight
                else:
                    endpoints = (sample["src_layer"], sample["src_index"], sample["dst_layer"], sample["dst_index"])
                    weight    = sample["weight"]
                if endpoints != axion.endpoints:
                    raise TopologyMismatchError(f"connection {endpoints} does not match {axion.endpoints}")
                axion.weight = float(weight)

    def to_dict(self) -> dict:
        """
        Convert the network to a JSON-serializable dictionary.

        Returns:
            Dictionary with identity, lineage, strength and the connection matrix
        """
        return {"id"                  : self.id,
                "origin"              : self.origin.value,
                "ancestral_generation": self.ancestral_generation,
                "creation_generation" : self.creation_generation,
                "strength"            : self.strength,
                "axions"              : [[axion.to_dict() for axion in layer] for layer in self.axions]}

    @classmethod
    def from_dict(cls, config: NetworkConfig, network_dict: dict, rng: RandomSource | None = None) -> 'Network':
        """
        Rebuild a network from the output of to_dict(), given the configuration it was built from.
        Stagnation history is not part of the dictionary and starts again from 0.
        """
        network = cls(config,
                      NetworkOrigin(network_dict.get("origin", NetworkOrigin.BOOTSTRAP.value)),
                      network_dict.get("creation_generation", 0),
                      rng)
        network.id                   = network_dict.get("id", network.id)
        network.ancestral_generation = network_dict.get("ancestral_generation", 0)
        network.strength             = network_dict.get("strength", -math.inf)
        network.load_axions(network_dict["axions"])
        return network

    def axions_to_json(self) -> str:
        return json.dumps([[axion.to_dict() for axion in layer] for layer in self.axions])

    def __str__(self):
        shape = "-".join(f"{len(layer)}{activation_codes[layer[-1].activation]}" for layer in self.neurons)
        return (f"Network({self.id[:8]}, {self.origin.name:9s}, gen={self.creation_generation:04d}, "
                f"strength={self.strength:.4f}, stagnant={self.stagnant_evolutions}, shape={shape})")

    def __repr__(self):
        return f"Network(id={self.id!r}, origin={self.origin}, strength={self.strength})"
