import configparser
import dataclasses
import os
from dataclasses import dataclass

from nichevo.activations import ActivationType


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"'{name}' must be in [0, 1], got {value}")


@dataclass(frozen=True)
class NetworkConfig:
    """
    Shape, activations and mutation parameters shared by networks.

    All networks built from equal NetworkConfig(s) have identical topology, which is
    what makes cloning and crossover by positional copy possible.
    """

    # Number of input neurons (a bias neuron is added on top of these).
    input_rows: int

    # Number of output neurons (the output layer has no bias neuron).
    output_rows: int

    # Number of hidden layers, and number of neurons in each (bias excluded).
    hidden_columns: int
    hidden_rows: int

    # Activation functions of input, hidden and output neurons.
    input_activation : ActivationType = ActivationType.PASSTHROUGH
    hidden_activation: ActivationType = ActivationType.RELU
    output_activation: ActivationType = ActivationType.PASSTHROUGH

    # The number of cycles of a mutation falls between 1 and 'max_mutation_cycles',
    # biased by 'mutation_cycle_bias' (a biasing power, > 1 favours fewer cycles).
    max_mutation_cycles: int   = 8
    mutation_cycle_bias: float = 5.0

    # Chance that the connection picked during a mutation cycle is mutated, and
    # chance that its weight is replaced outright rather than perturbed.
    # The replacement rate must not exceed the mutation rate.
    axion_mutation_rate   : float = 0.90
    axion_replacement_rate: float = 0.10

    # Extra chance given to the stronger parent to pass on its weight during crossover:
    # the stronger weight is picked with probability in [0.5, 0.5 + crossover_bias).
    crossover_bias: float = 0.25

    def __post_init__(self):
        # accept activation names (as read from configuration files)
        for field in ('input_activation', 'hidden_activation', 'output_activation'):
            object.__setattr__(self, field, ActivationType.from_name(getattr(self, field)))

        if self.input_rows < 1 or self.output_rows < 1:
            raise ValueError("a network needs at least one input and one output neuron")
        if self.hidden_columns < 0 or self.hidden_rows < 0:
            raise ValueError("hidden columns and rows cannot be negative")
        if self.max_mutation_cycles < 1:
            raise ValueError("'max_mutation_cycles' must be at least 1")

        _check_probability('axion_mutation_rate', self.axion_mutation_rate)
        _check_probability('axion_replacement_rate', self.axion_replacement_rate)
        _check_probability('crossover_bias', self.crossover_bias)
        if self.axion_replacement_rate > self.axion_mutation_rate:
            raise ValueError("'axion_replacement_rate' cannot exceed 'axion_mutation_rate'")

    def clone(self, **changes) -> 'NetworkConfig':
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class ClusterConfig:
    """Quotas and rates used when a cluster evolves one generation."""

    # The maximum number of networks a cluster contains after replenishment.
    max_networks: int = 25

    # The target fraction of clones and travellers in a cluster.
    # The remainder is filled through crossover.
    clone_ratio    : float = 0.20
    traveller_ratio: float = 0.05

    # The chance that a surviving network is heavily mutated instead of mutated.
    heavy_mutation_rate: float = 0.10

    # Biasing powers used to pick survivors as clone and crossover parents.
    # Larger values favour the strongest survivors more.
    clone_selection_bias    : float = 5.0
    crossover_selection_bias: float = 2.5

    def __post_init__(self):
        if self.max_networks < 1:
            raise ValueError("'max_networks' must be at least 1")
        _check_probability('clone_ratio', self.clone_ratio)
        _check_probability('traveller_ratio', self.traveller_ratio)
        _check_probability('heavy_mutation_rate', self.heavy_mutation_rate)
        if self.clone_ratio + self.traveller_ratio > 1.0:
            raise ValueError("'clone_ratio' + 'traveller_ratio' cannot exceed 1")

    def clone(self, **changes) -> 'ClusterConfig':
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class SuperclusterConfig:
    """Niching and capacity parameters of a supercluster."""

    # The number of clusters maintained after clustering.
    max_clusters: int = 5

    # The maximum angle (in degrees) between the output vectors of
    # two networks for them to be placed in the same cluster.
    clustering_angle: float = 20.0

    # Archived networks stagnant for more than this number of evaluations are pruned.
    max_stagnant_evolutions: int = 10

    # The maximum number of networks the archive can hold after clustering.
    max_archived_networks: int = 100

    # Biasing power used to draw traveller candidates from the (strength-sorted) archive.
    traveller_selection_bias: float = 2.5

    def __post_init__(self):
        if self.max_clusters < 1:
            raise ValueError("'max_clusters' must be at least 1")
        if not 0.0 <= self.clustering_angle <= 180.0:
            raise ValueError(f"'clustering_angle' must be in [0, 180], got {self.clustering_angle}")
        if self.max_stagnant_evolutions < 0 or self.max_archived_networks < 0:
            raise ValueError("stagnation and archive limits cannot be negative")

    def clone(self, **changes) -> 'SuperclusterConfig':
        return dataclasses.replace(self, **changes)


class Config:

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a default Config.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a Config with default values.
        """

        # Default config for testing/manual setup
        if config_file is None:
            self.network = NetworkConfig(input_rows        = 3,
                                         output_rows       = 2,
                                         hidden_columns    = 3,
                                         hidden_rows       = 12,
                                         output_activation = ActivationType.SOFTMAX,
                                         hidden_activation = ActivationType.LEAKY_RELU)
            self.cluster      = ClusterConfig()
            self.supercluster = SuperclusterConfig()

            self.cluster_rate              = 25
            self.merge_rate                = 50
            self.max_number_generations    = 500
            self.batch_size                = 15
            self.fitness_termination_check = False
            self.fitness_threshold         = None
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [NETWORK]

        self.network = NetworkConfig(
            # The number of input and output neurons.
            input_rows  = get_value('NETWORK', 'input_rows' , int),
            output_rows = get_value('NETWORK', 'output_rows', int),

            # The number of hidden layers and of neurons per hidden layer.
            hidden_columns = get_value('NETWORK', 'hidden_columns', int),
            hidden_rows    = get_value('NETWORK', 'hidden_rows'   , int),

            # Activation functions, by name: passthrough, softstep, softplus,
            # relu, leaky_relu, softmax, tanh.
            input_activation  = get_value('NETWORK', 'input_activation' , str, default='passthrough'),
            hidden_activation = get_value('NETWORK', 'hidden_activation', str, default='relu'),
            output_activation = get_value('NETWORK', 'output_activation', str, default='passthrough'),

            # Number of mutation cycles and its biasing power.
            max_mutation_cycles = get_value('NETWORK', 'max_mutation_cycles', int  , default=8),
            mutation_cycle_bias = get_value('NETWORK', 'mutation_cycle_bias', float, default=5.0),

            # Connection mutation and replacement rates.
            axion_mutation_rate    = get_value('NETWORK', 'axion_mutation_rate'   , float, default=0.90),
            axion_replacement_rate = get_value('NETWORK', 'axion_replacement_rate', float, default=0.10),

            # Extra chance for the stronger parent during crossover.
            crossover_bias = get_value('NETWORK', 'crossover_bias', float, default=0.25))

        # [CLUSTER]

        self.cluster = ClusterConfig(
            # The maximum number of networks in each cluster.
            max_networks = get_value('CLUSTER', 'max_networks', int),

            # Target fraction of clones and travellers in each cluster.
            clone_ratio     = get_value('CLUSTER', 'clone_ratio'    , float, default=0.20),
            traveller_ratio = get_value('CLUSTER', 'traveller_ratio', float, default=0.05),

            # Chance of heavy (rather than standard) mutation of a survivor.
            heavy_mutation_rate = get_value('CLUSTER', 'heavy_mutation_rate', float, default=0.10),

            # Parent selection biasing powers.
            clone_selection_bias     = get_value('CLUSTER', 'clone_selection_bias'    , float, default=5.0),
            crossover_selection_bias = get_value('CLUSTER', 'crossover_selection_bias', float, default=2.5))

        # [SUPERCLUSTER]

        self.supercluster = SuperclusterConfig(
            # The number of clusters (niches).
            max_clusters = get_value('SUPERCLUSTER', 'max_clusters', int),

            # Maximum angle between output vectors of networks in the same cluster.
            clustering_angle = get_value('SUPERCLUSTER', 'clustering_angle', float, default=20.0),

            # Archive limits.
            max_stagnant_evolutions = get_value('SUPERCLUSTER', 'max_stagnant_evolutions', int, default=10),
            max_archived_networks   = get_value('SUPERCLUSTER', 'max_archived_networks'  , int, default=100),

            # Biasing power used to draw travellers from the archive.
            traveller_selection_bias = get_value('SUPERCLUSTER', 'traveller_selection_bias', float, default=2.5))

        # [TRAINING]

        # Number of generations between two clusterings, and between two merges.
        self.cluster_rate = get_value('TRAINING', 'cluster_rate', int, default=25)
        self.merge_rate   = get_value('TRAINING', 'merge_rate'  , int, default=50)

        # The number of generations after which to stop the run.
        self.max_number_generations = get_value('TRAINING', 'max_number_generations', int)

        # The number of networks evaluated together in one batch.
        self.batch_size = get_value('TRAINING', 'batch_size', int, default=15)

        # Whether to stop the run once the strongest network reaches 'fitness_threshold'.
        self.fitness_termination_check = get_value('TRAINING', 'fitness_termination_check', bool, default=False)
        self.fitness_threshold         = get_value('TRAINING', 'fitness_threshold', float, default=None)

        if self.fitness_termination_check and self.fitness_threshold is None:
            raise ValueError("'fitness_threshold' is required when 'fitness_termination_check' is enabled")
        if self.batch_size < 1:
            raise ValueError("'batch_size' must be at least 1")
