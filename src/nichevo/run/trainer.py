"""
Trainer Module

This module defines the abstract base class driving the evolution of a
supercluster, with built-in support for CPU-based parallel fitness evaluation
using joblib.

A training run alternates evolution of every cluster with fitness evaluation,
and periodically re-clusters the population by behaviour and merges it around
its strongest network to restore diversity.
"""

import logging
import math
from abc    import ABC, abstractmethod
from enum   import Enum
from joblib import Parallel, delayed

from nichevo.numerics   import RandomSource
from nichevo.phenotype  import Network
from nichevo.pool       import Supercluster
from nichevo.run.config import Config

logger = logging.getLogger(__name__)


class EvaluationMode(Enum):
    """Fitness function a network is scored with."""
    TRAINING = "training"
    TESTING  = "testing"


class Trainer(ABC):
    """
    Abstract base class for training a supercluster.

    Subclasses must implement:
    - _evaluate_fitness(network): Evaluate the strength of a single network

    Subclasses can override:
    - _evaluate_testing_fitness(network): Score a network on held-out data
                          (required by evaluate(EvaluationMode.TESTING))
    - _reset():           Reset trainer-specific state (call super()._reset())
    - _report_progress(): Report after each generation (default: log a summary)
    - _final_report():    Report at the end of the run (default: log the strongest network)
    - _terminate():       Custom termination logic (default: stop flag, max generations,
                          fitness threshold)

    Public Attributes:
        supercluster:          The population being trained
        generation:            Number of generations completed in the current run
        best_strength:         Highest strength observed in the current run
        best_testing_strength: Highest testing score observed since the last reset

    Public Methods:
        run(num_jobs):  Execute a complete training run
        evaluate(mode): Score the population in training or testing mode
        stop():         Ask a running training to stop after the current generation

    Parallelization of fitness evaluation:
        Networks are evaluated in batches of 'batch_size' (from the configuration);
        each batch completes before the next one starts.
        num_jobs=1:  Serial evaluation (no parallelization)
        num_jobs>1:  Use specified number of parallel processes
        num_jobs=-1: Use all available CPU cores
    """

    def __init__(self,
                 config         : Config,
                 supercluster   : Supercluster | None = None,
                 seed           : int | None = None,
                 suppress_output: bool = False):
        """
        Initialize the trainer.

        Parameters:
            config:          Configuration parameters
            supercluster:    Population to train; built from 'config' if None
            seed:            Seed of the random source of a supercluster built here
            suppress_output: If True, suppress progress and final reports
        """
        if supercluster is None:
            supercluster = Supercluster(config.supercluster, config.cluster, config.network, RandomSource(seed))

        self._config              : Config       = config
        self._suppress_output     : bool         = suppress_output
        self._enabled             : bool         = False
        self.supercluster         : Supercluster = supercluster
        self.generation           : int          = 0
        self.best_strength        : float        = -math.inf
        self.best_testing_strength: float        = -math.inf

    def run(self, num_jobs: int = 1, bootstrap: bool = True):
        """
        Run the training.

        Parameters:
            num_jobs:  Number of parallel processes for fitness evaluation
                       1 = serial (no parallelization)
                      -1 = use all available CPU cores
                      >1 = use specified number of processes
            bootstrap: If True, start from a freshly generated random population;
                       otherwise continue training the current population
        """
        self._reset()
        self._enabled = True

        if bootstrap:
            self.supercluster.generate_random_population()

        # Evaluate the initial population, archive included
        self._evaluate_all(num_jobs, include_archived=True)

        if not self._suppress_output:
            self._report_progress()

        last_cluster = 0
        last_merge   = 0

        while not self._terminate():
            merge   = self._config.merge_rate > 0 and self.generation == last_merge + self._config.merge_rate
            cluster = self.generation == 0 or \
                      (self._config.cluster_rate > 0 and self.generation == last_cluster + self._config.cluster_rate)

            self.supercluster.evolve()
            self._evaluate_all(num_jobs, include_archived=merge or cluster)

            if merge:
                self.supercluster.merge()
                self._evaluate_all(num_jobs, include_archived=True)
                last_merge = self.generation

            if merge or cluster:
                self.supercluster.cluster()
                self.supercluster.prune_stagnant()
                last_cluster = self.generation

            self.generation += 1

            if not self._suppress_output:
                self._report_progress()

        self._enabled = False

        if not self._suppress_output:
            self._final_report()

    def stop(self):
        """Stop the training once the current generation is complete."""
        self._enabled = False

    def _reset(self):
        """
        Reset the trainer state before starting a new run.

        Subclasses should call super()._reset() and then
        initialize their problem-specific data.
        """
        self.generation            = 0
        self.best_strength         = -math.inf
        self.best_testing_strength = -math.inf

    @abstractmethod
    def _evaluate_fitness(self, network: Network) -> float:
        """
        Evaluate and return the strength of a network.

        Typically sets the inputs of the network (network.set_inputs) for each
        example of a data set, queries it, and scores its outputs. Higher values
        indicate stronger networks.

        This method may run in another process: it must return the strength
        rather than store it.

        Parameters:
            network: The network to evaluate

        Returns:
            float: Strength of the network
        """
        pass

    def _evaluate_testing_fitness(self, network: Network) -> float:
        """
        Evaluate and return the score of a network on a testing data set.

        Like _evaluate_fitness, this method may run in another process.

        Raises:
            NotImplementedError: if the trainer has no testing data set
        """
        raise NotImplementedError(f"{type(self).__name__} does not support testing evaluation")

    def evaluate(self,
                 mode            : EvaluationMode = EvaluationMode.TRAINING,
                 include_archived: bool = False,
                 num_jobs        : int = 1) -> float:
        """
        Evaluate all clustered networks and, optionally, the archived ones.

        In TRAINING mode the networks are scored with _evaluate_fitness and their
        strength is updated. In TESTING mode they are scored with
        _evaluate_testing_fitness; strengths, and so the course of the training,
        are left untouched.

        Parameters:
            mode:             Which fitness function scores the networks
            include_archived: If True, evaluate the archived networks too
            num_jobs:         Number of parallel processes for fitness evaluation

        Returns:
            float: The best score of this evaluation (-inf if there are no networks)
        """
        networks = self.supercluster.get_all_networks(include_archived)

        if mode == EvaluationMode.TRAINING:
            self._evaluate_networks(networks, num_jobs)
            best = max((network.strength for network in networks), default=-math.inf)
            self.best_strength = max(self.best_strength, best)
        else:
            scores = self._score_networks(networks, self._evaluate_testing_fitness, num_jobs)
            scores = [-math.inf if math.isnan(score) else score for score in scores]
            best   = max(scores, default=-math.inf)
            self.best_testing_strength = max(self.best_testing_strength, best)

        return best

    def _evaluate_all(self, num_jobs: int, include_archived: bool = False):
        self.evaluate(EvaluationMode.TRAINING, include_archived, num_jobs)

    def _evaluate_networks(self, networks: list[Network], num_jobs: int):
        """
        Evaluate networks with _evaluate_fitness and record their strength.
        """
        strengths = self._score_networks(networks, self._evaluate_fitness, num_jobs)
        for network, strength in zip(networks, strengths):
            network.update_strength(strength)

    def _score_networks(self, networks: list[Network], fitness, num_jobs: int) -> list[float]:
        """
        Score networks in batches of 'batch_size', in the order given.

        Uses serial or parallel evaluation based on num_jobs:
        - num_jobs=1: Sequential evaluation in single process
        - num_jobs>1 or -1: Parallel evaluation using joblib, one batch at a time
        """
        batch_size = self._config.batch_size
        scores     = []

        for start in range(0, len(networks), batch_size):
            batch = networks[start:start + batch_size]

            if num_jobs == 1:
                scores.extend(fitness(network) for network in batch)
            else:
                scores.extend(Parallel(num_jobs)(delayed(fitness)(n) for n in batch))

        return scores

    def _report_progress(self):
        """
        Report progress after each generation.

        This method is suppressed by setting 'self._suppress_output' to 'True'.
        """
        logger.info("generation %04d: %d clusters, %d archived, best strength = %.4f",
                    self.generation,
                    len(self.supercluster.clusters),
                    len(self.supercluster.archive),
                    self.best_strength)

    def _final_report(self):
        """
        Produce final report at the end of the run.

        This method is suppressed by setting 'self._suppress_output' to 'True'.
        """
        logger.info("training finished after %d generations, strongest network: %s",
                    self.generation, self.supercluster.get_strongest_network())

    def _terminate(self) -> bool:
        """
        Determine whether the training should terminate.

        This default implementation stops when stop() was called, after a maximum
        number of generations, and (optionally) once the strongest network reaches
        a strength threshold.

        Returns:
            bool: True if the training should stop, False otherwise
        """
        if not self._enabled:
            return True

        terminate = self.generation >= self._config.max_number_generations

        if self._config.fitness_termination_check:
            terminate = terminate or self.best_strength >= self._config.fitness_threshold

        return terminate
