"""
Supercluster Module

This module implements the Supercluster class, the top-level container of the
population. The supercluster owns a number of clusters (niches) and an archive
of networks that do not currently belong to any niche.

Classes:
    Supercluster: Population manager handling niching, evolution dispatch and merging
"""

import logging
import uuid

from nichevo.exceptions import PopulationInvariantError
from nichevo.numerics   import RandomSource, angle_between
from nichevo.phenotype  import Network, NetworkOrigin
from nichevo.pool.cluster import Cluster
from nichevo.run.config import ClusterConfig, NetworkConfig, SuperclusterConfig

logger = logging.getLogger(__name__)


class Supercluster:
    """
    The population of networks, partitioned into clusters and an archive.

    Every network is either a member of exactly one cluster or archived. Networks
    move between clusters and archive only through the operations below:
     + generate_random_population(): bootstrap a random population into the archive
     + evolve():                     evolve every cluster, lending travellers from the archive
     + cluster():                    re-partition everything into niches of similar behaviour
     + merge():                      replace everything with a diversified pool around the strongest
     + prune_stagnant():             drop archived networks that stopped improving

    The behaviour of a network is its output vector for a fixed input. Two networks
    belong to the same niche when the angle between their output vectors is small.

    Public Attributes:
        clusters:            The clusters (niches)
        archive:             Networks not belonging to any cluster
        supercluster_config: Niching and capacity parameters
        cluster_config:      Parameters shared by all clusters
        network_config:      Parameters shared by all networks
        rng:                 The random source shared by clusters and networks

    Public Properties:
        max_population: Number of networks in a full population
    """

    def __init__(self,
                 supercluster_config: SuperclusterConfig,
                 cluster_config     : ClusterConfig,
                 network_config     : NetworkConfig,
                 rng                : RandomSource | None = None):
        """
        Parameters:
            supercluster_config: niching and capacity parameters
            cluster_config:      parameters shared by all clusters
            network_config:      parameters shared by all networks
            rng:                 random source (a new unseeded one if None)
        """
        self.clusters: list[Cluster] = []
        self.archive : list[Network] = []

        self.supercluster_config: SuperclusterConfig = supercluster_config
        self.cluster_config     : ClusterConfig      = cluster_config
        self.network_config     : NetworkConfig      = network_config
        self.rng                : RandomSource       = rng if rng is not None else RandomSource()

    @property
    def max_population(self) -> int:
        return self.cluster_config.max_networks * self.supercluster_config.max_clusters

    def _new_random_network(self) -> Network:
        network = Network(self.network_config.clone(), NetworkOrigin.BOOTSTRAP, 0, self.rng)
        network.randomize_weights()
        return network

    def _new_cluster(self) -> Cluster:
        return Cluster(str(uuid.uuid4()), self.cluster_config, self.network_config, self.rng)

    def generate_random_population(self) -> None:
        """
        Discard the current population and fill the archive with random networks.
        """
        self.clusters.clear()
        self.archive.clear()

        while len(self.archive) < self.max_population:
            self.archive.append(self._new_random_network())

    def get_all_networks(self, include_archived: bool = True) -> list[Network]:
        """
        Return all networks of all clusters and, optionally, of the archive.
        """
        networks = list(self.archive) if include_archived else []
        for cluster in self.clusters:
            networks.extend(cluster.networks)
        return networks

    def get_strongest_network(self) -> Network | None:
        networks = self.get_all_networks()
        if not networks:
            return None
        return max(networks, key=lambda network: network.strength)

    def evolve(self) -> None:
        """
        Evolve every cluster by one generation.

        Before a cluster evolves, it is offered traveller candidates drawn from the
        archive (mildly biased towards the front of the archive, where the strongest
        networks are). Candidates the cluster does not take go back to the archive.
        Archived networks are never mutated here.
        """
        max_travellers = int(round(self.cluster_config.max_networks * self.cluster_config.traveller_ratio))
        bias           = self.supercluster_config.traveller_selection_bias

        for cluster in self.clusters:
            candidates = []
            while len(candidates) < max_travellers and self.archive:
                index = self.rng.biased_index(len(self.archive), bias)
                candidates.append(self.archive.pop(index))

            cluster.evolve(candidates)

            self.archive.extend(candidates)

    def cluster(self, clustering_inputs_set: bool = False) -> None:
        """
        Re-cluster all networks around the strongest ones.

        Niches are formed greedily: the strongest unclustered network becomes the
        reference of a new cluster, which absorbs every unclustered network whose
        output vector is within 'clustering_angle' degrees of the reference's. This
        repeats until 'max_clusters' clusters exist or no network is left. Leftover
        networks are archived (the weakest are dropped if the archive overflows) and
        missing clusters are filled with random networks.

        Clustering assumes every network, archived ones included, has been evaluated
        on the same data set.

        Parameters:
            clustering_inputs_set: if False, all inputs (but the bias) of every
                                   network are set to 1.0 before comparing outputs;
                                   if True, the caller has already set the inputs
        """
        unclustered = sorted(self.get_all_networks(), key=lambda network: network.strength, reverse=True)
        population  = len(unclustered)

        self.clusters.clear()
        self.archive.clear()

        if not clustering_inputs_set:
            for network in unclustered:
                for neuron in network.neurons[0][1:]:
                    neuron.input = 1.0

        while len(self.clusters) < self.supercluster_config.max_clusters and unclustered:
            reference = unclustered.pop(0)

            cluster = self._new_cluster()
            cluster.networks.append(reference)

            reference_vector = reference.query()

            remaining = []
            for candidate in unclustered:
                angle = angle_between(reference_vector, candidate.query())
                if angle <= self.supercluster_config.clustering_angle:
                    cluster.networks.append(candidate)
                else:
                    remaining.append(candidate)
            unclustered = remaining

            self.clusters.append(cluster)

        # Leftovers are archived, weakest dropped if over capacity
        # (sorting is stable, so 'unclustered' is still in strength order)
        self.archive = unclustered[:self.supercluster_config.max_archived_networks]
        dropped      = len(unclustered) - len(self.archive)

        # Fill the cluster quota with random networks
        padded = 0
        while len(self.clusters) < self.supercluster_config.max_clusters:
            cluster = self._new_cluster()
            while len(cluster.networks) < self.cluster_config.max_networks:
                cluster.networks.append(self._new_random_network())
            self.clusters.append(cluster)
            padded += 1

        logger.debug("clustered %d networks: %d clusters (%d random), %d archived, %d dropped",
                     population, len(self.clusters), padded, len(self.archive), dropped)

        self.validate()

    def merge(self) -> None:
        """
        Replace the population with a diversified pool built around the strongest networks.

        Clusters are dissolved and all networks but the strongest are discarded. The new
        pool is archived: it consists of one perfect clone, two mutated clones and two
        heavily mutated clones of the strongest network, then clones of strong networks
        up to the clone quota, then crossover offspring up to the population size.
        The new pool must be evaluated and then clustered.
        """
        existing = sorted(self.get_all_networks(), key=lambda network: network.strength, reverse=True)

        self.clusters.clear()
        self.archive.clear()

        if not existing:
            return

        config     = self.cluster_config
        max_clones = int(round(self.max_population * config.clone_ratio))
        strongest  = existing[0]

        # Prime with clones of the strongest network
        self.archive.append(strongest.clone(perfect=True))
        for _ in range(4):
            self.archive.append(strongest.clone())
        self.archive[3].heavily_mutate(0.25)
        self.archive[4].heavily_mutate(0.50)

        # Clone quota, strongly biased towards the strongest networks
        while len(self.archive) < max_clones:
            index = self.rng.biased_index(len(existing), config.clone_selection_bias)
            self.archive.append(existing[index].clone())

        # Remaining places via crossover, moderately biased towards the strongest networks
        while len(self.archive) < self.max_population:
            if len(existing) < 2:
                # no distinct pair of parents exists
                self.archive.append(strongest.clone())
                continue

            index_a = self.rng.biased_index(len(existing), config.crossover_selection_bias)
            index_b = self.rng.biased_index(len(existing), config.crossover_selection_bias)
            if index_a == index_b:
                continue

            self.archive.append(existing[index_a].crossover(existing[index_b]))

        logger.debug("merged %d networks into %d new archived networks", len(existing), len(self.archive))

        self.validate()

    def prune_stagnant(self) -> int:
        """
        Remove archived networks stagnant for more than 'max_stagnant_evolutions'.

        Returns:
            The number of networks removed
        """
        limit  = self.supercluster_config.max_stagnant_evolutions
        before = len(self.archive)

        self.archive = [network for network in self.archive if network.stagnant_evolutions <= limit]

        removed = before - len(self.archive)
        if removed:
            logger.debug("pruned %d stagnant networks from the archive", removed)
        return removed

    def validate(self) -> None:
        """
        Check the population invariants.

        Raises:
            PopulationInvariantError: if a network is held in more than one place, or
                                      clusters exist but not exactly 'max_clusters' of them, or
                                      the archive is over capacity
        """
        seen = set()
        for network in self.get_all_networks():
            if id(network) in seen:
                raise PopulationInvariantError(f"network {network.id} is held in more than one place")
            seen.add(id(network))

        # clustering always leaves exactly max_clusters clusters; merging leaves none
        if self.clusters and len(self.clusters) != self.supercluster_config.max_clusters:
            raise PopulationInvariantError(f"{len(self.clusters)} clusters, expected exactly "
                                           f"{self.supercluster_config.max_clusters}")

        # merge() archives a whole population, so only clustered populations have a capped archive
        if self.clusters and len(self.archive) > self.supercluster_config.max_archived_networks:
            raise PopulationInvariantError(f"archive holds {len(self.archive)} networks, maximum is "
                                           f"{self.supercluster_config.max_archived_networks}")

    def __str__(self):
        s  = f"clusters = {len(self.clusters)}, archived = {len(self.archive)}\n"
        s += '\n'.join(f"  {cluster.name[:8]}: {len(cluster)} networks" for cluster in self.clusters)
        return s
