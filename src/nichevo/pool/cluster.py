"""
Cluster Module

This module implements the Cluster class. A cluster is one niche of the
population: a bounded group of behaviourally similar networks that compete
and reproduce among themselves.

Classes:
    Cluster: A niche of networks evolving one generation at a time
"""

import logging

from nichevo.numerics   import RandomSource, clamp
from nichevo.phenotype  import Network, NetworkOrigin
from nichevo.run.config import ClusterConfig, NetworkConfig

logger = logging.getLogger(__name__)


class Cluster:
    """
    A niche of behaviourally similar networks.

    Each generation the cluster keeps its strongest half and replenishes the
    free places according to target ratios of network origins:
     + clones of strong survivors exploit what already works
     + travellers, taken from the supercluster archive, bring in foreign genetic material
     + crossover offspring of two survivors explore combinations

    The strongest survivor is never mutated in place (elitism); all other
    survivors are mutated, occasionally heavily.

    Public Attributes:
        name:     Identifier of the cluster
        networks: The member networks

    Public Methods:
        evolve(traveller_candidates): Evolve the cluster by one generation
    """

    def __init__(self,
                 name          : str,
                 cluster_config: ClusterConfig,
                 network_config: NetworkConfig,
                 rng           : RandomSource | None = None):
        """
        Parameters:
            name:           identifier of the cluster
            cluster_config: quotas and rates used during evolution
            network_config: configuration for brand new networks
            rng:            random source used for selection and mutation
        """
        self.name          : str           = name
        self.networks      : list[Network] = []
        self.cluster_config: ClusterConfig = cluster_config
        self.network_config: NetworkConfig = network_config
        self._rng          : RandomSource  = rng if rng is not None else RandomSource()

    def get_strongest_network(self) -> Network | None:
        if not self.networks:
            return None
        return max(self.networks, key=lambda network: network.strength)

    def evolve(self, traveller_candidates: list[Network]) -> None:
        """
        Evolve the cluster by one generation.

        Steps:
        1. sort the members by strength (strongest first)
        2. cull the weakest half
        3. compute how many clones, travellers and crossover offspring are missing
           with respect to the target composition of a full cluster
        4. add clones of survivors, strongly biased towards the strongest
        5. add travellers, taken from the front of 'traveller_candidates'
        6. add crossover offspring of two distinct survivors, mildly biased towards the strongest
        7. mutate all survivors except the strongest
        8. add the new networks to the cluster

        Parameters:
            traveller_candidates: networks offered by the supercluster; those taken
                                  are removed from the list, the rest are left in it
        """
        config = self.cluster_config

        # Sort by strength and cull the weakest half
        self.networks.sort(key=lambda network: network.strength, reverse=True)
        if len(self.networks) > 1:
            half = int(round(len(self.networks) / 2))
            self.networks = self.networks[:half]

        survivors    = self.networks
        new_networks = []

        if survivors and len(survivors) < config.max_networks:
            clones     = sum(1 for n in survivors if n.origin == NetworkOrigin.CLONE)
            travellers = sum(1 for n in survivors if n.origin == NetworkOrigin.TRAVELLER)
            others     = len(survivors) - clones - travellers

            max_clones     = int(round(config.max_networks * config.clone_ratio))
            max_travellers = int(round(config.max_networks * config.traveller_ratio))
            max_others     = config.max_networks - max_clones - max_travellers

            # Categories above target do not shrink, so the per-category deficits
            # are capped by the free places left in the cluster.
            quota = config.max_networks - len(survivors)

            delta_clones     = min(quota, int(clamp(max_clones - clones, 0, max_clones)))
            quota           -= delta_clones
            delta_travellers = min(quota, int(clamp(max_travellers - travellers, 0, max_travellers)))
            quota           -= delta_travellers
            delta_others     = min(quota, int(clamp(max_others - others, 0, max_others)))

            # Clones, strongly biased towards the strongest survivors
            for _ in range(delta_clones):
                index = self._rng.biased_index(len(survivors), config.clone_selection_bias)
                new_networks.append(survivors[index].clone())

            # Travellers, already selected by the supercluster
            while delta_travellers > 0 and traveller_candidates:
                traveller = traveller_candidates.pop(0)
                traveller.origin = NetworkOrigin.TRAVELLER
                new_networks.append(traveller)
                delta_travellers -= 1

            # Crossover offspring of two distinct survivors
            while delta_others > 0 and len(survivors) > 1:
                index_a = self._rng.biased_index(len(survivors), config.crossover_selection_bias)
                index_b = self._rng.biased_index(len(survivors), config.crossover_selection_bias)
                if index_a == index_b:
                    continue

                new_networks.append(survivors[index_a].crossover(survivors[index_b]))
                delta_others -= 1

        # Mutate existing networks, except the strongest
        for network in survivors[1:]:
            if self._rng.random() < config.heavy_mutation_rate:
                network.heavily_mutate(0.25)
            else:
                network.mutate()

        self.networks.extend(new_networks)

        logger.debug("cluster %s evolved: %d survivors, %d new networks",
                     self.name, len(survivors), len(new_networks))

    def __len__(self):
        return len(self.networks)

    def __str__(self):
        return '\n'.join(str(network) for network in self.networks)
