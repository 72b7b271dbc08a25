"""
Unit tests for the Supercluster class.

Clustering tests use networks with one input and two passthrough outputs and
no hidden layer, so that the output direction of each network can be set
through its bias weights.
"""

from unittest.mock import patch

import pytest

from nichevo.exceptions import PopulationInvariantError
from nichevo.phenotype  import Network, NetworkOrigin
from nichevo.pool       import Cluster, Supercluster
from nichevo.run.config import ClusterConfig, NetworkConfig


# ============================================================================
# Helpers & Fixtures
# ============================================================================

def weights(network):
    return [axion.weight for layer in network.axions for axion in layer]


def pointing(config, x, y, strength, rng=None):
    """A network whose output vector is (x, y) whatever its input."""
    network = Network(config, rng=rng)
    network.axions[0][0].weight = x   # bias -> output 0
    network.axions[0][1].weight = y   # bias -> output 1
    network.update_strength(strength)
    return network


@pytest.fixture
def planar_config():
    return NetworkConfig(input_rows=1, output_rows=2, hidden_columns=0, hidden_rows=0)


@pytest.fixture
def supercluster(supercluster_config, cluster_config, network_config, rng):
    return Supercluster(supercluster_config, cluster_config, network_config, rng)


@pytest.fixture
def planar_supercluster(supercluster_config, cluster_config, planar_config, rng):
    return Supercluster(supercluster_config, cluster_config, planar_config, rng)


@pytest.fixture
def five_directions(planar_config, rng):
    """
    Five networks pointing in three directions:
    A (strength 10) and B (5) close to +x, C (8) along +y, D (7) and E (1) close to -x.
    """
    return {"A": pointing(planar_config,  1.0,  0.0, 10.0, rng),
            "B": pointing(planar_config,  0.9,  0.1,  5.0, rng),
            "C": pointing(planar_config,  0.0,  1.0,  8.0, rng),
            "D": pointing(planar_config, -1.0,  0.0,  7.0, rng),
            "E": pointing(planar_config, -1.0, -0.1,  1.0, rng)}


def populate(supercluster, networks_per_cluster, archived):
    """Fill a supercluster with full clusters of random networks and an archive."""
    for c in range(supercluster.supercluster_config.max_clusters):
        cluster = Cluster(f"cluster-{c}", supercluster.cluster_config, supercluster.network_config, supercluster.rng)
        for s in range(networks_per_cluster):
            network = supercluster._new_random_network()
            network.update_strength(float(s))
            cluster.networks.append(network)
        supercluster.clusters.append(cluster)

    for s in range(archived):
        network = supercluster._new_random_network()
        network.update_strength(float(s))
        supercluster.archive.append(network)


# ============================================================================
# Test Population Management
# ============================================================================

class TestSuperclusterPopulation:
    """Test population generation and accessors."""

    def test_max_population(self, supercluster):
        assert supercluster.max_population == 30

    def test_generate_random_population(self, supercluster):
        supercluster.generate_random_population()

        assert supercluster.clusters == []
        assert len(supercluster.archive) == 30
        assert all(n.origin == NetworkOrigin.BOOTSTRAP for n in supercluster.archive)
        assert all(any(w != 0.0 for w in weights(n)) for n in supercluster.archive)

    def test_generate_replaces_population(self, supercluster):
        populate(supercluster, 10, 4)
        supercluster.generate_random_population()
        assert supercluster.clusters == []
        assert len(supercluster.archive) == 30

    def test_get_all_networks(self, supercluster):
        populate(supercluster, 2, 3)

        everything = supercluster.get_all_networks()
        clustered  = supercluster.get_all_networks(include_archived=False)

        assert len(everything) == 9
        assert everything[:3] == supercluster.archive
        assert len(clustered) == 6
        assert not any(n in supercluster.archive for n in clustered)

    def test_get_strongest_network(self, supercluster, planar_config):
        populate(supercluster, 2, 2)
        champion = pointing(planar_config, 1.0, 1.0, 99.0)
        supercluster.archive.append(champion)
        assert supercluster.get_strongest_network() is champion

    def test_get_strongest_network_empty(self, supercluster):
        assert supercluster.get_strongest_network() is None


# ============================================================================
# Test Cluster
# ============================================================================

class TestSuperclusterCluster:
    """Test Supercluster.cluster (niching by output angle)."""

    def test_networks_grouped_by_direction(self, planar_supercluster, five_directions):
        planar_supercluster.archive = list(five_directions.values())

        planar_supercluster.cluster()

        memberships = [cluster.networks for cluster in planar_supercluster.clusters]
        A, B, C, D, E = (five_directions[k] for k in "ABCDE")
        assert memberships == [[A, B], [C], [D, E]]
        assert planar_supercluster.archive == []

    def test_reference_is_strongest_member(self, planar_supercluster, five_directions):
        planar_supercluster.archive = list(five_directions.values())

        planar_supercluster.cluster()

        for cluster in planar_supercluster.clusters:
            assert cluster.networks[0] is cluster.get_strongest_network()

    def test_leftovers_archived(self, planar_supercluster, five_directions):
        planar_supercluster.supercluster_config = planar_supercluster.supercluster_config.clone(max_clusters=2)
        planar_supercluster.archive = list(five_directions.values())

        planar_supercluster.cluster()

        assert len(planar_supercluster.clusters) == 2
        assert planar_supercluster.archive == [five_directions["D"], five_directions["E"]]

    def test_archive_keeps_strongest(self, planar_supercluster, five_directions):
        planar_supercluster.supercluster_config = \
            planar_supercluster.supercluster_config.clone(max_clusters=1, max_archived_networks=2)
        planar_supercluster.archive = list(five_directions.values())

        planar_supercluster.cluster()

        # C (8) and D (7) are the strongest leftovers; E is dropped
        assert planar_supercluster.archive == [five_directions["C"], five_directions["D"]]
        assert five_directions["E"] not in planar_supercluster.get_all_networks()

    def test_wide_angle_gathers_everything(self, planar_supercluster, five_directions):
        planar_supercluster.supercluster_config = planar_supercluster.supercluster_config.clone(clustering_angle=180.0)
        planar_supercluster.archive = list(five_directions.values())

        planar_supercluster.cluster()

        first, *padding = planar_supercluster.clusters
        assert len(first) == 5
        assert len(padding) == 2
        for cluster in padding:
            assert len(cluster) == planar_supercluster.cluster_config.max_networks
            assert all(n.origin == NetworkOrigin.BOOTSTRAP for n in cluster.networks)

    def test_empty_population_padded(self, planar_supercluster):
        planar_supercluster.cluster()

        assert len(planar_supercluster.clusters) == 3
        assert all(len(cluster) == 10 for cluster in planar_supercluster.clusters)

    def test_zero_output_joins_reference(self, planar_supercluster, planar_config):
        reference = pointing(planar_config, 1.0, 0.0, 2.0)
        silent    = pointing(planar_config, 0.0, 0.0, 1.0)
        planar_supercluster.archive = [silent, reference]

        planar_supercluster.cluster()

        assert planar_supercluster.clusters[0].networks == [reference, silent]

    def test_inputs_set_to_one(self, planar_supercluster, five_directions):
        planar_supercluster.archive = list(five_directions.values())
        for network in planar_supercluster.archive:
            network.set_inputs([0.3])

        planar_supercluster.cluster()

        assert all(n.neurons[0][1].input == 1.0 for n in five_directions.values())

    def test_preset_inputs_kept(self, planar_supercluster, five_directions):
        planar_supercluster.archive = list(five_directions.values())
        for network in planar_supercluster.archive:
            network.set_inputs([0.3])

        planar_supercluster.cluster(clustering_inputs_set=True)

        assert all(n.neurons[0][1].input == 0.3 for n in five_directions.values())

    def test_preset_inputs_drive_clustering(self, planar_supercluster, planar_config):
        # outputs: a -> (1, 0) for any input, b -> (1 - input, input)
        a = pointing(planar_config, 1.0, 0.0, 2.0)
        b = pointing(planar_config, 1.0, 0.0, 1.0)
        b.axions[0][2].weight = -1.0   # input -> output 0
        b.axions[0][3].weight = 1.0    # input -> output 1

        for network in (a, b):
            network.set_inputs([0.0])
        planar_supercluster.archive = [a, b]
        planar_supercluster.cluster(clustering_inputs_set=True)
        assert planar_supercluster.clusters[0].networks == [a, b]

        # drop the random padding clusters before clustering again
        planar_supercluster.clusters.clear()
        planar_supercluster.archive = [a, b]
        planar_supercluster.cluster()
        assert planar_supercluster.clusters[0].networks == [a]
        assert planar_supercluster.clusters[1].networks == [b]


# ============================================================================
# Test Evolve
# ============================================================================

class TestSuperclusterEvolve:
    """Test Supercluster.evolve."""

    def test_travellers_move_from_archive(self, supercluster):
        populate(supercluster, 10, 5)

        supercluster.evolve()

        # each of the 3 clusters takes one traveller
        assert len(supercluster.archive) == 2
        assert all(len(cluster) == 10 for cluster in supercluster.clusters)
        supercluster.validate()

    def test_archive_not_mutated(self, supercluster):
        populate(supercluster, 10, 5)
        before = {id(n): weights(n) for n in supercluster.archive}

        supercluster.evolve()

        for network in supercluster.archive:
            assert weights(network) == before[id(network)]

    def test_empty_archive(self, supercluster):
        populate(supercluster, 10, 0)

        supercluster.evolve()

        assert supercluster.archive == []
        assert all(len(cluster) == 9 for cluster in supercluster.clusters)

    def test_no_clusters(self, supercluster):
        supercluster.generate_random_population()
        archived = list(supercluster.archive)

        supercluster.evolve()

        assert supercluster.archive == archived


# ============================================================================
# Test Merge
# ============================================================================

class TestSuperclusterMerge:
    """Test Supercluster.merge."""

    def test_merge_size(self, supercluster):
        populate(supercluster, 10, 5)

        supercluster.merge()

        assert supercluster.clusters == []
        assert len(supercluster.archive) == supercluster.max_population

    def test_first_network_is_perfect_clone(self, supercluster):
        populate(supercluster, 10, 5)
        strongest = supercluster.get_strongest_network()

        supercluster.merge()

        first = supercluster.archive[0]
        assert first is not strongest
        assert first.origin == NetworkOrigin.CLONE
        assert weights(first) == weights(strongest)

    def test_composition(self, supercluster):
        populate(supercluster, 10, 5)

        supercluster.merge()

        origins = [n.origin for n in supercluster.archive]
        # clone quota: round(30 * 0.2)
        assert origins.count(NetworkOrigin.CLONE) == 6
        assert origins.count(NetworkOrigin.CROSSOVER) == 24

    def test_primed_clones_heavily_mutated(self, supercluster):
        populate(supercluster, 10, 5)

        with patch.object(Network, 'heavily_mutate', autospec=True) as heavily_mutate:
            supercluster.merge()

        assert heavily_mutate.call_count == 2
        assert heavily_mutate.call_args_list[0].args == (supercluster.archive[3], 0.25)
        assert heavily_mutate.call_args_list[1].args == (supercluster.archive[4], 0.50)

    def test_old_networks_discarded(self, supercluster):
        populate(supercluster, 10, 5)
        old = {id(n) for n in supercluster.get_all_networks()}

        supercluster.merge()

        assert not any(id(n) in old for n in supercluster.archive)

    def test_empty_population(self, supercluster):
        supercluster.merge()
        assert supercluster.clusters == []
        assert supercluster.archive == []

    def test_single_network(self, supercluster, network_config, rng):
        only = Network(network_config, rng=rng)
        only.randomize_weights()
        supercluster.archive = [only]

        supercluster.merge()

        assert len(supercluster.archive) == 30
        assert all(n.origin == NetworkOrigin.CLONE for n in supercluster.archive)

    def test_small_population_keeps_primed_clones(self, supercluster_config, network_config, rng):
        supercluster = Supercluster(supercluster_config.clone(max_clusters=1),
                                    ClusterConfig(max_networks=2),
                                    network_config,
                                    rng)
        supercluster.generate_random_population()

        supercluster.merge()

        assert len(supercluster.archive) == 5


# ============================================================================
# Test Prune & Validate
# ============================================================================

class TestSuperclusterPruneStagnant:
    """Test Supercluster.prune_stagnant."""

    def test_prunes_only_stagnant_archived(self, supercluster):
        populate(supercluster, 2, 4)
        limit = supercluster.supercluster_config.max_stagnant_evolutions
        supercluster.archive[0].stagnant_evolutions = limit + 1
        supercluster.archive[1].stagnant_evolutions = limit
        supercluster.clusters[0].networks[0].stagnant_evolutions = limit + 5
        stagnant = supercluster.archive[0]

        removed = supercluster.prune_stagnant()

        assert removed == 1
        assert stagnant not in supercluster.archive
        assert len(supercluster.archive) == 3
        assert len(supercluster.clusters[0]) == 2


class TestSuperclusterValidate:
    """Test Supercluster.validate."""

    def test_valid_population(self, supercluster):
        populate(supercluster, 3, 3)
        supercluster.validate()

    def test_network_in_two_places(self, supercluster):
        populate(supercluster, 3, 3)
        supercluster.archive.append(supercluster.clusters[0].networks[0])
        with pytest.raises(PopulationInvariantError, match="more than one place"):
            supercluster.validate()

    def test_too_many_clusters(self, supercluster):
        populate(supercluster, 1, 0)
        supercluster.clusters.append(supercluster._new_cluster())
        with pytest.raises(PopulationInvariantError, match="4 clusters, expected exactly 3"):
            supercluster.validate()

    def test_missing_cluster_after_clustering(self, supercluster):
        supercluster.generate_random_population()
        supercluster.cluster()
        supercluster.validate()

        supercluster.clusters.pop()

        with pytest.raises(PopulationInvariantError, match="2 clusters, expected exactly 3"):
            supercluster.validate()

    def test_no_clusters_after_merge(self, supercluster):
        populate(supercluster, 3, 3)
        supercluster.merge()
        assert supercluster.clusters == []
        supercluster.validate()

    def test_archive_over_capacity(self, supercluster):
        supercluster.supercluster_config = supercluster.supercluster_config.clone(max_archived_networks=2)
        populate(supercluster, 1, 3)
        with pytest.raises(PopulationInvariantError, match="archive holds"):
            supercluster.validate()

    def test_unclustered_archive_not_capped(self, supercluster):
        supercluster.supercluster_config = supercluster.supercluster_config.clone(max_archived_networks=2)
        supercluster.generate_random_population()
        supercluster.validate()
