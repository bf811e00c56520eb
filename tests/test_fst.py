import math
import unittest

import numpy as np

from popgenkit import (
    FstStatistics,
    Genotype,
    Individual,
    InsufficientPopulationsError,
    Population,
)


def population_from_alleles(name, marker_alleles, ploidy=1):
    """Build a population where ``marker_alleles`` maps marker -> flat allele list.

    Consecutive alleles are grouped into individuals of the given ploidy.
    """
    n_inds = max(len(a) for a in marker_alleles.values()) // ploidy
    inds = []
    for i in range(n_inds):
        genotypes = []
        for marker, alleles in marker_alleles.items():
            chunk = alleles[i * ploidy : (i + 1) * ploidy]
            if chunk:
                genotypes.append(Genotype(marker, chunk))
        inds.append(Individual(f"{name}_{i}", genotypes))
    return Population(name, individuals=inds)


class TestFst(unittest.TestCase):
    def setUp(self):
        self.fst = FstStatistics(verbose=False, debug=False)

    def test_identical_frequencies_give_zero(self):
        pop1 = population_from_alleles("p1", {"m1": list("AATT"), "m2": list("CCCG")})
        pop2 = population_from_alleles("p2", {"m1": list("TATA"), "m2": list("GCCC")})
        self.assertAlmostEqual(self.fst.fst([pop1, pop2], ["m1", "m2"]), 0.0)

    def test_fixed_differences_give_one(self):
        pop1 = population_from_alleles("p1", {"m1": list("AAAA")})
        pop2 = population_from_alleles("p2", {"m1": list("TTTT")})
        self.assertAlmostEqual(self.fst.fst([pop1, pop2], {"m1"}), 1.0)

    def test_known_value(self):
        # p1: A=0.75, p2: A=0.25, equal sizes. H_T = 0.5, H_S = 0.375.
        pop1 = population_from_alleles("p1", {"m1": list("AAAT")})
        pop2 = population_from_alleles("p2", {"m1": list("ATTT")})
        self.assertAlmostEqual(self.fst.fst([pop1, pop2], ["m1"]), 0.25)

    def test_order_invariance(self):
        rng = np.random.default_rng(7)
        pops = []
        for k, p in enumerate([0.2, 0.5, 0.9]):
            markers = {
                f"m{m}": list(rng.choice(["A", "T"], size=20, p=[p, 1 - p]))
                for m in range(10)
            }
            pops.append(population_from_alleles(f"p{k}", markers, ploidy=2))

        names = [f"m{m}" for m in range(10)]
        forward = self.fst.fst(pops, names)
        self.assertAlmostEqual(forward, self.fst.fst(pops[::-1], names))
        self.assertAlmostEqual(forward, self.fst.fst([pops[1], pops[2], pops[0]], names))
        self.assertGreater(forward, 0.0)

    def test_requires_two_populations(self):
        pop = population_from_alleles("p1", {"m1": list("AT")})
        with self.assertRaises(InsufficientPopulationsError):
            self.fst.fst([pop], ["m1"])
        with self.assertRaises(InsufficientPopulationsError):
            self.fst.weir_cockerham_fst([], ["m1"])

    def test_marker_absent_from_one_population(self):
        pop1 = population_from_alleles("p1", {"m1": list("AAAA"), "m2": list("CCGG")})
        pop2 = population_from_alleles("p2", {"m1": list("TTTT")})
        value = self.fst.fst([pop1, pop2], ["m1", "m2"])
        self.assertTrue(math.isfinite(value))
        # m2 only adds within-population diversity, pulling Fst below 1.
        self.assertLess(value, 1.0)

    def test_no_data_and_no_variation(self):
        pop1 = population_from_alleles("p1", {"m1": list("AAAA")})
        pop2 = population_from_alleles("p2", {"m1": list("AAAA")})
        self.assertTrue(math.isnan(self.fst.fst([pop1, pop2], ["absent"])))
        self.assertEqual(self.fst.fst([pop1, pop2], ["m1"]), 0.0)

    def test_fst_per_marker(self):
        pop1 = population_from_alleles("p1", {"m1": list("AAAA"), "m2": list("AATT")})
        pop2 = population_from_alleles("p2", {"m1": list("TTTT"), "m2": list("TTAA")})
        per_marker = self.fst.fst_per_marker([pop1, pop2], ["m1", "m2", "m3"])
        self.assertEqual(list(per_marker.index), ["m1", "m2", "m3"])
        self.assertAlmostEqual(per_marker["m1"], 1.0)
        self.assertAlmostEqual(per_marker["m2"], 0.0)
        self.assertTrue(np.isnan(per_marker["m3"]))

    def test_weir_cockerham_fixed_differences(self):
        pop1 = population_from_alleles("p1", {"m1": list("AAAAAAAAAA")}, ploidy=2)
        pop2 = population_from_alleles("p2", {"m1": list("TTTTTTTTTT")}, ploidy=2)
        self.assertAlmostEqual(self.fst.weir_cockerham_fst([pop1, pop2], ["m1"]), 1.0)

    def test_weir_cockerham_undefined(self):
        pop1 = population_from_alleles("p1", {"m1": list("AA")}, ploidy=2)
        pop2 = population_from_alleles("p2", {"m1": list("AA")}, ploidy=2)
        # One individual per population: n_bar <= 1.
        self.assertTrue(math.isnan(self.fst.weir_cockerham_fst([pop1, pop2], ["m1"])))


if __name__ == "__main__":
    unittest.main()
