import unittest

import numpy as np
import pandas as pd

from popgenkit import Genotype, Individual, Population, SummaryStatistics


def make_population(name, rows):
    inds = [
        Individual(uid, [Genotype(m, alleles) for m, alleles in markers.items()])
        for uid, markers in rows.items()
    ]
    return Population(name=name, individuals=inds)


class TestSummaryStatistics(unittest.TestCase):
    def setUp(self):
        self.summary = SummaryStatistics(verbose=False, debug=False)
        self.pop1 = make_population(
            "north",
            {
                "a": {"m1": ["A", "T"], "m2": ["C"]},
                "b": {"m1": ["A", "A"], "m2": ["C", "G"]},
                "c": {"m1": ["T", "T"], "m2": ["-", "-"]},
            },
        )
        self.pop2 = make_population(
            "south",
            {
                "d": {"m1": ["T", "T"], "m2": ["G", "G"]},
                "e": {"m1": ["T", "T"], "m2": ["G", "C"]},
            },
        )

    def test_observed_heterozygosity(self):
        ho = self.summary.observed_heterozygosity(self.pop1)
        self.assertEqual(ho.name, "Ho")
        self.assertEqual(list(ho.index), ["m1", "m2"])
        self.assertAlmostEqual(ho["m1"], 1 / 3)
        self.assertAlmostEqual(ho["m2"], 1 / 2)

    def test_expected_heterozygosity(self):
        he = self.summary.expected_heterozygosity(self.pop1, ["m1", "m2", "absent"])
        self.assertAlmostEqual(he["m1"], 0.5)
        self.assertAlmostEqual(he["m2"], 4 / 9)
        self.assertTrue(np.isnan(he["absent"]))

    def test_nucleotide_diversity(self):
        pi = self.summary.nucleotide_diversity(self.pop1)
        self.assertAlmostEqual(pi["m1"], 0.6)
        self.assertAlmostEqual(pi["m2"], 2 / 3)

        single = [Individual("x", [Genotype("m1", ["A"])])]
        self.assertTrue(np.isnan(self.summary.nucleotide_diversity(single)["m1"]))

    def test_allele_frequency_table(self):
        table = self.summary.allele_frequency_table(self.pop1, ["m1"])
        self.assertEqual(list(table.columns), ["marker", "allele", "count", "frequency"])
        self.assertEqual(len(table), 2)
        self.assertEqual(table["count"].sum(), 6)
        self.assertAlmostEqual(table["frequency"].sum(), 1.0)

    def test_calculate_summary_statistics(self):
        result = self.summary.calculate_summary_statistics([self.pop1, self.pop2])
        self.assertEqual(set(result), {"overall", "per_population", "Fst"})

        overall = result["overall"]
        self.assertIsInstance(overall, pd.DataFrame)
        self.assertEqual(list(overall.columns), ["N", "n_alleles", "Ho", "He", "Pi"])
        self.assertEqual(overall.loc["m1", "N"], 5)
        self.assertEqual(overall.loc["m2", "N"], 4)

        self.assertEqual(set(result["per_population"]), {"north", "south"})
        self.assertEqual(result["per_population"]["south"].loc["m1", "n_alleles"], 1)

        fst = result["Fst"]
        self.assertIsInstance(fst, pd.Series)
        self.assertEqual(list(fst.index), ["m1", "m2"])
        self.assertGreater(fst["m1"], 0.0)

    def test_repeated_population_names_are_kept(self):
        twin = make_population("north", {"f": {"m1": ["A", "A"], "m2": ["G", "G"]}})
        result = self.summary.calculate_summary_statistics([self.pop1, twin, self.pop2])
        per_pop = result["per_population"]
        self.assertEqual(list(per_pop), ["north", "north_2", "south"])
        self.assertEqual(per_pop["north"].loc["m1", "N"], 3)
        self.assertEqual(per_pop["north_2"].loc["m1", "N"], 1)

    def test_single_population_has_no_fst(self):
        result = self.summary.calculate_summary_statistics([self.pop1])
        self.assertIsNone(result["Fst"])
        self.assertEqual(list(result["per_population"]), ["north"])


if __name__ == "__main__":
    unittest.main()
