import unittest

from popgenkit import (
    Genotype,
    Individual,
    Marker,
    Population,
    reset_default_config,
    set_blank_alleles,
)


class TestGenotype(unittest.TestCase):
    def tearDown(self):
        reset_default_config()

    def test_alleles_are_strings_in_order(self):
        g = Genotype("D7S123", [104, 107], individual_id=1001)
        self.assertEqual(g.get_alleles(), ["104", "107"])
        self.assertEqual(g.individual_id, "1001")
        self.assertEqual(g.ploidy, 2)

    def test_blank_alleles_are_hidden_by_default(self):
        g = Genotype("m1", ["A", "-", "N", "?", "", " "])
        self.assertEqual(g.get_alleles(), ["A"])
        self.assertEqual(len(g.get_alleles(show_blank=True)), 6)
        self.assertFalse(g.is_blank())
        self.assertTrue(Genotype("m1", ["-", "N"]).is_blank())

    def test_reset_and_add_alleles(self):
        g = Genotype("m1", ["A", "T"])
        g.reset_alleles()
        self.assertEqual(g.get_alleles(), [])
        g.add_allele("C", "G")
        self.assertEqual(g.get_alleles(), ["C", "G"])

    def test_blank_pattern_change_applies_to_existing_genotypes(self):
        g = Genotype("m1", ["A", "."])
        self.assertEqual(g.get_alleles(), ["A", "."])

        set_blank_alleles(r"[\s\-N?.]?")
        self.assertEqual(g.get_alleles(), ["A"])

        reset_default_config()
        self.assertEqual(g.get_alleles(), ["A", "."])


class TestIndividual(unittest.TestCase):
    def test_mixed_ploidy_genotypes(self):
        ind = Individual("1")
        ind.add_genotype(
            Genotype("m1", [0]), Genotype("m3", [1, 1]), Genotype("m4", [0, 4])
        )

        self.assertEqual(len(ind.get_marker_names()), 3)
        self.assertEqual(set(ind.get_marker_names()), {"m1", "m3", "m4"})

        (m3,) = ind.get_genotypes("m3")
        self.assertEqual(len(m3.get_alleles()), 2)

        (m1,) = ind.get_genotypes("m1")
        self.assertEqual(m1.get_alleles(), ["0"])

        (m4,) = ind.get_genotypes("m4")
        self.assertEqual(m4.get_alleles(), ["0", "4"])

    def test_genotype_gets_owner_id_when_missing(self):
        g = Genotype("m1", ["A"])
        Individual("ind7", genotypes=[g])
        self.assertEqual(g.individual_id, "ind7")

    def test_mismatching_individual_id_is_accepted(self):
        g = Genotype("m1", ["A"], individual_id="other")
        ind = Individual("ind7", genotypes=[g])
        self.assertEqual(ind.get_genotypes("m1")[0].individual_id, "other")

    def test_missing_marker_and_removal(self):
        ind = Individual("1", genotypes=[Genotype("m1", ["A"])])
        self.assertEqual(ind.get_genotypes("nope"), [])
        self.assertTrue(ind.has_marker("m1"))
        self.assertTrue(ind.remove_marker("m1"))
        self.assertFalse(ind.remove_marker("m1"))
        self.assertEqual(ind.num_genotypes(), 0)

    def test_rejects_non_genotype(self):
        with self.assertRaises(TypeError):
            Individual("1").add_genotype(["A"])


class TestPopulation(unittest.TestCase):
    def setUp(self):
        self.ind1 = Individual("1001", [Genotype("D7S123", ["104", "107"])])
        self.ind2 = Individual(
            "1002",
            [Genotype("D7S123", ["104", "111"]), Genotype("D17S111", ["-", "-"])],
        )
        self.pop = Population("pop name", "description", [self.ind1, self.ind2])

    def test_duplicate_ids_are_kept(self):
        self.pop.add_individual(Individual("1001"))
        self.assertEqual(self.pop.get_number_individuals(), 3)
        self.assertEqual(len(self.pop.get_individual("1001")), 2)

    def test_marker_names_in_first_seen_order(self):
        self.assertEqual(self.pop.get_marker_names(), ["D7S123", "D17S111"])

    def test_number_typed_individuals(self):
        self.assertEqual(self.pop.get_number_individuals("D7S123"), 2)
        self.assertEqual(self.pop.get_number_individuals("D17S111"), 0)

    def test_get_marker_frequencies(self):
        marker = self.pop.get_marker("D7S123")
        self.assertIsInstance(marker, Marker)
        self.assertEqual(marker.sample_size, 4)
        freqs = marker.get_allele_frequencies()
        self.assertAlmostEqual(freqs["104"], 0.5)
        self.assertAlmostEqual(freqs["107"], 0.25)
        self.assertAlmostEqual(sum(freqs.values()), 1.0)

        self.assertEqual(self.pop.get_marker("D17S111").get_allele_frequencies(), {})
        self.assertEqual(len(self.pop.get_markers()), 2)

    def test_remove_individuals(self):
        removed = self.pop.remove_individuals(["1001"])
        self.assertEqual([i.unique_id for i in removed], ["1001"])
        self.assertEqual(len(self.pop), 1)

    def test_get_genotypes(self):
        self.assertEqual(len(self.pop.get_genotypes("D7S123")), 2)


class TestMarker(unittest.TestCase):
    def test_frequency_validation(self):
        marker = Marker("m1", {"A": 0.25, "T": 0.75}, sample_size=8)
        self.assertEqual(marker.get_alleles(), ["A", "T"])

        with self.assertRaises(ValueError):
            marker.add_allele_frequency("C", 1.5)

        marker.reset_alleles()
        self.assertEqual(marker.get_allele_frequencies(), {})


if __name__ == "__main__":
    unittest.main()
