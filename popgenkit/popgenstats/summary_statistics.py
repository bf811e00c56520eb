from typing import TYPE_CHECKING, Dict, List, Sequence

import numpy as np
import pandas as pd

from popgenkit.models.individual import Individual
from popgenkit.popgenstats.allele_frequencies import AlleleFrequencies
from popgenkit.popgenstats.fst import FstStatistics
from popgenkit.utils.containers import AlleleConfig
from popgenkit.utils.logging import LoggerManager
from popgenkit.utils.misc import as_individuals, unique_in_order

if TYPE_CHECKING:
    from popgenkit.models.population import Population


class SummaryStatistics:
    """Per-marker summary tables for one or more populations.

    All methods return pandas objects indexed by marker name. Markers without data get NaN.
    """

    def __init__(
        self,
        config: AlleleConfig | None = None,
        verbose: bool = False,
        debug: bool = False,
    ) -> None:
        """Initialize the SummaryStatistics object.

        Args:
            config (AlleleConfig | None): Allele configuration. If None, the process default is used.
            verbose (bool): If True, enable verbose logging.
            debug (bool): If True, enable debug logging.
        """
        self.config = config
        self.verbose = verbose
        self.debug = debug

        logman = LoggerManager(__name__, debug=debug, verbose=verbose)
        self.logger = logman.get_logger()
        self.allele_freqs = AlleleFrequencies(config=config, verbose=verbose, debug=debug)

    def _markers(self, individuals: List[Individual], marker_names) -> List[str]:
        if marker_names is None:
            return self.allele_freqs.marker_names(individuals)
        return unique_in_order(marker_names)

    def observed_heterozygosity(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
    ) -> pd.Series:
        """Calculate observed heterozygosity (Ho) for each marker.

        Ho is the proportion of typed individuals carrying at least two distinct non-blank alleles.

        Returns:
            pd.Series: Ho per marker.
        """
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)

        ho = []
        for marker in markers:
            typed = 0
            hets = 0
            for ind in individuals:
                alleles = [
                    a
                    for g in ind.get_genotypes(marker)
                    for a in g.get_alleles(config=self.config)
                ]
                if not alleles:
                    continue
                typed += 1
                if len(set(alleles)) > 1:
                    hets += 1
            ho.append(hets / typed if typed else np.nan)

        return pd.Series(ho, index=pd.Index(markers, name="marker"), name="Ho")

    def expected_heterozygosity(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
    ) -> pd.Series:
        """Calculate expected heterozygosity (He = 1 - sum(p^2)) for each marker.

        Returns:
            pd.Series: He per marker.
        """
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)

        he = []
        for marker in markers:
            freqs = self.allele_freqs.frequencies(individuals, marker)
            he.append(1.0 - sum(p**2 for p in freqs.values()) if freqs else np.nan)

        return pd.Series(he, index=pd.Index(markers, name="marker"), name="He")

    def nucleotide_diversity(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
    ) -> pd.Series:
        """Calculate per-marker nucleotide diversity from allele frequencies.

        Notes:
            The bias correction ``n / (n - 1)`` uses the number of non-blank alleles ``n``. This is the diversity among all allele copies, including the copies within a diploid individual.

        Returns:
            pd.Series: Pi per marker; NaN where fewer than two alleles are present.
        """
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)
        he = self.expected_heterozygosity(individuals, markers)

        n = np.array(
            [self.allele_freqs.allele_count(individuals, m) for m in markers], dtype=float
        )
        pi = np.full(len(markers), np.nan, dtype=float)
        valid = n > 1
        pi[valid] = he.to_numpy()[valid] * n[valid] / (n[valid] - 1)

        return pd.Series(pi, index=pd.Index(markers, name="marker"), name="Pi")

    def allele_frequency_table(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
    ) -> pd.DataFrame:
        """Long-format table of allele counts and frequencies.

        Returns:
            pd.DataFrame: Columns ``marker, allele, count, frequency``.
        """
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)

        rows = []
        for marker in markers:
            counts = self.allele_freqs.allele_counts(individuals, marker)
            total = sum(counts.values())
            for allele, count in counts.items():
                rows.append((marker, allele, count, count / total))

        return pd.DataFrame(rows, columns=["marker", "allele", "count", "frequency"])

    def _summarize(self, individuals: List[Individual], markers: List[str]) -> pd.DataFrame:
        n_alleles = [len(self.allele_freqs.allele_counts(individuals, m)) for m in markers]
        n_typed = [len(self.allele_freqs.typed_individuals(individuals, m)) for m in markers]
        return pd.DataFrame(
            {
                "N": pd.Series(n_typed, index=pd.Index(markers, name="marker")),
                "n_alleles": pd.Series(n_alleles, index=pd.Index(markers, name="marker")),
                "Ho": self.observed_heterozygosity(individuals, markers),
                "He": self.expected_heterozygosity(individuals, markers),
                "Pi": self.nucleotide_diversity(individuals, markers),
            }
        )

    def calculate_summary_statistics(
        self,
        populations: Sequence["Population"],
        marker_names: Sequence[str] | None = None,
    ) -> Dict[str, object]:
        """Calculate a suite of per-marker summary statistics.

        Computes overall (pooled) and per-population typed sample size, number of alleles, observed heterozygosity (Ho), expected heterozygosity (He) and nucleotide diversity (Pi). With two or more populations, per-marker Wright's Fst is added.

        Args:
            populations (Sequence[Population]): One or more populations.
            marker_names (Sequence[str] | None): Markers to use. Defaults to every marker in any population.

        Returns:
            dict: ``{"overall": DataFrame, "per_population": {name: DataFrame}, "Fst": Series | None}``. A repeated population name gets its 1-based position appended, e.g. ``"north_2"``.
        """
        populations = list(populations)
        self.logger.info("Calculating summary statistics...")

        pooled = [ind for pop in populations for ind in as_individuals(pop)]
        markers = self._markers(pooled, marker_names)

        summary = {
            "overall": self._summarize(pooled, markers),
            "per_population": {},
            "Fst": None,
        }

        for i, pop in enumerate(populations):
            name = getattr(pop, "name", "") or f"pop{i + 1}"
            # Population names may repeat; keep every population's table.
            if name in summary["per_population"]:
                name = f"{name}_{i + 1}"
            summary["per_population"][name] = self._summarize(as_individuals(pop), markers)

        if len(populations) > 1:
            fst = FstStatistics(config=self.config, verbose=self.verbose, debug=self.debug)
            summary["Fst"] = fst.fst_per_marker(populations, markers)

        self.logger.info("Summary statistics calculation complete!")
        return summary
