from collections import Counter
from typing import TYPE_CHECKING, Dict, List, Sequence, Tuple

import numpy as np

from popgenkit.models.individual import Individual
from popgenkit.models.marker import Marker
from popgenkit.utils.containers import AlleleConfig, resolve_config
from popgenkit.utils.logging import LoggerManager
from popgenkit.utils.misc import as_individuals, unique_in_order

if TYPE_CHECKING:
    from popgenkit.models.population import Population

Samples = "Population | Sequence[Individual]"


class AlleleFrequencies:
    """Per-marker allele counting over a Population or a list of Individuals.

    All counts skip blank alleles, as decided by the allele configuration in effect when the method is called. An individual that lacks a marker, or whose genotype at the marker is entirely blank, contributes nothing for that marker.

    Example:
        >>> af = AlleleFrequencies()
        >>> af.frequencies(pop, "D7S123")
        {'104': 0.5, '107': 0.25, '111': 0.25}
        >>> af.is_segregating(pop, "D7S123")
        True
    """

    def __init__(
        self,
        config: AlleleConfig | None = None,
        verbose: bool = False,
        debug: bool = False,
    ) -> None:
        """Initialize the AlleleFrequencies engine.

        Args:
            config (AlleleConfig | None): Allele configuration. If None, the process default is looked up on every call.
            verbose (bool): Whether to display verbose output. Defaults to False.
            debug (bool): Whether to display debug output. Defaults to False.
        """
        self.config = config

        logman = LoggerManager(__name__, debug=debug, verbose=verbose)
        self.logger = logman.get_logger()

    def _alleles(self, ind: Individual, marker: str) -> List[str]:
        cfg = resolve_config(self.config)
        return [a for g in ind.get_genotypes(marker) for a in g.get_alleles(config=cfg)]

    def marker_names(self, samples: Samples) -> List[str]:
        """Marker names found across the samples, in first-seen order."""
        return unique_in_order(
            name for ind in as_individuals(samples) for name in ind.get_marker_names()
        )

    def allele_counts(self, samples: Samples, marker: str) -> Counter:
        """Count each non-blank allele at ``marker``.

        Args:
            samples (Population | Sequence[Individual]): The samples.
            marker (str): Marker name.

        Returns:
            Counter: allele -> number of copies.
        """
        counts = Counter()
        for ind in as_individuals(samples):
            counts.update(self._alleles(ind, marker))
        return counts

    def carrier_counts(self, samples: Samples, marker: str) -> Counter:
        """Count the individuals carrying each non-blank allele at ``marker``.

        A homozygous individual counts once for its allele.

        Returns:
            Counter: allele -> number of carrier individuals.
        """
        carriers = Counter()
        for ind in as_individuals(samples):
            carriers.update(set(self._alleles(ind, marker)))
        return carriers

    def allele_count(self, samples: Samples, marker: str) -> int:
        """Total number of non-blank alleles at ``marker``."""
        return sum(self.allele_counts(samples, marker).values())

    def has_data(self, samples: Samples, marker: str) -> bool:
        return self.allele_count(samples, marker) > 0

    def frequencies(self, samples: Samples, marker: str) -> Dict[str, float]:
        """Compute allele frequencies at ``marker``.

        Frequencies are allele counts divided by the total number of non-blank alleles and sum to 1.

        Args:
            samples (Population | Sequence[Individual]): The samples.
            marker (str): Marker name.

        Returns:
            Dict[str, float]: allele -> frequency. Empty when the samples carry no non-blank allele at the marker.
        """
        counts = self.allele_counts(samples, marker)
        total = sum(counts.values())

        if total == 0:
            self.logger.debug(f"No non-blank alleles found for marker {marker}.")
            return {}

        return {allele: count / total for allele, count in counts.items()}

    def is_segregating(self, samples: Samples, marker: str) -> bool:
        """True if at least two distinct non-blank alleles occur at ``marker``."""
        return len(self.allele_counts(samples, marker)) >= 2

    def segregating_markers(
        self, samples: Samples, marker_names: Sequence[str] | None = None
    ) -> List[str]:
        """Return the segregating markers among ``marker_names`` (default: all markers)."""
        individuals = as_individuals(samples)
        if marker_names is None:
            marker_names = self.marker_names(individuals)

        return [
            m for m in unique_in_order(marker_names) if self.is_segregating(individuals, m)
        ]

    def get_marker(self, samples: Samples, name: str) -> Marker:
        """Build a Marker holding the allele frequencies of the samples.

        The marker's ``sample_size`` is the number of non-blank alleles.
        """
        counts = self.allele_counts(samples, name)
        total = sum(counts.values())
        freqs = {a: c / total for a, c in counts.items()} if total else {}
        return Marker(name, allele_frequencies=freqs, sample_size=total)

    def typed_individuals(self, samples: Samples, marker: str) -> List[Individual]:
        """Individuals with at least one non-blank allele at ``marker``."""
        return [ind for ind in as_individuals(samples) if self._alleles(ind, marker)]

    def heterozygote_frequency(self, samples: Samples, marker: str, allele: str) -> float:
        """Fraction of typed individuals heterozygous for ``allele``.

        An individual is heterozygous for an allele if it carries that allele together with at least one different allele at the marker.

        Returns:
            float: The frequency, or NaN when no individual is typed at the marker.
        """
        typed = 0
        hets = 0
        for ind in as_individuals(samples):
            alleles = self._alleles(ind, marker)
            if not alleles:
                continue
            typed += 1
            if allele in alleles and any(a != allele for a in alleles):
                hets += 1

        return hets / typed if typed else np.nan

    def allele_matrix(self, samples: Samples, marker: str) -> Tuple[np.ndarray, List[str]]:
        """Integer-encode the alleles at ``marker``.

        Args:
            samples (Population | Sequence[Individual]): The samples.
            marker (str): Marker name.

        Returns:
            Tuple[np.ndarray, List[str]]: A ``(n_individuals, max_ploidy)`` int64 array of allele codes with ``-1`` for blank or absent alleles, and the list of alleles indexed by code.
        """
        rows = [self._alleles(ind, marker) for ind in as_individuals(samples)]
        width = max((len(r) for r in rows), default=0)

        codes: Dict[str, int] = {}
        matrix = np.full((len(rows), width), -1, dtype=np.int64)
        for i, row in enumerate(rows):
            for j, allele in enumerate(row):
                matrix[i, j] = codes.setdefault(allele, len(codes))

        return matrix, list(codes)
