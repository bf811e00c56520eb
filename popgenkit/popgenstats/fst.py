from collections import Counter
from typing import TYPE_CHECKING, Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from popgenkit.models.individual import Individual
from popgenkit.popgenstats.allele_frequencies import AlleleFrequencies
from popgenkit.utils.containers import AlleleConfig
from popgenkit.utils.custom_exceptions import InsufficientPopulationsError
from popgenkit.utils.logging import LoggerManager
from popgenkit.utils.misc import as_individuals, unique_in_order

if TYPE_CHECKING:
    from popgenkit.models.population import Population


class FstStatistics:
    """Class for calculating Fst among two or more populations.

    :meth:`fst` implements Wright's Fst in Nei's heterozygosity form. For each marker, the expected heterozygosity of the pooled sample (H_T) is compared with the sample-size weighted mean heterozygosity within populations (H_S):

    .. math::

        F_{ST} = \\frac{\\sum_m N_m (H_{T,m} - H_{S,m})}{\\sum_m N_m H_{T,m}}

    where :math:`N_m` is the number of non-blank alleles at marker :math:`m` across all populations. A population that lacks a marker contributes nothing to it.

    :meth:`weir_cockerham_fst` provides the Weir & Cockerham (1984) estimator for the same inputs.

    References:
        ..[1] Nei, M. (1973). Analysis of gene diversity in subdivided populations. PNAS, 70(12), 3321-3323.
        ..[2] Weir, B. S., & Cockerham, C. C. (1984). Estimating F-statistics for the analysis of population structure. Evolution, 38(6), 1358-1370.
    """

    def __init__(
        self,
        config: AlleleConfig | None = None,
        verbose: bool = False,
        debug: bool = False,
    ) -> None:
        self.config = config
        self.verbose = verbose

        logman = LoggerManager(__name__, debug=debug, verbose=verbose)
        self.logger = logman.get_logger()
        self.allele_freqs = AlleleFrequencies(config=config, verbose=verbose, debug=debug)

    def _prepare(
        self, populations: Sequence["Population"], marker_names: Iterable[str]
    ) -> Tuple[List[List[Individual]], List[str]]:
        populations = list(populations)
        if len(populations) < 2:
            err = InsufficientPopulationsError(len(populations))
            self.logger.error(str(err))
            raise err

        if isinstance(marker_names, str):
            marker_names = [marker_names]

        return [as_individuals(p) for p in populations], unique_in_order(marker_names)

    def _heterozygosities(
        self, pops: List[List[Individual]], marker: str
    ) -> Tuple[float, float, int] | None:
        """Return (H_T, H_S, N) for one marker, or None if no population has data."""
        counts = [self.allele_freqs.allele_counts(inds, marker) for inds in pops]
        sizes = [sum(c.values()) for c in counts]
        total = sum(sizes)

        if total == 0:
            return None

        pooled = Counter()
        for c in counts:
            pooled.update(c)

        h_t = 1.0 - sum((k / total) ** 2 for k in pooled.values())

        h_s = 0.0
        for c, n_i in zip(counts, sizes):
            if n_i == 0:
                continue
            h_s += n_i * (1.0 - sum((k / n_i) ** 2 for k in c.values()))
        h_s /= total

        return h_t, h_s, total

    def fst(
        self, populations: Sequence["Population"], marker_names: Iterable[str]
    ) -> float:
        """Calculate Wright's Fst across populations for a set of markers.

        Args:
            populations (Sequence[Population]): Two or more populations (or sequences of Individuals).
            marker_names (Iterable[str]): Markers to use.

        Returns:
            float: Fst. NaN if no population has data at any marker; 0.0 if there is data but no variation at all.

        Raises:
            InsufficientPopulationsError: If fewer than two populations are given.
        """
        pops, markers = self._prepare(populations, marker_names)
        self.logger.debug(
            f"Calculating Fst for {len(pops)} populations and {len(markers)} markers."
        )

        num = 0.0
        den = 0.0
        has_data = False
        for marker in markers:
            comps = self._heterozygosities(pops, marker)
            if comps is None:
                self.logger.debug(f"No data at marker {marker}; skipping it.")
                continue
            h_t, h_s, n = comps
            has_data = True
            num += n * (h_t - h_s)
            den += n * h_t

        if not has_data:
            self.logger.debug("Fst is undefined: no data at any marker.")
            return float("nan")

        if den == 0.0:
            return 0.0

        return num / den

    def fst_per_marker(
        self, populations: Sequence["Population"], marker_names: Iterable[str]
    ) -> pd.Series:
        """Calculate Wright's Fst separately for each marker.

        Returns:
            pd.Series: Fst indexed by marker name. NaN where no population has data; 0.0 where the marker is monomorphic.
        """
        pops, markers = self._prepare(populations, marker_names)

        values = []
        for marker in markers:
            comps = self._heterozygosities(pops, marker)
            if comps is None:
                values.append(np.nan)
                continue
            h_t, h_s, _ = comps
            values.append((h_t - h_s) / h_t if h_t > 0 else 0.0)

        return pd.Series(values, index=pd.Index(markers, name="marker"), name="Fst")

    def _weir_cockerham_locus(
        self, pops: List[List[Individual]], marker: str
    ) -> Tuple[float, float]:
        """Weir & Cockerham variance components summed over the alleles of one marker.

        Edge-case guard:
            - Fewer than two typed populations => (0, 0)
            - n_bar <= 1 or n_c == 0 => (0, 0)

        Returns:
            Tuple[float, float]: Numerator (sum of a) and denominator (sum of a + b + c).
        """
        typed = [self.allele_freqs.typed_individuals(inds, marker) for inds in pops]
        typed = [inds for inds in typed if inds]

        r = float(len(typed))
        if r < 2:
            return 0.0, 0.0

        sizes = np.array([len(inds) for inds in typed], dtype=float)
        n_total = sizes.sum()
        n_bar = n_total / r
        if n_bar <= 1.0:
            return 0.0, 0.0

        n_c = (n_total - np.sum(sizes**2) / n_total) / (r - 1.0)
        if n_c == 0.0:
            return 0.0, 0.0

        freqs = [self.allele_freqs.frequencies(inds, marker) for inds in typed]
        alleles = unique_in_order(a for f in freqs for a in f)

        num, den = 0.0, 0.0
        for allele in alleles:
            p = np.array([f.get(allele, 0.0) for f in freqs])
            h = np.array(
                [
                    self.allele_freqs.heterozygote_frequency(inds, marker, allele)
                    for inds in typed
                ]
            )
            p_bar = np.sum(sizes * p) / n_total
            h_bar = np.sum(sizes * h) / n_total
            s_sq = np.sum(sizes * (p - p_bar) ** 2) / ((r - 1.0) * n_bar)
            pq = p_bar * (1.0 - p_bar)

            a = (n_bar / n_c) * (
                s_sq - (1.0 / (n_bar - 1.0)) * (pq - ((r - 1.0) / r) * s_sq - h_bar / 4.0)
            )
            b = (n_bar / (n_bar - 1.0)) * (
                pq
                - ((r - 1.0) / r) * s_sq
                - ((2.0 * n_bar - 1.0) / (4.0 * n_bar)) * h_bar
            )
            c = h_bar / 2.0

            num += a
            den += a + b + c

        return float(num), float(den)

    def weir_cockerham_fst(
        self, populations: Sequence["Population"], marker_names: Iterable[str]
    ) -> float:
        """Calculate Weir & Cockerham's (1984) multilocus theta.

        Sample sizes are numbers of individuals typed at each marker. Heterozygote frequencies come from the individuals' genotypes, so haploid data has no heterozygotes.

        Args:
            populations (Sequence[Population]): Two or more populations.
            marker_names (Iterable[str]): Markers to use.

        Returns:
            float: The multilocus estimate, or NaN if the summed denominator is zero.

        Raises:
            InsufficientPopulationsError: If fewer than two populations are given.
        """
        pops, markers = self._prepare(populations, marker_names)

        total_num, total_den = 0.0, 0.0
        for marker in markers:
            num, den = self._weir_cockerham_locus(pops, marker)
            total_num += num
            total_den += den

        if total_den == 0.0:
            self.logger.debug("Weir & Cockerham Fst is undefined: zero denominator.")
            return float("nan")

        return total_num / total_den
