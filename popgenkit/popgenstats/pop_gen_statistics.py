import math
from logging import Logger
from numbers import Integral
from typing import TYPE_CHECKING, Dict, List, Sequence, Tuple

from popgenkit.models.individual import Individual
from popgenkit.popgenstats.allele_frequencies import AlleleFrequencies
from popgenkit.popgenstats.numba_helpers import harmonic_sum, pairwise_mismatch
from popgenkit.utils.containers import AlleleConfig
from popgenkit.utils.custom_exceptions import InsufficientSamplesError
from popgenkit.utils.logging import LoggerManager
from popgenkit.utils.misc import as_individuals, unique_in_order

if TYPE_CHECKING:
    from popgenkit.models.population import Population


class PopGenStatistics:
    """Diversity estimators and neutrality tests for a set of individuals.

    Every statistic has two entry points. The sample form (e.g. :meth:`tajima_d`) takes a Population or a sequence of Individuals, optionally restricted to a list of marker names, derives the raw counts from the genotypes, and passes them to the counts form (e.g. :meth:`tajima_d_counts`), which is a pure function of its numeric arguments. Both forms therefore agree by construction.

    Sample sizes are numbers of individuals. Blank alleles are ignored everywhere.

    When a statistic is mathematically undefined for its inputs (zero variance, too few samples for the variance constants) the result is ``float("nan")`` so that batch computations can continue. Watterson's theta with fewer than two samples raises :class:`InsufficientSamplesError`.

    Example:
        >>> stats = PopGenStatistics()
        >>> pi = stats.pi(pop)
        >>> d = stats.tajima_d(pop)
        >>> d == stats.tajima_d_counts(
        ...     len(pop), stats.segregating_sites_count(pop), pi
        ... )
        True

    References:
        ..[1] Tajima, F. (1989). Statistical method for testing the neutral mutation hypothesis by DNA polymorphism. Genetics, 123(3), 585-595.
        ..[2] Fu, Y. X., & Li, W. H. (1993). Statistical tests of neutrality of mutations. Genetics, 133(3), 693-709.
        ..[3] Simonsen, K. L., Churchill, G. A., & Aquadro, C. F. (1995). Properties of statistical tests of neutrality for DNA polymorphism data. Genetics, 141(1), 413-429.
    """

    def __init__(
        self,
        config: AlleleConfig | None = None,
        verbose: bool = False,
        debug: bool = False,
    ) -> None:
        """Initialize the PopGenStatistics object.

        Args:
            config (AlleleConfig | None): Allele configuration. If None, the process default is read on every call.
            verbose (bool): Whether to display verbose output. Defaults to False.
            debug (bool): Whether to display debug output. Defaults to False.
        """
        self.config = config
        self.verbose: bool = verbose
        self.debug: bool = debug

        logman = LoggerManager(__name__, debug=debug, verbose=verbose)
        level: str = "DEBUG" if debug else "INFO"
        logman.set_level(level)
        self.logger: Logger = logman.get_logger()

        self.allele_freqs = AlleleFrequencies(config=config, verbose=verbose, debug=debug)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _markers(
        self, individuals: List[Individual], marker_names: Sequence[str] | str | None
    ) -> List[str]:
        if marker_names is None:
            return self.allele_freqs.marker_names(individuals)
        if isinstance(marker_names, str):
            return [marker_names]
        return unique_in_order(marker_names)

    def _check_counts(self, **counts: float) -> None:
        for name, value in counts.items():
            if value is None or not math.isfinite(value) or value < 0:
                msg = f"'{name}' must be a finite non-negative number, but got: {value}"
                self.logger.error(msg)
                raise ValueError(msg)

    def _undefined(self, name: str, reason: str) -> float:
        self.logger.debug(f"{name} is undefined: {reason}")
        return float("nan")

    def _normalized(self, name: str, numerator: float, variance: float) -> float:
        """Divide by the standard deviation, or return NaN if it does not exist."""
        if not math.isfinite(numerator) or not math.isfinite(variance):
            return self._undefined(name, "non-finite intermediate value")
        if variance <= 0.0:
            return self._undefined(name, f"variance is {variance}")
        return numerator / math.sqrt(variance)

    # ------------------------------------------------------------------ #
    # Site counts
    # ------------------------------------------------------------------ #

    def segregating_sites_count(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
    ) -> int:
        """Number of markers with at least two distinct non-blank alleles.

        Args:
            samples (Population | Sequence[Individual]): The samples.
            marker_names (Sequence[str] | None): Markers to consider. Defaults to every marker in the samples.

        Returns:
            int: The number of segregating sites.
        """
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)
        return len(self.allele_freqs.segregating_markers(individuals, markers))

    def singleton_count(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
    ) -> int:
        """Number of alleles present in exactly one copy, summed over segregating markers.

        These are the mutations on external branches when no outgroup is available to polarize them.
        """
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)

        n_s = 0
        for marker in self.allele_freqs.segregating_markers(individuals, markers):
            counts = self.allele_freqs.allele_counts(individuals, marker)
            n_s += sum(1 for c in counts.values() if c == 1)
        return n_s

    def external_mutations(
        self,
        samples: "Population | Sequence[Individual]",
        outgroup: "Population | Sequence[Individual] | Individual",
        marker_names: Sequence[str] | None = None,
    ) -> int:
        """Count mutations on external branches using an outgroup.

        At each segregating marker of the samples, an allele carried by exactly one sampled individual (in any number of copies) and not carried by the outgroup is a derived mutation private to that individual, and counts once. Markers at which the outgroup has no non-blank allele cannot be polarized and are skipped.

        Args:
            samples (Population | Sequence[Individual]): The ingroup.
            outgroup (Population | Sequence[Individual] | Individual): The outgroup.
            marker_names (Sequence[str] | None): Markers to consider. Defaults to every marker in the ingroup.

        Returns:
            int: The number of external mutations.
        """
        individuals = as_individuals(samples)
        out_inds = as_individuals(outgroup)
        markers = self._markers(individuals, marker_names)

        n_e = 0
        for marker in self.allele_freqs.segregating_markers(individuals, markers):
            out_alleles = set(self.allele_freqs.allele_counts(out_inds, marker))
            if not out_alleles:
                self.logger.debug(
                    f"Outgroup has no allele at marker {marker}; skipping it."
                )
                continue

            carriers = self.allele_freqs.carrier_counts(individuals, marker)
            n_e += sum(
                1 for a, c in carriers.items() if c == 1 and a not in out_alleles
            )
        return n_e

    def _resolve_external(self, individuals, outgroup, markers) -> int:
        if isinstance(outgroup, Integral) and not isinstance(outgroup, bool):
            return int(outgroup)
        return self.external_mutations(individuals, outgroup, markers)

    # ------------------------------------------------------------------ #
    # Nucleotide diversity
    # ------------------------------------------------------------------ #

    def pairwise_differences(
        self, samples: "Population | Sequence[Individual]", marker: str
    ) -> Tuple[int, int]:
        """Raw allele mismatches and comparisons at one marker.

        Every allele of one individual is compared with every allele of the other, for all unordered pairs of individuals, skipping blank alleles.

        Returns:
            Tuple[int, int]: (mismatches, comparisons).
        """
        codes, _ = self.allele_freqs.allele_matrix(samples, marker)
        _, _, n_diff, n_comp = pairwise_mismatch(codes)
        return int(n_diff), int(n_comp)

    def pi(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
        num_sites: int | None = None,
    ) -> float:
        """Nucleotide diversity: the mean number of pairwise differences.

        For each marker, every unordered pair of individuals that both carry non-blank alleles contributes its mismatch proportion (mismatching allele combinations over all allele combinations compared). The marker's diversity is the mean over those pairs, so the number of usable pairs may differ between markers. Pi is the sum over markers.

        Args:
            samples (Population | Sequence[Individual]): The samples.
            marker_names (Sequence[str] | None): Markers to use. Defaults to every marker in the samples.
            num_sites (int | None): If given, pi is divided by this number of sites to give a per-site value.

        Returns:
            float: Pi (>= 0). 0.0 when fewer than two individuals have data.
        """
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)

        total = 0.0
        for marker in markers:
            codes, _ = self.allele_freqs.allele_matrix(individuals, marker)
            prop_sum, n_pairs, _, _ = pairwise_mismatch(codes)
            if n_pairs > 0:
                total += prop_sum / n_pairs

        if num_sites is not None:
            if num_sites <= 0:
                msg = f"num_sites must be positive, but got: {num_sites}"
                self.logger.error(msg)
                raise ValueError(msg)
            total /= num_sites

        self.logger.debug(f"pi = {total} over {len(markers)} markers")
        return total

    # ------------------------------------------------------------------ #
    # Watterson's theta
    # ------------------------------------------------------------------ #

    def theta(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
        num_sites: int | None = None,
    ) -> float:
        """Watterson's theta from a set of individuals.

        Args:
            samples (Population | Sequence[Individual]): The samples.
            marker_names (Sequence[str] | None): Markers to use. Defaults to every marker in the samples.
            num_sites (int | None): Optional number of sites for a per-site estimate.

        Returns:
            float: Theta.

        Raises:
            InsufficientSamplesError: If there are fewer than two individuals.
        """
        individuals = as_individuals(samples)
        seg_sites = self.segregating_sites_count(individuals, marker_names)
        return self.theta_counts(len(individuals), seg_sites, num_sites)

    def theta_counts(
        self, n: int, segregating_sites: int, num_sites: int | None = None
    ) -> float:
        """Watterson's theta, :math:`S / a_1` with :math:`a_1 = \\sum_{i=1}^{n-1} 1/i`.

        Args:
            n (int): Number of samples.
            segregating_sites (int): Number of segregating sites.
            num_sites (int | None): Optional number of sites for a per-site estimate.

        Returns:
            float: Theta (>= 0).

        Raises:
            InsufficientSamplesError: If ``n < 2``.
            ValueError: If a count is negative or ``num_sites`` is not positive.
        """
        self._check_counts(n=n, segregating_sites=segregating_sites)

        if n < 2:
            err = InsufficientSamplesError(int(n), minimum=2)
            self.logger.error(str(err))
            raise err

        theta = segregating_sites / harmonic_sum(int(n), 1)

        if num_sites is not None:
            if num_sites <= 0:
                msg = f"num_sites must be positive, but got: {num_sites}"
                self.logger.error(msg)
                raise ValueError(msg)
            theta /= num_sites

        return theta

    # ------------------------------------------------------------------ #
    # Tajima's D
    # ------------------------------------------------------------------ #

    @staticmethod
    def tajima_constants(n: int) -> Dict[str, float]:
        """The sample-size constants of Tajima's (1989) variance.

        Args:
            n (int): Number of samples (>= 2).

        Returns:
            Dict[str, float]: ``a1, a2, b1, b2, c1, c2, e1, e2``.
        """
        a1 = harmonic_sum(n, 1)
        a2 = harmonic_sum(n, 2)
        b1 = (n + 1) / (3 * (n - 1))
        b2 = 2 * (n**2 + n + 3) / (9 * n * (n - 1))
        c1 = b1 - 1 / a1
        c2 = b2 - (n + 2) / (a1 * n) + a2 / a1**2
        e1 = c1 / a1
        e2 = c2 / (a1**2 + a2)
        return {
            "a1": a1,
            "a2": a2,
            "b1": b1,
            "b2": b2,
            "c1": c1,
            "c2": c2,
            "e1": e1,
            "e2": e2,
        }

    def tajima_d(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
    ) -> float:
        """Tajima's D for a set of individuals.

        Returns:
            float: D, or NaN when undefined (fewer than three samples or no segregating sites).
        """
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)
        seg_sites = self.segregating_sites_count(individuals, markers)
        pi = self.pi(individuals, markers)
        return self.tajima_d_counts(len(individuals), seg_sites, pi)

    def tajima_d_counts(self, n: int, segregating_sites: int, pi: float) -> float:
        """Tajima's D from raw counts.

        .. math::

            D = \\frac{\\pi - S/a_1}{\\sqrt{e_1 S + e_2 S (S - 1)}}

        Args:
            n (int): Number of samples.
            segregating_sites (int): Number of segregating sites (S).
            pi (float): Average number of pairwise differences.

        Returns:
            float: D, or NaN when the variance is zero.
        """
        self._check_counts(n=n, segregating_sites=segregating_sites, pi=pi)

        n = int(n)
        if n < 3:
            return self._undefined("Tajima's D", f"n = {n}")

        k = self.tajima_constants(n)
        s = segregating_sites
        variance = k["e1"] * s + k["e2"] * s * (s - 1)
        return self._normalized("Tajima's D", pi - s / k["a1"], variance)

    # ------------------------------------------------------------------ #
    # Fu & Li's D and D*
    # ------------------------------------------------------------------ #

    @staticmethod
    def _fu_li_c(n: int, a: float) -> float:
        return 2 * (n * a - 2 * (n - 1)) / ((n - 1) * (n - 2))

    def fu_and_li_d(
        self,
        samples: "Population | Sequence[Individual]",
        outgroup: "Population | Sequence[Individual] | Individual | int",
        marker_names: Sequence[str] | None = None,
    ) -> float:
        """Fu & Li's D using an outgroup.

        Args:
            samples (Population | Sequence[Individual]): The ingroup.
            outgroup (Population | Sequence[Individual] | Individual | int): The outgroup used to polarize mutations, or the number of external mutations if already known.
            marker_names (Sequence[str] | None): Markers to use.

        Returns:
            float: D, or NaN when undefined.
        """
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)
        seg_sites = self.segregating_sites_count(individuals, markers)
        n_e = self._resolve_external(individuals, outgroup, markers)
        return self.fu_and_li_d_counts(len(individuals), seg_sites, n_e)

    def fu_and_li_d_counts(
        self, n: int, segregating_sites: int, external_mutations: int
    ) -> float:
        """Fu & Li's D from raw counts.

        .. math::

            D = \\frac{S - a_n \\eta_e}{\\sqrt{u_D S + v_D S^2}}

        Args:
            n (int): Number of samples.
            segregating_sites (int): Number of segregating sites (S).
            external_mutations (int): Mutations on external branches.

        Returns:
            float: D, or NaN when undefined.
        """
        self._check_counts(
            n=n, segregating_sites=segregating_sites, external_mutations=external_mutations
        )

        n = int(n)
        if n < 3:
            return self._undefined("Fu and Li's D", f"n = {n}")

        a = harmonic_sum(n, 1)
        b = harmonic_sum(n, 2)
        c = self._fu_li_c(n, a)
        v = 1 + (a**2 / (b + a**2)) * (c - (n + 1) / (n - 1))
        u = a - 1 - v

        s = segregating_sites
        return self._normalized(
            "Fu and Li's D", s - a * external_mutations, u * s + v * s**2
        )

    def fu_and_li_d_star(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
    ) -> float:
        """Fu & Li's D* (no outgroup), using singletons as external mutations."""
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)
        seg_sites = self.segregating_sites_count(individuals, markers)
        singletons = self.singleton_count(individuals, markers)
        return self.fu_and_li_d_star_counts(len(individuals), seg_sites, singletons)

    def fu_and_li_d_star_counts(
        self, n: int, segregating_sites: int, singletons: int
    ) -> float:
        """Fu & Li's D* from raw counts.

        .. math::

            D^* = \\frac{\\frac{n}{n-1} S - a_n \\eta_s}{\\sqrt{u_{D^*} S + v_{D^*} S^2}}

        Args:
            n (int): Number of samples.
            segregating_sites (int): Number of segregating sites (S).
            singletons (int): Number of singleton mutations.

        Returns:
            float: D*, or NaN when undefined.
        """
        self._check_counts(n=n, segregating_sites=segregating_sites, singletons=singletons)

        n = int(n)
        if n < 3:
            return self._undefined("Fu and Li's D*", f"n = {n}")

        a = harmonic_sum(n, 1)
        a_next = harmonic_sum(n + 1, 1)
        b = harmonic_sum(n, 2)
        c = self._fu_li_c(n, a)
        d = (
            c
            + (n - 2) / (n - 1) ** 2
            + 2 / (n - 1) * (1.5 - (2 * a_next - 3) / (n - 2) - 1 / n)
        )
        r = n / (n - 1)
        v = (r**2 * b + a**2 * d - 2 * n * a * (a + 1) / (n - 1) ** 2) / (a**2 + b)
        u = r * (a - r) - v

        s = segregating_sites
        return self._normalized(
            "Fu and Li's D*", r * s - a * singletons, u * s + v * s**2
        )

    # ------------------------------------------------------------------ #
    # Fu & Li's F and F*
    # ------------------------------------------------------------------ #

    def fu_and_li_f(
        self,
        samples: "Population | Sequence[Individual]",
        outgroup: "Population | Sequence[Individual] | Individual | int",
        marker_names: Sequence[str] | None = None,
    ) -> float:
        """Fu & Li's F using an outgroup.

        Args:
            samples (Population | Sequence[Individual]): The ingroup.
            outgroup (Population | Sequence[Individual] | Individual | int): The outgroup, or the number of external mutations.
            marker_names (Sequence[str] | None): Markers to use.

        Returns:
            float: F, or NaN when undefined.
        """
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)
        seg_sites = self.segregating_sites_count(individuals, markers)
        pi = self.pi(individuals, markers)
        n_e = self._resolve_external(individuals, outgroup, markers)
        return self.fu_and_li_f_counts(len(individuals), pi, seg_sites, n_e)

    def fu_and_li_f_counts(
        self, n: int, pi: float, segregating_sites: int, external_mutations: int
    ) -> float:
        """Fu & Li's F from raw counts.

        .. math::

            F = \\frac{\\pi - \\eta_e}{\\sqrt{u_F S + v_F S^2}}

        Args:
            n (int): Number of samples.
            pi (float): Average number of pairwise differences.
            segregating_sites (int): Number of segregating sites (S).
            external_mutations (int): Mutations on external branches.

        Returns:
            float: F, or NaN when undefined.
        """
        self._check_counts(
            n=n,
            pi=pi,
            segregating_sites=segregating_sites,
            external_mutations=external_mutations,
        )

        n = int(n)
        if n < 3:
            return self._undefined("Fu and Li's F", f"n = {n}")

        a = harmonic_sum(n, 1)
        a_next = harmonic_sum(n + 1, 1)
        b = harmonic_sum(n, 2)
        c = self._fu_li_c(n, a)
        v = (c + 2 * (n**2 + n + 3) / (9 * n * (n - 1)) - 2 / (n - 1)) / (a**2 + b)
        u = (
            1
            + (n + 1) / (3 * (n - 1))
            - 4 * (n + 1) / (n - 1) ** 2 * (a_next - 2 * n / (n + 1))
        ) / a - v

        s = segregating_sites
        return self._normalized(
            "Fu and Li's F", pi - external_mutations, u * s + v * s**2
        )

    def fu_and_li_f_star(
        self,
        samples: "Population | Sequence[Individual]",
        marker_names: Sequence[str] | None = None,
    ) -> float:
        """Fu & Li's F* (no outgroup), using singletons as external mutations."""
        individuals = as_individuals(samples)
        markers = self._markers(individuals, marker_names)
        seg_sites = self.segregating_sites_count(individuals, markers)
        pi = self.pi(individuals, markers)
        singletons = self.singleton_count(individuals, markers)
        return self.fu_and_li_f_star_counts(len(individuals), pi, seg_sites, singletons)

    def fu_and_li_f_star_counts(
        self, n: int, pi: float, segregating_sites: int, singletons: int
    ) -> float:
        """Fu & Li's F* from raw counts, with the variance of Simonsen et al. (1995).

        .. math::

            F^* = \\frac{\\pi - \\frac{n-1}{n} \\eta_s}{\\sqrt{u_{F^*} S + v_{F^*} S^2}}

        Args:
            n (int): Number of samples.
            pi (float): Average number of pairwise differences.
            segregating_sites (int): Number of segregating sites (S).
            singletons (int): Number of singleton mutations.

        Returns:
            float: F*, or NaN when undefined.
        """
        self._check_counts(
            n=n, pi=pi, segregating_sites=segregating_sites, singletons=singletons
        )

        n = int(n)
        if n < 3:
            return self._undefined("Fu and Li's F*", f"n = {n}")

        a = harmonic_sum(n, 1)
        a_next = harmonic_sum(n + 1, 1)
        b = harmonic_sum(n, 2)
        v = (
            (2 * n**3 + 110 * n**2 - 255 * n + 153) / (9 * n**2 * (n - 1))
            + 2 * (n - 1) * a / n**2
            - 8 * b / n
        ) / (a**2 + b)
        u = (
            (4 * n**2 + 19 * n + 3 - 12 * (n + 1) * a_next) / (3 * n * (n - 1))
        ) / a - v

        s = segregating_sites
        return self._normalized(
            "Fu and Li's F*", pi - (n - 1) / n * singletons, u * s + v * s**2
        )
