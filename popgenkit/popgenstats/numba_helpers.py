from typing import Tuple

import numpy as np
from numba import njit


@njit(inline="always")
def harmonic_sum(n: int, power: int = 1) -> float:
    """Compute the partial harmonic sum used by the neutrality tests.

    .. math::

        a = \\sum_{k=1}^{n-1} \\frac{1}{k^{p}}

    With ``power=1`` this is Watterson's :math:`a_1`; with ``power=2`` it is :math:`a_2`.

    Args:
        n (int): Number of samples. The sum runs over ``1 .. n-1``.
        power (int): Exponent applied to ``k``.

    Returns:
        float: The partial sum; 0.0 when ``n < 2``.
    """
    total = 0.0
    for k in range(1, n):
        total += 1.0 / float(k) ** power
    return total


@njit
def pairwise_mismatch(codes: np.ndarray) -> Tuple[float, int, int, int]:
    """Pairwise allele mismatches between individuals at a single marker.

    For each unordered pair of individuals every allele of the first is compared with every allele of the second. Negative codes (blank or padding) are skipped. A pair with no comparison is not usable.

    Args:
        codes (np.ndarray): ``(n_individuals, max_ploidy)`` integer allele codes, ``-1`` for missing.

    Returns:
        Tuple[float, int, int, int]: Sum over usable pairs of the pair's mismatch proportion, number of usable pairs, total mismatches, total comparisons.
    """
    n = codes.shape[0]
    width = codes.shape[1]

    prop_sum = 0.0
    n_pairs = 0
    n_diff = 0
    n_comp = 0

    for i in range(n):
        for j in range(i + 1, n):
            comps = 0
            diffs = 0
            for a in range(width):
                x = codes[i, a]
                if x < 0:
                    continue
                for b in range(width):
                    y = codes[j, b]
                    if y < 0:
                        continue
                    comps += 1
                    if x != y:
                        diffs += 1

            if comps > 0:
                prop_sum += diffs / comps
                n_pairs += 1
                n_diff += diffs
                n_comp += comps

    return prop_sum, n_pairs, n_diff, n_comp
