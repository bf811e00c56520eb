from typing import Dict, List


class Marker:
    """A named polymorphic locus, optionally with known allele frequencies.

    Markers are either supplied by the caller or produced by :meth:`AlleleFrequencies.get_marker` from a set of individuals.

    Attributes:
        name (str): Marker name, unique within a population.
        sample_size (int | None): Number of non-blank alleles the frequencies were estimated from.
        description (str): Free-text description.
    """

    def __init__(
        self,
        name: str,
        allele_frequencies: Dict[str, float] | None = None,
        sample_size: int | None = None,
        description: str = "",
    ) -> None:
        self.name: str = str(name)
        self.sample_size: int | None = sample_size
        self.description: str = description
        self._frequencies: Dict[str, float] = {}

        if allele_frequencies:
            for allele, freq in allele_frequencies.items():
                self.add_allele_frequency(allele, freq)

    def get_allele_frequencies(self) -> Dict[str, float]:
        return dict(self._frequencies)

    def get_alleles(self) -> List[str]:
        return list(self._frequencies.keys())

    def add_allele_frequency(self, allele: str, frequency: float) -> None:
        """Set the frequency of one allele.

        Raises:
            ValueError: If ``frequency`` is outside [0, 1].
        """
        frequency = float(frequency)
        if not 0.0 <= frequency <= 1.0:
            raise ValueError(
                f"Allele frequency must be between 0 and 1, but got: {frequency}"
            )
        self._frequencies[str(allele)] = frequency

    def reset_alleles(self) -> None:
        self._frequencies = {}

    def __repr__(self) -> str:
        return (
            f"Marker(name={self.name!r}, allele_frequencies={self._frequencies!r}, "
            f"sample_size={self.sample_size!r})"
        )
