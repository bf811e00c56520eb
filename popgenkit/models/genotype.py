from typing import Iterable, List

from popgenkit.utils.containers import AlleleConfig, resolve_config


class Genotype:
    """The allele values observed for one marker in one individual.

    A genotype is a triple of a marker name, an optional individual id, and an ordered list of alleles. The number of alleles is not fixed: a haploid genotype carries one allele and a diploid genotype two, and both may occur in the same data set.

    Alleles are stored as strings exactly as given. Whether an allele counts as missing data is decided when the alleles are read, using the active :class:`AlleleConfig`, so changing the blank pattern affects genotypes that already exist.

    Example:
        >>> g = Genotype("D7S123", ["104", "107"], individual_id="1001")
        >>> g.get_alleles()
        ['104', '107']

    Attributes:
        marker_name (str): Name of the marker.
        individual_id (str | None): Id of the individual the genotype was typed in.
    """

    def __init__(
        self,
        marker_name: str,
        alleles: Iterable = (),
        individual_id: str | None = None,
    ) -> None:
        self.marker_name: str = str(marker_name)
        self.individual_id: str | None = (
            None if individual_id is None else str(individual_id)
        )
        self._alleles: List[str] = [str(a) for a in alleles]

    def get_alleles(
        self, show_blank: bool = False, config: AlleleConfig | None = None
    ) -> List[str]:
        """Return the alleles of this genotype in their stored order.

        Args:
            show_blank (bool): If True, blank alleles are returned as well. Defaults to False.
            config (AlleleConfig | None): Allele configuration. If None, the process default is read now.

        Returns:
            List[str]: The (non-blank) alleles.
        """
        if show_blank:
            return list(self._alleles)

        cfg = resolve_config(config)
        return [a for a in self._alleles if not cfg.is_blank(a)]

    def add_allele(self, *alleles) -> None:
        """Append one or more alleles."""
        self._alleles.extend(str(a) for a in alleles)

    def reset_alleles(self) -> None:
        """Remove all alleles."""
        self._alleles = []

    def is_blank(self, config: AlleleConfig | None = None) -> bool:
        """True if the genotype has no non-blank allele."""
        return not self.get_alleles(config=config)

    @property
    def ploidy(self) -> int:
        """Number of stored alleles, blanks included."""
        return len(self._alleles)

    def __len__(self) -> int:
        return len(self._alleles)

    def __repr__(self) -> str:
        return (
            f"Genotype(marker_name={self.marker_name!r}, "
            f"alleles={self._alleles!r}, individual_id={self.individual_id!r})"
        )
