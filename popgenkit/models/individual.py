from typing import Dict, Iterable, Iterator, List

from popgenkit.models.genotype import Genotype


class Individual:
    """A sampled individual and its genotypes, keyed by marker name.

    Genotypes are kept in insertion order. Adding a genotype for a marker that is already present replaces the previous one. Adding a genotype whose ``individual_id`` differs from this individual's id is allowed and the genotype keeps its own id; a genotype without an id is stamped with this individual's id.

    Example:
        >>> ind = Individual("1001", genotypes=[Genotype("D7S123", ["104", "107"])])
        >>> ind.add_genotype(Genotype("D17S111", ["102", "123"]))
        >>> ind.get_marker_names()
        ['D7S123', 'D17S111']
    """

    def __init__(
        self, unique_id: str, genotypes: Iterable[Genotype] | None = None
    ) -> None:
        self.unique_id: str = str(unique_id)
        self._genotypes: Dict[str, Genotype] = {}

        if genotypes is not None:
            self.add_genotype(*genotypes)

    def add_genotype(self, *genotypes: Genotype) -> None:
        """Add genotypes to this individual.

        Args:
            *genotypes (Genotype): Genotypes to add.

        Raises:
            TypeError: If an argument is not a Genotype.
        """
        for genotype in genotypes:
            if not isinstance(genotype, Genotype):
                raise TypeError(f"Expected a Genotype, but got: {type(genotype)}")

            if genotype.individual_id is None:
                genotype.individual_id = self.unique_id

            self._genotypes[genotype.marker_name] = genotype

    def get_genotypes(self, marker: str | None = None) -> List[Genotype]:
        """Return all genotypes, or the genotype(s) for one marker.

        Args:
            marker (str | None): Marker name. If None, every genotype is returned.

        Returns:
            List[Genotype]: Matching genotypes; empty if the marker is absent.
        """
        if marker is None:
            return list(self._genotypes.values())

        genotype = self._genotypes.get(marker)
        return [] if genotype is None else [genotype]

    def get_marker_names(self) -> List[str]:
        return list(self._genotypes.keys())

    def has_marker(self, marker: str) -> bool:
        return marker in self._genotypes

    def remove_marker(self, marker: str) -> bool:
        """Remove the genotype for ``marker``. Returns True if one was removed."""
        return self._genotypes.pop(marker, None) is not None

    def remove_genotypes(self) -> None:
        """Remove every genotype."""
        self._genotypes.clear()

    def num_genotypes(self) -> int:
        return len(self._genotypes)

    def __iter__(self) -> Iterator[Genotype]:
        return iter(self._genotypes.values())

    def __repr__(self) -> str:
        return (
            f"Individual(unique_id={self.unique_id!r}, "
            f"markers={self.get_marker_names()!r})"
        )
