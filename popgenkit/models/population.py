from typing import Iterable, List

from popgenkit.models.genotype import Genotype
from popgenkit.models.individual import Individual
from popgenkit.models.marker import Marker
from popgenkit.popgenstats.allele_frequencies import AlleleFrequencies
from popgenkit.utils.containers import AlleleConfig


class Population:
    """An ordered collection of individuals.

    No uniqueness constraint is enforced on individual ids: adding two individuals with the same id keeps both, and statistics treat them as separate samples.

    Markers are not stored on the population. :meth:`get_marker` and :meth:`get_markers` compute allele frequencies from the current individuals every time they are called.

    Example:
        >>> pop = Population(name="pop name", description="description", individuals=[ind])
        >>> pop.add_individual(ind2)
        >>> pop.get_number_individuals()
        2

    Attributes:
        name (str): Population name.
        description (str): Free-text description.
    """

    def __init__(
        self,
        name: str = "",
        description: str = "",
        individuals: Iterable[Individual] | None = None,
    ) -> None:
        self.name: str = name
        self.description: str = description
        self._individuals: List[Individual] = []

        if individuals is not None:
            self.add_individual(*individuals)

    def add_individual(self, *individuals: Individual) -> None:
        """Append individuals to the population.

        Raises:
            TypeError: If an argument is not an Individual.
        """
        for ind in individuals:
            if not isinstance(ind, Individual):
                raise TypeError(f"Expected an Individual, but got: {type(ind)}")
            self._individuals.append(ind)

    def remove_individuals(self, ids: Iterable[str]) -> List[Individual]:
        """Remove every individual whose id is in ``ids``.

        Returns:
            List[Individual]: The removed individuals.
        """
        ids = {str(i) for i in ids}
        removed = [ind for ind in self._individuals if ind.unique_id in ids]
        self._individuals = [
            ind for ind in self._individuals if ind.unique_id not in ids
        ]
        return removed

    def get_individuals(self) -> List[Individual]:
        return list(self._individuals)

    def get_individual(self, unique_id: str) -> List[Individual]:
        """Return all individuals with ``unique_id`` (ids may repeat)."""
        return [ind for ind in self._individuals if ind.unique_id == str(unique_id)]

    def get_number_individuals(
        self, marker: str | None = None, config: AlleleConfig | None = None
    ) -> int:
        """Number of individuals, optionally only those typed at ``marker``.

        Args:
            marker (str | None): If given, count only individuals with at least one non-blank allele at this marker.
            config (AlleleConfig | None): Allele configuration for blank detection.

        Returns:
            int: The number of individuals.
        """
        if marker is None:
            return len(self._individuals)

        return sum(
            1
            for ind in self._individuals
            if any(not g.is_blank(config=config) for g in ind.get_genotypes(marker))
        )

    def get_marker_names(self) -> List[str]:
        """Marker names across all individuals, in first-seen order."""
        names = {}
        for ind in self._individuals:
            for name in ind.get_marker_names():
                names.setdefault(name, None)
        return list(names)

    def get_genotypes(self, marker: str) -> List[Genotype]:
        return [g for ind in self._individuals for g in ind.get_genotypes(marker)]

    def get_marker(self, name: str, config: AlleleConfig | None = None) -> Marker:
        """Compute a Marker with allele frequencies from the current individuals."""
        return AlleleFrequencies(config=config).get_marker(self, name)

    def get_markers(self, config: AlleleConfig | None = None) -> List[Marker]:
        engine = AlleleFrequencies(config=config)
        return [engine.get_marker(self, name) for name in self.get_marker_names()]

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self):
        return iter(self._individuals)

    def __repr__(self) -> str:
        return (
            f"Population(name={self.name!r}, "
            f"num_individuals={len(self._individuals)})"
        )
