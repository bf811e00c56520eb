from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any, List

from popgenkit.models.individual import Individual

if TYPE_CHECKING:
    from popgenkit.models.population import Population


def as_individuals(samples: "Population | Sequence[Individual] | Individual") -> List[Individual]:
    """Normalize a sample argument to a list of individuals.

    Statistic entry points accept either a Population, an ordered sequence of Individuals, or (for outgroups) a single Individual.

    Args:
        samples: A Population (anything exposing ``get_individuals()``), a sequence of Individuals, or one Individual.

    Returns:
        List[Individual]: The individuals in their original order.

    Raises:
        TypeError: If ``samples`` (or one of its items) is not a supported type.
    """
    if isinstance(samples, Individual):
        return [samples]

    if hasattr(samples, "get_individuals"):
        return list(samples.get_individuals())

    if isinstance(samples, (str, bytes)) or not isinstance(samples, Iterable):
        raise TypeError(
            f"Expected a Population or a sequence of Individuals, but got: {type(samples)}"
        )

    individuals = list(samples)
    for ind in individuals:
        if not isinstance(ind, Individual):
            raise TypeError(f"Expected an Individual, but got: {type(ind)}")
    return individuals


def unique_in_order(items: Iterable[Any]) -> List[Any]:
    """Drop duplicates while keeping first-seen order."""
    return list(dict.fromkeys(items))
