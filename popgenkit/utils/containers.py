import re
from dataclasses import dataclass, field

# Dash, whitespace, the empty string, 'N' and '?' all denote a missing allele.
DEFAULT_BLANK_ALLELES = r"[\s\-N?]?"


@dataclass(frozen=True)
class AlleleConfig:
    """Immutable allele-reading configuration.

    Attributes:
        blank_pattern (str): Regular expression that an allele string must fully match to be treated as missing data. Blank alleles are dropped from every frequency and difference count, but the genotype carrying them is still present.
    """

    blank_pattern: str = DEFAULT_BLANK_ALLELES
    _regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.blank_pattern, str):
            raise ValueError(
                f"Blank allele pattern must be a string, but got: {type(self.blank_pattern)}"
            )

        try:
            regex = re.compile(self.blank_pattern)
        except re.error as e:
            raise ValueError(
                f"Invalid blank allele pattern {self.blank_pattern!r}: {e}"
            ) from e

        object.__setattr__(self, "_regex", regex)

    def is_blank(self, allele: str) -> bool:
        """Return True if ``allele`` denotes missing data."""
        return self._regex.fullmatch(str(allele)) is not None

    def to_dict(self) -> dict:
        """Convert the AlleleConfig to a dictionary."""
        return {"blank_pattern": self.blank_pattern}


_default_config = AlleleConfig()


def get_default_config() -> AlleleConfig:
    """Return the process-wide allele configuration.

    Components that were not given an explicit ``config`` call this every time they read alleles, so replacing the default affects objects that already exist.
    """
    return _default_config


def set_default_config(config: AlleleConfig) -> None:
    """Replace the process-wide allele configuration.

    Args:
        config (AlleleConfig): The new default configuration.

    Raises:
        TypeError: If ``config`` is not an AlleleConfig.
    """
    global _default_config

    if not isinstance(config, AlleleConfig):
        raise TypeError(f"Expected an AlleleConfig, but got: {type(config)}")

    _default_config = config


def set_blank_alleles(pattern: str) -> AlleleConfig:
    """Set the process-wide blank allele pattern.

    Example:
        >>> set_blank_alleles(r"[\\s\\-N?.]?")  # also treat '.' as missing

    Args:
        pattern (str): Regular expression fully matching blank alleles.

    Returns:
        AlleleConfig: The newly installed default configuration.
    """
    config = AlleleConfig(blank_pattern=pattern)
    set_default_config(config)
    return config


def reset_default_config() -> None:
    """Restore the built-in blank allele pattern."""
    set_default_config(AlleleConfig())


def resolve_config(config: AlleleConfig | None) -> AlleleConfig:
    """Return ``config`` if given, otherwise the current process default."""
    return config if config is not None else get_default_config()
