# Description: Main entry point for the popgenkit package. Imports the public classes and functions and defines the package version number.

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("popgenkit")
except PackageNotFoundError:
    __version__ = "unknown"  # Default if package is not installed

# Defines the public API for the package
__all__ = [
    "AlleleConfig",
    "AlleleFrequencies",
    "CoalescentNode",
    "CoalescentSimulator",
    "CoalescentTree",
    "FstStatistics",
    "Genotype",
    "Individual",
    "InsufficientPopulationsError",
    "InsufficientSamplesError",
    "InvalidSampleSizeError",
    "LoggerManager",
    "Marker",
    "PopGenKitError",
    "PopGenStatistics",
    "Population",
    "SummaryStatistics",
    "get_default_config",
    "reset_default_config",
    "set_blank_alleles",
    "set_default_config",
    "__version__",
]

from popgenkit.models.genotype import Genotype
from popgenkit.models.individual import Individual
from popgenkit.models.marker import Marker
from popgenkit.models.population import Population
from popgenkit.popgenstats.allele_frequencies import AlleleFrequencies
from popgenkit.popgenstats.fst import FstStatistics
from popgenkit.popgenstats.pop_gen_statistics import PopGenStatistics
from popgenkit.popgenstats.summary_statistics import SummaryStatistics
from popgenkit.simulators.coalescent import (
    CoalescentNode,
    CoalescentSimulator,
    CoalescentTree,
)
from popgenkit.utils.containers import (
    AlleleConfig,
    get_default_config,
    reset_default_config,
    set_blank_alleles,
    set_default_config,
)
from popgenkit.utils.custom_exceptions import (
    InsufficientPopulationsError,
    InsufficientSamplesError,
    InvalidSampleSizeError,
    PopGenKitError,
)
from popgenkit.utils.logging import LoggerManager
