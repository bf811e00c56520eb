from dataclasses import dataclass, field
from numbers import Integral
from typing import Iterator, List, Tuple

import numpy as np
import pandas as pd
import toytree as tt
from scipy.special import comb
from tqdm import tqdm

from popgenkit.models.genotype import Genotype
from popgenkit.models.individual import Individual
from popgenkit.popgenstats.pop_gen_statistics import PopGenStatistics
from popgenkit.utils.containers import AlleleConfig
from popgenkit.utils.custom_exceptions import InvalidSampleSizeError
from popgenkit.utils.logging import LoggerManager

ANCESTRAL = "0"
DERIVED = "1"


@dataclass(eq=False)
class CoalescentNode:
    """A node of a coalescent genealogy.

    Attributes:
        node_id (int): Tips are numbered ``0 .. N-1``, ancestors ``N .. 2N-2`` in merge order.
        time (float): Time of the node (0 for tips, the merge time for ancestors).
        branch_length (float): Length of the branch to the parent; 0 for the root.
        parent (CoalescentNode | None): Parent node; None for the root.
        children (List[CoalescentNode]): Child nodes; empty for tips.
        individual (Individual | None): The sampled individual at a tip.
    """

    node_id: int
    time: float = 0.0
    branch_length: float = 0.0
    parent: "CoalescentNode | None" = field(default=None, repr=False)
    children: List["CoalescentNode"] = field(default_factory=list, repr=False)
    individual: Individual | None = field(default=None, repr=False)

    def is_leaf(self) -> bool:
        return not self.children

    def iter_descendants(self) -> Iterator["CoalescentNode"]:
        """Yield this node and every node below it."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(node.children)

    def get_leaves(self) -> List["CoalescentNode"]:
        return [n for n in self.iter_descendants() if n.is_leaf()]


class CoalescentTree:
    """A rooted binary genealogy returned by :meth:`CoalescentSimulator.next_tree`.

    The tips hold :class:`Individual` objects; after :meth:`CoalescentSimulator.add_mutations` they carry one haploid genotype per mutation and can be passed straight to :class:`PopGenStatistics`.

    Attributes:
        root (CoalescentNode): Root node.
        mutations (List[Tuple[str, int]]): ``(marker_name, node_id)`` for each placed mutation.
    """

    def __init__(self, root: CoalescentNode, nodes: List[CoalescentNode]) -> None:
        self.root = root
        self._nodes = nodes
        self.mutations: List[Tuple[str, int]] = []

    def get_nodes(self) -> List[CoalescentNode]:
        return list(self._nodes)

    def get_leaf_nodes(self) -> List[CoalescentNode]:
        return [n for n in self._nodes if n.is_leaf()]

    def get_internal_nodes(self) -> List[CoalescentNode]:
        return [n for n in self._nodes if not n.is_leaf()]

    def get_tips(self) -> List[Individual]:
        """The tip individuals, ordered by tip id."""
        return [n.individual for n in self.get_leaf_nodes()]

    @property
    def height(self) -> float:
        return self.root.time

    def total_branch_length(self) -> float:
        return float(sum(n.branch_length for n in self._nodes))

    def to_newick(self) -> str:
        """Newick string with tip ids as labels and branch lengths."""

        def _write(node: CoalescentNode) -> str:
            if node.is_leaf():
                label = node.individual.unique_id
            else:
                label = "(" + ",".join(_write(c) for c in node.children) + ")"
            if node.parent is None:
                return label
            return f"{label}:{node.branch_length:.6g}"

        return _write(self.root) + ";"

    def to_toytree(self) -> tt.ToyTree:
        """Convert the genealogy to a toytree object."""
        return tt.tree(self.to_newick())

    def __repr__(self) -> str:
        return (
            f"CoalescentTree(ntips={len(self.get_leaf_nodes())}, "
            f"height={self.height:.4g}, mutations={len(self.mutations)})"
        )


class CoalescentSimulator:
    """Simple neutral coalescent simulator.

    Topology generation is separate from mutation placement, so one can either draw a new genealogy for every replicate or keep one genealogy and redraw the mutations on it many times.

    Example:
        >>> sim = CoalescentSimulator(sample_size=10, seed=42)
        >>> tree = sim.next_tree()
        >>> sim.add_mutations(tree, 12)
        >>> stats = PopGenStatistics()
        >>> stats.tajima_d(tree.get_tips())

    Attributes:
        sample_size (int): Number of sampled lineages (tips).
        seed (int | None): Seed for the random number generator.
        rng (np.random.Generator): Random number generator owned by this simulator.
    """

    def __init__(
        self,
        sample_size: int,
        seed: int | None = None,
        config: AlleleConfig | None = None,
        verbose: bool = False,
        debug: bool = False,
    ) -> None:
        """Initialize the CoalescentSimulator.

        Args:
            sample_size (int): Number of tips; must be an integer >= 2.
            seed (int | None): Seed for reproducible simulations. If None, fresh system entropy is used.
            config (AlleleConfig | None): Allele configuration for statistics computed by :meth:`simulate_statistics`.
            verbose (bool): Whether to display verbose output. Defaults to False.
            debug (bool): Whether to display debug output. Defaults to False.

        Raises:
            InvalidSampleSizeError: If ``sample_size`` is not an integer >= 2.
        """
        logman = LoggerManager(__name__, debug=debug, verbose=verbose)
        self.logger = logman.get_logger()

        if (
            not isinstance(sample_size, Integral)
            or isinstance(sample_size, bool)
            or sample_size < 2
        ):
            err = InvalidSampleSizeError(sample_size)
            self.logger.error(str(err))
            raise err

        self.sample_size: int = int(sample_size)
        self.seed = seed
        self.config = config
        self.verbose = verbose
        self.debug = debug
        self.rng: np.random.Generator = np.random.default_rng(seed)

    def next_tree(self) -> CoalescentTree:
        """Generate a random coalescent genealogy.

        Starting from ``sample_size`` lineages, the waiting time while ``k`` lineages remain is exponential with rate ``C(k, 2)``; at the end of each wait two lineages chosen uniformly at random merge into a new ancestor. The process stops when one lineage (the root) remains.

        Returns:
            CoalescentTree: A new tree with ``sample_size`` tips and ``sample_size - 1`` internal nodes.
        """
        nodes = [
            CoalescentNode(node_id=i, individual=Individual(str(i)))
            for i in range(self.sample_size)
        ]
        active = list(nodes)
        now = 0.0

        while len(active) > 1:
            k = len(active)
            now += self.rng.exponential(scale=1.0 / comb(k, 2, exact=True))

            i, j = sorted(self.rng.choice(k, size=2, replace=False), reverse=True)
            left = active.pop(i)
            right = active.pop(j)

            parent = CoalescentNode(node_id=len(nodes), time=now, children=[right, left])
            for child in (left, right):
                child.parent = parent
                child.branch_length = now - child.time

            nodes.append(parent)
            active.append(parent)

        tree = CoalescentTree(root=active[0], nodes=nodes)
        self.logger.debug(f"Generated {tree!r}")
        return tree

    def add_mutations(self, tree: CoalescentTree, mutation_count: int) -> CoalescentTree:
        """Scatter mutations on a genealogy under the infinite-sites model.

        Any genotypes from an earlier call are discarded first. Each mutation lands on a branch chosen with probability proportional to its length and creates a new marker ``Mutation{j}``. Every tip gets a haploid genotype at that marker: the derived allele ``"1"`` if the tip descends from the mutated branch, the ancestral allele ``"0"`` otherwise.

        Args:
            tree (CoalescentTree): The genealogy to mutate.
            mutation_count (int): Number of mutations; 0 leaves every tip without polymorphism.

        Returns:
            CoalescentTree: The same tree, for chaining.

        Raises:
            ValueError: If ``mutation_count`` is not a non-negative integer.
        """
        if (
            not isinstance(mutation_count, Integral)
            or isinstance(mutation_count, bool)
            or mutation_count < 0
        ):
            msg = f"mutation_count must be a non-negative integer, but got: {mutation_count!r}"
            self.logger.error(msg)
            raise ValueError(msg)

        leaves = tree.get_leaf_nodes()
        for leaf in leaves:
            leaf.individual.remove_genotypes()
        tree.mutations = []

        branches = [n for n in tree.get_nodes() if n.parent is not None]
        lengths = np.array([n.branch_length for n in branches], dtype=float)
        total = lengths.sum()

        if mutation_count == 0:
            return tree

        if total <= 0.0:
            msg = "Cannot place mutations on a tree with zero total branch length."
            self.logger.error(msg)
            raise ValueError(msg)

        hits = self.rng.choice(len(branches), size=int(mutation_count), p=lengths / total)

        for j, idx in enumerate(hits):
            marker = f"Mutation{j}"
            node = branches[idx]
            derived = {id(leaf) for leaf in node.get_leaves()}

            for leaf in leaves:
                allele = DERIVED if id(leaf) in derived else ANCESTRAL
                leaf.individual.add_genotype(Genotype(marker, [allele]))

            tree.mutations.append((marker, node.node_id))

        self.logger.debug(f"Placed {mutation_count} mutations on {len(branches)} branches.")
        return tree

    def simulate_statistics(
        self,
        n_replicates: int,
        mutation_count: int,
        reuse_topology: bool = False,
    ) -> pd.DataFrame:
        """Simulate replicates and compute summary statistics on their tips.

        Args:
            n_replicates (int): Number of replicates.
            mutation_count (int): Number of mutations placed on each replicate.
            reuse_topology (bool): If True, one genealogy is drawn and only the mutations are redrawn for every replicate. Defaults to False.

        Returns:
            pd.DataFrame: One row per replicate with columns ``pi, theta, tajima_d, fu_and_li_d_star, fu_and_li_f_star``.
        """
        self.logger.info(
            f"Simulating {n_replicates} coalescent replicates of {self.sample_size} samples with {mutation_count} mutations."
        )

        stats = PopGenStatistics(config=self.config, verbose=self.verbose, debug=self.debug)
        tree = self.next_tree() if reuse_topology else None

        records = []
        for _ in tqdm(
            range(n_replicates), desc="Coalescent replicates", disable=not self.verbose
        ):
            current = tree if reuse_topology else self.next_tree()
            self.add_mutations(current, mutation_count)
            tips = current.get_tips()
            records.append(
                {
                    "pi": stats.pi(tips),
                    "theta": stats.theta(tips),
                    "tajima_d": stats.tajima_d(tips),
                    "fu_and_li_d_star": stats.fu_and_li_d_star(tips),
                    "fu_and_li_f_star": stats.fu_and_li_f_star(tips),
                }
            )

        return pd.DataFrame(
            records,
            columns=["pi", "theta", "tajima_d", "fu_and_li_d_star", "fu_and_li_f_star"],
            index=pd.RangeIndex(n_replicates, name="replicate"),
        )
