"""Deterministic Minesweeper solver certifying boards solvable without guessing."""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import (
    Any,
    DefaultDict,
    Deque,
    Dict,
    FrozenSet,
    Hashable,
    Iterable,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Set,
    Tuple,
)

import numpy as np

from .config import DEFAULT_MAX_COMPONENT_SIZE
from .engine import CLEAR, Board
from .utils import Coordinate, get_neighborhoods

logger = logging.getLogger(__name__)

# Assignment masks are enumerated in blocks of 2**16 to bound memory use.
_MASK_CHUNK: int = 1 << 16


@dataclass(frozen=True)
class Constraint:
    """
    One revealed numbered cell seen as a constraint on its unknown neighbors.

    Attributes:
        unknowns: Neighbors that are neither revealed nor flagged.
        remaining: Cell value minus the number of flagged neighbors.
    """

    unknowns: Tuple[Hashable, ...]
    remaining: int


class SolveResult(NamedTuple):
    """Solver verdict plus the deduced safe and mine coordinates."""

    solvable: bool
    revealed: Set[Coordinate]
    flagged: Set[Coordinate]


def evaluate_component(
    component: Sequence[Hashable], constraints: Iterable[Constraint]
) -> Tuple[Set[Hashable], Set[Hashable], bool]:
    """
    Enumerate every mine/safe assignment of one frontier component.

    Each assignment is an integer mask over the component (bit i set means
    component[i] is a mine). Masks are expanded chunk by chunk into a 0/1 bit
    matrix and checked against all constraints at once with a single matrix
    product against the component-by-constraint incidence matrix.

    Args:
        component: Coordinates of the component (at most 62 entries).
        constraints: Constraints to satisfy; unknowns outside the component
            are ignored and constraints not touching it are skipped. Each
            `remaining` must already account for mines outside the component.

    Returns:
        Tuple of (forced_safe, forced_mine, consistent). When no assignment
        satisfies the constraints, consistent is False and both sets are empty.
    """
    n = len(component)
    if n == 0:
        return set(), set(), True
    if n > 62:
        raise ValueError("Components larger than 62 cells cannot be enumerated.")

    index_of: Dict[Hashable, int] = {cell: i for i, cell in enumerate(component)}

    columns: List[np.ndarray] = []
    required: List[int] = []
    for constraint in constraints:
        members = [index_of[u] for u in constraint.unknowns if u in index_of]
        if not members:
            continue
        column = np.zeros(n, dtype=np.int16)
        column[members] = 1
        columns.append(column)
        required.append(constraint.remaining)

    # Unconstrained cells can be either; nothing is forced.
    if not columns:
        return set(), set(), True

    incidence = np.stack(columns, axis=1)
    target = np.asarray(required, dtype=np.int16)
    shifts = np.arange(n, dtype=np.uint64)

    mine_counts = np.zeros(n, dtype=np.int64)
    consistent_count = 0
    total = 1 << n
    for start in range(0, total, _MASK_CHUNK):
        masks = np.arange(start, min(start + _MASK_CHUNK, total), dtype=np.uint64)
        bits = ((masks[:, None] >> shifts) & np.uint64(1)).astype(np.int16)
        ok = np.all(bits @ incidence == target, axis=1)
        hits = int(ok.sum())
        if hits:
            consistent_count += hits
            mine_counts += bits[ok].sum(axis=0, dtype=np.int64)

    if consistent_count == 0:
        return set(), set(), False

    forced_mine = {component[i] for i in range(n) if mine_counts[i] == consistent_count}
    forced_safe = {component[i] for i in range(n) if mine_counts[i] == 0}
    return forced_safe, forced_mine, True


class DeterministicSolver:
    """
    Pure-deduction solver started from a board's designated start cell.

    The solver works on its own revealed/flagged working sets (packed
    row * cols + col indices) and never touches the board's gameplay state.
    Inference is tiered:
    1. Trivial deduction: remaining == 0 or remaining == |unknowns|
    2. Component enumeration: brute force over each connected frontier
       component no larger than max_component_size
    """

    def __init__(
        self,
        board: Board,
        max_component_size: int = DEFAULT_MAX_COMPONENT_SIZE,
    ) -> None:
        """
        Initialize a solver bound to a specific board.

        Args:
            board: The board to certify. Its start_cell must be set.
            max_component_size: Largest frontier component evaluated by
                enumeration; larger components are skipped to bound runtime.
        """
        self.board = board
        self.max_component_size: int = max_component_size
        self.rows: int = board.rows
        self.cols: int = board.cols

        self._neighborhoods: Tuple[Tuple[int, ...], ...] = get_neighborhoods(
            board.rows, board.cols
        )
        # Read-only copy of the layout
        self._values: Tuple[int, ...] = tuple(cell.value for cell in board.cells)
        self._bombs: FrozenSet[int] = board.bomb_indices

        self.revealed: Set[int] = set()
        self.flagged: Set[int] = set()

        # Metrics / counters (for analysis)
        self.rounds_count: int = 0
        self.inferred_trivial_count: int = 0
        self.inferred_enumeration_count: int = 0
        self.evaluated_components_count: int = 0
        self.skipped_components_count: int = 0
        self.max_component_len: int = 0
        self.max_frontier_len: int = 0
        self.contradiction: bool = False

    # -------------------------------------------------------------------------
    # Working set updates
    # -------------------------------------------------------------------------

    def _flood(self, seeds: Iterable[int]) -> int:
        """
        Reveal seed cells and flood through zero-valued cells.

        Returns:
            Number of newly revealed cells.
        """
        queue: Deque[int] = deque(seeds)
        added = 0
        while queue:
            idx = queue.popleft()
            if idx in self.revealed or idx in self.flagged or idx in self._bombs:
                continue

            self.revealed.add(idx)
            added += 1

            if self._values[idx] == CLEAR:
                for n in self._neighborhoods[idx]:
                    if n not in self.revealed:
                        queue.append(n)
        return added

    def _flag(self, cells: Iterable[int]) -> int:
        added = 0
        for idx in cells:
            if idx in self.flagged or idx in self.revealed:
                continue
            self.flagged.add(idx)
            added += 1
        return added

    # -------------------------------------------------------------------------
    # Inference
    # -------------------------------------------------------------------------

    def build_constraints(self) -> List[Constraint]:
        """Build one constraint per revealed numbered cell with unknown neighbors."""
        constraints: List[Constraint] = []
        for idx in sorted(self.revealed):
            value = self._values[idx]
            if value == CLEAR:
                continue

            unknowns: List[int] = []
            flagged_count = 0
            for n in self._neighborhoods[idx]:
                if n in self.flagged:
                    flagged_count += 1
                elif n not in self.revealed:
                    unknowns.append(n)

            if not unknowns:
                continue
            constraints.append(Constraint(tuple(unknowns), value - flagged_count))
        return constraints

    def trivial_infer(self, constraints: Sequence[Constraint]) -> bool:
        """
        Apply the two single-constraint rules.

        Returns:
            True if any cell was revealed or flagged.
        """
        safes: Set[int] = set()
        mines: Set[int] = set()
        for constraint in constraints:
            if constraint.remaining == 0:
                safes.update(constraint.unknowns)
            elif constraint.remaining == len(constraint.unknowns):
                mines.update(constraint.unknowns)

        added = self._flag(mines - safes)
        added += self._flood(sorted(safes - mines))
        self.inferred_trivial_count += added
        return added > 0

    def get_components(self, constraints: Sequence[Constraint]) -> List[List[int]]:
        """
        Split the frontier into connected components of the constraint graph.

        Two frontier cells are adjacent when they appear together in one
        constraint; this has nothing to do with board adjacency.
        """
        constraints_of: DefaultDict[int, List[int]] = defaultdict(list)
        for ci, constraint in enumerate(constraints):
            for u in constraint.unknowns:
                constraints_of[u].append(ci)

        self.max_frontier_len = max(self.max_frontier_len, len(constraints_of))

        components: List[List[int]] = []
        seen: Set[int] = set()
        for node in sorted(constraints_of):
            if node in seen:
                continue

            component: List[int] = []
            queue: Deque[int] = deque([node])
            seen.add(node)
            while queue:
                cur = queue.popleft()
                component.append(cur)
                for ci in constraints_of[cur]:
                    for nbr in constraints[ci].unknowns:
                        if nbr not in seen:
                            seen.add(nbr)
                            queue.append(nbr)
            components.append(component)

        return components

    def _relevant_constraints(
        self, component: Sequence[int], constraints: Sequence[Constraint]
    ) -> List[Constraint]:
        """Restrict constraints to a component, discounting flags outside it."""
        members = set(component)
        relevant: List[Constraint] = []
        for constraint in constraints:
            inside = tuple(u for u in constraint.unknowns if u in members)
            if not inside:
                continue
            flagged_outside = sum(
                1
                for u in constraint.unknowns
                if u not in members and u in self.flagged
            )
            relevant.append(Constraint(inside, constraint.remaining - flagged_outside))
        return relevant

    def enumeration_infer(self, constraints: Sequence[Constraint]) -> Optional[bool]:
        """
        Brute-force every tractable frontier component.

        Returns:
            True if forced cells were applied, False if stuck, None if some
            component admits no consistent assignment.
        """
        forced_safe: Set[int] = set()
        forced_mine: Set[int] = set()

        for component in self.get_components(constraints):
            self.max_component_len = max(self.max_component_len, len(component))
            if len(component) > self.max_component_size:
                self.skipped_components_count += 1
                continue

            self.evaluated_components_count += 1
            safes, mines, consistent = evaluate_component(
                component, self._relevant_constraints(component, constraints)
            )
            if not consistent:
                logger.debug(
                    "Contradictory component of %d cells on %dx%d board",
                    len(component),
                    self.rows,
                    self.cols,
                )
                return None

            forced_safe |= safes
            forced_mine |= mines

        if not forced_safe and not forced_mine:
            return False

        added = self._flag(forced_mine)
        added += self._flood(sorted(forced_safe))
        self.inferred_enumeration_count += added
        return True

    # -------------------------------------------------------------------------
    # Driver
    # -------------------------------------------------------------------------

    def _result(self, solvable: bool) -> SolveResult:
        return SolveResult(
            solvable,
            {divmod(idx, self.cols) for idx in self.revealed},
            {divmod(idx, self.cols) for idx in self.flagged},
        )

    def solve(self) -> SolveResult:
        """
        Run deduction from the start cell until a fixpoint or a stuck state.

        Returns:
            SolveResult(solvable, revealed, flagged). solvable is True iff
            every non-bomb cell ends up revealed. Boards without a start cell
            yield (False, set(), set()).
        """
        if self.board.start_cell is None:
            return SolveResult(False, set(), set())

        start_row, start_col = self.board.start_cell
        self._flood([start_row * self.cols + start_col])

        while True:
            self.rounds_count += 1
            constraints = self.build_constraints()
            if not constraints:
                break

            # Trivial deductions are exhausted before costlier work
            if self.trivial_infer(constraints):
                continue

            status = self.enumeration_infer(constraints)
            if status is None:
                self.contradiction = True
                return self._result(False)
            if not status:
                break

        safe_total = self.rows * self.cols - len(self._bombs)
        solvable = len(self.revealed) == safe_total
        logger.debug(
            "Solver finished after %d rounds: solvable=%s, revealed %d/%d, skipped %d components",
            self.rounds_count,
            solvable,
            len(self.revealed),
            safe_total,
            self.skipped_components_count,
        )
        return self._result(solvable)

    def stats(self) -> Dict[str, Any]:
        """Return the solver counters as a flat dict."""
        return {
            "rounds_count": self.rounds_count,
            "revealed_cells_count": len(self.revealed),
            "flagged_cells_count": len(self.flagged),
            "inferred_trivial_count": self.inferred_trivial_count,
            "inferred_enumeration_count": self.inferred_enumeration_count,
            "evaluated_components_count": self.evaluated_components_count,
            "skipped_components_count": self.skipped_components_count,
            "max_component_len": self.max_component_len,
            "max_frontier_len": self.max_frontier_len,
            "contradiction": self.contradiction,
        }


def solve(
    board: Board, max_component_size: int = DEFAULT_MAX_COMPONENT_SIZE
) -> SolveResult:
    """Certify a board: shorthand for DeterministicSolver(board, max_component_size).solve()."""
    return DeterministicSolver(board, max_component_size).solve()
