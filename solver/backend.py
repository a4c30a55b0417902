"""CP-SAT Backend (Google OR-Tools) für das Zuweisungsmodell.

Bildet jeden Bogen auf eine Bool-Variable ab, jede Schranke auf eine lineare
(Un-)Gleichung und minimiert Σ Kosten × Bogen.
"""

import os
import time
import logging
from dataclasses import dataclass, field
from typing import Optional

from ortools.sat.python import cp_model

from config.schema import SolverConfig
from models.keys import ArcKey
from solver.model_builder import AssignmentModel

logger = logging.getLogger(__name__)


@dataclass
class SolverResult:
    """Rohergebnis des Backends: Variablenwerte + Status."""

    feasible: bool
    status: str
    values: dict[ArcKey, float] = field(default_factory=dict)
    objective_value: Optional[float] = None
    solve_time_seconds: float = 0.0


# ─── Progress-Callback ────────────────────────────────────────────────────────

class SolveProgressCallback(cp_model.CpSolverSolutionCallback):
    """Loggt jede gefundene Zwischenlösung."""

    def __init__(self) -> None:
        super().__init__()
        self._solution_count = 0
        self._start_time = time.time()

    def on_solution_callback(self) -> None:
        self._solution_count += 1
        elapsed = time.time() - self._start_time
        obj = self.objective_value
        logger.info(
            f"  Lösung #{self._solution_count} | "
            f"Zeit: {elapsed:.1f}s | "
            f"Obj: {obj:.0f}"
        )

    @property
    def solution_count(self) -> int:
        return self._solution_count


# ─── Backend ──────────────────────────────────────────────────────────────────

class CpSatBackend:
    """Löst ein AssignmentModel mit CP-SAT.

    Verwendung:
        result = CpSatBackend(config.solver).solve(model)
    """

    def __init__(self, config: Optional[SolverConfig] = None) -> None:
        self.config = config or SolverConfig()

    def solve(self, model: AssignmentModel) -> SolverResult:
        t0 = time.time()
        cp = cp_model.CpModel()

        arcs: dict[ArcKey, cp_model.IntVar] = {
            arc: cp.new_bool_var(arc.name) for arc in model.variables
        }

        terms: dict = {key: [] for key in model.constraints}
        for arc, var in model.variables.items():
            for key, coeff in var.coefficients.items():
                terms[key].append(coeff * arcs[arc])

        for key, bound in model.constraints.items():
            if not terms[key]:
                # Constraint ohne Bögen: nur lösbar wenn 0 die Schranke erfüllt
                if not bound.satisfied(0):
                    logger.error(f"Constraint {key} {bound} hat keine Variablen")
                    return SolverResult(
                        feasible=False, status="INFEASIBLE",
                        solve_time_seconds=time.time() - t0,
                    )
                continue
            if bound.equal:
                cp.add(sum(terms[key]) == bound.value)
            else:
                cp.add(sum(terms[key]) <= bound.value)

        cp.minimize(sum(var.cost * arcs[arc] for arc, var in model.variables.items()))

        num_workers = self.config.num_workers or os.cpu_count() or 4
        cp_solver = cp_model.CpSolver()
        cp_solver.parameters.max_time_in_seconds = self.config.time_limit_seconds
        cp_solver.parameters.num_workers = num_workers
        cp_solver.parameters.log_search_progress = False

        callback = SolveProgressCallback()
        status = cp_solver.solve(cp, callback)

        elapsed = time.time() - t0
        status_name = cp_solver.status_name(status)
        logger.info(
            f"Solver beendet: {status_name} | "
            f"Zeit: {elapsed:.1f}s | "
            f"Lösungen: {callback.solution_count}"
        )

        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            return SolverResult(
                feasible=False, status=status_name, solve_time_seconds=elapsed)

        return SolverResult(
            feasible=True,
            status=status_name,
            values={arc: float(cp_solver.value(var)) for arc, var in arcs.items()},
            objective_value=float(cp_solver.objective_value),
            solve_time_seconds=elapsed,
        )
