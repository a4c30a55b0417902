"""PlacementSolver: Machbarkeits-Check → Modell → CP-SAT → Auswertung → Validierung."""

import logging
from typing import Optional

from analysis.result_interpreter import PlacementReport, ResultInterpreter
from analysis.solution_validator import SolutionValidator, ValidationReport
from config.schema import PlacementConfig
from models.errors import (
    ModelStructureError,
    PinFeasibilityError,
    SolverInfeasibleError,
    SolverTimeoutError,
)
from models.placement_data import PlacementData
from solver.backend import CpSatBackend
from solver.feasibility import FeasibilityVerifier
from solver.model_builder import ModelBuilder, constraint_kinds
from solver.pinning import PinSet

logger = logging.getLogger(__name__)


class PlacementSolver:
    """Führt einen kompletten Durchlauf auf einem festen Datenstand aus.

    Verwendung:
        solver = PlacementSolver(data, config)
        report = solver.solve(pins.snapshot())
    """

    def __init__(self, data: PlacementData, config: Optional[PlacementConfig] = None) -> None:
        self.data = data
        self.config = config or PlacementConfig()
        self.last_validation: Optional[ValidationReport] = None

    def solve(self, pins: Optional[PinSet] = None) -> PlacementReport:
        pins = pins or PinSet()
        sc = self.config.solver

        report = FeasibilityVerifier(self.data).check(pins.manual, pins.forbidden)
        for warning in report.warnings:
            logger.warning(warning)
        if not report.is_feasible:
            for error in report.errors:
                logger.error(error)
            raise PinFeasibilityError(report)

        model = ModelBuilder(self.data, sc.preference_weights).build(pins)
        logger.info(f"Modell: {model.stats()}")
        for kind, count in constraint_kinds(model).items():
            logger.debug(f"  {kind.value}: {count}")

        result = CpSatBackend(sc).solve(model)
        if not result.feasible:
            if result.status == "INFEASIBLE":
                raise SolverInfeasibleError(
                    f"Keine zulässige Zuweisung gefunden (Status: {result.status})")
            if result.status == "MODEL_INVALID":
                raise ModelStructureError("CP-SAT hat das Modell als ungültig abgelehnt")
            raise SolverTimeoutError(
                f"Keine Lösung innerhalb von {sc.time_limit_seconds}s "
                f"(Status: {result.status}); Zeitlimit erhöhen")

        placement = ResultInterpreter(self.data, sc.decision_threshold).interpret(
            result.values,
            solver_status=result.status,
            objective_value=result.objective_value,
            solve_time_seconds=result.solve_time_seconds,
        )

        validation = SolutionValidator().validate(placement, self.data, pins)
        self.last_validation = validation
        for v in validation.violations:
            log = logger.error if v.severity == "error" else logger.warning
            log(f"Validierung {v.constraint} ({v.entity}): {v.description}")

        logger.info(
            f"Platziert: {len(placement.assignments)}/{placement.total_students} | "
            f"Ø Präferenz: {placement.average_preference:.3f}"
        )
        return placement
