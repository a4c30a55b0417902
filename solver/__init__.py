"""Solver-Modul: Modellaufbau, Machbarkeits-Check und CP-SAT via Google OR-Tools."""

from .pinning import PinManager, ManualAssignment, ForbiddenAssignment, PinSet
from .feasibility import FeasibilityVerifier
from .model_builder import ModelBuilder, AssignmentModel
from .backend import CpSatBackend, SolverResult
from .placement_solver import PlacementSolver
from .session import PlacementSession

__all__ = [
    "PinManager",
    "ManualAssignment",
    "ForbiddenAssignment",
    "PinSet",
    "FeasibilityVerifier",
    "ModelBuilder",
    "AssignmentModel",
    "CpSatBackend",
    "SolverResult",
    "PlacementSolver",
    "PlacementSession",
]
