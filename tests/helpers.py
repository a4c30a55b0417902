"""Kleine Testdaten-Bausteine für alle Testmodule."""

from typing import Optional

from config.schema import CatalogConfig, PlacementConfig, SolverConfig
from models.enums import Enrollment, Faculty, StudyLevel
from models.placement_data import PlacementData
from models.student import ApplicantRecord
from models.university import UniversityRecord


def uni(
    agreement_id: int,
    abbr: str = "CS",
    total: Optional[int] = None,
    first: Optional[int] = None,
    second: Optional[int] = None,
    bsc: Optional[int] = None,
    msc: Optional[int] = None,
    faculty: Optional[dict[Faculty, int]] = None,
    agreement_type: str = "Exchange",
    partner: str = "",
) -> UniversityRecord:
    return UniversityRecord(
        agreement_id=agreement_id,
        study_abbr=abbr,
        total_places=total,
        spots_first=first,
        spots_second=second,
        max_bsc=bsc,
        max_msc=msc,
        faculty_max=faculty or {},
        agreement_type=agreement_type,
        partner_name=partner or f"Partner {agreement_id}",
    )


def applicant(
    app_id: int,
    prefs: list,
    abbr: str = "CS",
    field: str = "Computer Science",
    level: StudyLevel = StudyLevel.BSC,
    enrollment: Enrollment = Enrollment.FIRST_SEMESTER,
    first_name: str = "",
    last_name: str = "",
) -> ApplicantRecord:
    return ApplicantRecord(
        id=app_id,
        study_abbr=abbr,
        study_field=field,
        level=level,
        enrollment=enrollment,
        first_name=first_name,
        last_name=last_name,
        raw_preferences=list(prefs),
    )


def make_data(unis: list, apps: list, config: Optional[PlacementConfig] = None) -> PlacementData:
    return PlacementData.build(unis, apps, config)


def fast_config(weights: Optional[list[int]] = None) -> PlacementConfig:
    """Konfiguration für schnelle, deterministische Solver-Läufe."""
    return PlacementConfig(solver=SolverConfig(
        preference_weights=weights or [1, 2, 3, 4, 5, 6],
        time_limit_seconds=10,
        num_workers=1,
    ))


def mixed_data() -> PlacementData:
    """Kleiner gemischter Datensatz (5 Slots, 4 Bewerbungen).

    Slots:
      1_CS  total=2 (beide Semester)
      2_CS  nur 1. Sem: 1 Platz, BSc ≤ 1   ┐ Abkommen 2,
      2_EE  nur 1. Sem: 3 Plätze          ┘ Grenze aus 2_CS = 1
      3_CS  total=1, Typ "Exchange I" (als ohne Skalierung konfiguriert)
      4_CS  total=3, EEMCS ≤ 1
    """
    unis = [
        uni(1, "CS", total=2),
        uni(2, "CS", first=1, bsc=1),
        uni(2, "EE", first=3),
        uni(3, "CS", total=1, agreement_type="Exchange I"),
        uni(4, "CS", total=3, faculty={Faculty.EEMCS: 1}),
    ]
    apps = [
        applicant(1, [1, 2, 3], first_name="Anna", last_name="Berg"),
        applicant(2, [2, 4], level=StudyLevel.MSC, enrollment=Enrollment.SECOND_SEMESTER),
        applicant(3, [4, None, 1], enrollment=Enrollment.FULL_YEAR),
        applicant(4, [2, 1], abbr="EE", field="Electrical Engineering (BSc)"),
    ]
    config = PlacementConfig(catalog=CatalogConfig(non_scaling_agreement_types=["Exchange I"]))
    return make_data(unis, apps, config)
