from models.enums import Enrollment, Faculty, Semester, SlotKind, StudyLevel
from models.keys import AgreementKey, ArcKey, ConstraintKey, SlotKey
from models.university import UniversityRecord
from models.student import ApplicantRecord, Student
from models.catalog import PlacementCatalog, Slot
from models.placement_data import PlacementData, FeasibilityReport

__all__ = [
    "Enrollment",
    "Faculty",
    "Semester",
    "SlotKind",
    "StudyLevel",
    "AgreementKey",
    "ArcKey",
    "ConstraintKey",
    "SlotKey",
    "UniversityRecord",
    "ApplicantRecord",
    "Student",
    "PlacementCatalog",
    "Slot",
    "PlacementData",
    "FeasibilityReport",
]
