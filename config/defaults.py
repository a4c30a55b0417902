from config.schema import CatalogConfig, PlacementConfig, SolverConfig


DEFAULT_PREFERENCE_WEIGHTS: tuple[int, ...] = (1, 2, 3, 4, 5, 6)

# Anzahl der Präferenzränge pro Bewerbung
NUM_PREFERENCES = 6


# ─── FAKULTÄTEN ───────────────────────────────────────────────────────────────
# Geschlossene Zuordnung Studienfach → Fakultät. Niveau-Zusätze wie "(BSc)"
# werden vor dem Nachschlagen entfernt.

FACULTY_MAPPING: dict[str, list[str]] = {
    "BMS": [
        "Psychology", "Communication Science",
        "Industrial Engineering and Management",
        "International Business Administration",
        "Management, Society & Technology",
        "Educational Science and Technology",
    ],
    "EEMCS": [
        "Applied Mathematics", "Business & IT", "Computer Science",
        "Creative Technology", "Electrical Engineering",
        "Business Information Technology", "Embedded Systems",
        "Interaction Technology", "Robotics", "Systems and Control",
    ],
    "ET": [
        "Civil Engineering", "Industrial Design Engineering",
        "Mechanical Engineering", "Civil Engineering and Management",
        "Construction Management & Engineering",
        "Sustainable Energy Technology",
        "Mechanical Engineering - Amsterdam (VU-UT)",
    ],
    "ITC": [
        "Spatial Engineering",
        "Geo-information Science and Earth Observation",
    ],
    "ST": [
        "Advanced Technology", "Biomedical Engineering",
        "Chemical Science & Engineering", "Health Sciences",
        "Technical Medicine", "Applied Physics", "Nanotechnology",
        "Water Technology", "Materials Science & Engineering",
        "Fluid Dynamics",
    ],
    "UCT": ["Technology and Liberal Arts & Sciences (ATLAS)"],
}


# ─── SPALTEN DER QUELLDATEIEN ─────────────────────────────────────────────────

UNIVERSITY_COLUMNS: dict[str, str] = {
    "agreement_id":       "ID",
    "country":            "Host country",
    "partner_name":       "Partner institution",
    "academic_year":      "Academic year",
    "isced":              "ISCED 2013 code",
    "study_abbr":         "Abbr. of study field",
    "study_field":        "Study field",
    "agreement_type":     "Agreement type",
    "total_places":       "Total #",
    "max_bsc":            "Max # BSc",
    "max_msc":            "Max # MSc",
    "spots_first":        "Nr of agreed spots in 1st sem.",
    "spots_second":       "Nr of agreed spots in 2nd sem.",
    "partner_department": "Partner department or consortium",
}

# Fakultäts-Obergrenzen: eine Spalte pro Fakultät
FACULTY_COLUMN_TEMPLATE = "The maximum number of spots/seats for {faculty}"

UNIVERSITY_REQUIRED = ["ID", "Abbr. of study field"]
UNIVERSITY_CAPACITY_ANY = [
    "Total #",
    "Nr of agreed spots in 1st sem.",
    "Nr of agreed spots in 2nd sem.",
]

APPLICANT_COLUMNS: dict[str, str] = {
    "id":             "ID of application",
    "student_number": "Student number",
    "first_name":     "First name",
    "last_name":      "Last name",
    "study_abbr":     "Abbreviation of study field",
    "study_field":    "Study field",
    "study_level":    "Study level",
    "academic_year":  "Academic year",
    "semester":       "Semester",
}

PREFERENCE_COLUMNS = [
    "Agreement-ID 1st choice",
    "Agreement-ID 2nd choice",
    "Agreement-ID 3rd choice",
    "Agreement-ID 4th choice",
    "Agreement-ID 5th choice",
    "Agreement-ID 6th choice",
]

APPLICANT_REQUIRED = [
    "ID of application",
    "Abbreviation of study field",
    "Study field",
    "Study level",
    "Semester",
]


def default_placement_config() -> PlacementConfig:
    """Standard-Konfiguration: Gewichte 1..6, Überlauf-Kapazität 10000."""
    return PlacementConfig(
        catalog=CatalogConfig(),
        solver=SolverConfig(preference_weights=list(DEFAULT_PREFERENCE_WEIGHTS)),
    )
