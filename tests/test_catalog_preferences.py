"""Tests für Platz-Katalog, Präferenz-Bereinigung und Fakultätszuordnung."""

import logging

import pytest

from config.schema import CatalogConfig
from models.catalog import PlacementCatalog, split_semesters
from models.enums import Faculty, Semester, SlotKind, StudyLevel
from models.keys import AgreementKey, SlotKey
from solver.preferences import (
    clean_preferences,
    normalize_agreement_id,
    resolve_faculty,
    resolve_students,
    strip_level,
)

from helpers import applicant, uni


# ─── SEMESTER-AUFTEILUNG ──────────────────────────────────────────────────────

class TestSplitSemesters:
    def test_only_first_semester(self):
        """Nur 1. Semester angegeben → alles ins 1. Semester, 2. Semester leer."""
        first, second = split_semesters(3, None, 10, 2, None)
        assert (first.total, first.bsc, first.msc) == (3, 2, 3)
        assert (second.total, second.bsc, second.msc) == (0, 0, 0)

    def test_only_second_semester(self):
        first, second = split_semesters(None, 4, None, None, 1)
        assert (first.total, first.bsc, first.msc) == (0, 0, 0)
        assert (second.total, second.bsc, second.msc) == (4, 4, 1)

    def test_neither_replicates_total(self):
        """Keine Semesterangabe → Gesamtzahl in beide Semester (nicht halbiert)."""
        first, second = split_semesters(None, None, 4, 2, 3)
        assert first == second
        assert (first.total, first.bsc, first.msc) == (4, 2, 3)

    def test_both_given(self):
        """Beide Semester angegeben → eigene Platzzahl, Niveau-Grenzen für beide."""
        first, second = split_semesters(2, 3, 5, 1, None)
        assert (first.total, first.bsc, first.msc) == (2, 1, 2)
        assert (second.total, second.bsc, second.msc) == (3, 1, 3)

    def test_zero_counts_as_missing(self):
        first, second = split_semesters(0, 2, None, None, None)
        assert first.total == 0
        assert second.total == 2

    def test_nothing_given(self):
        first, second = split_semesters(None, None, None, None, None)
        assert first.total == 0 and second.total == 0


# ─── KATALOG ──────────────────────────────────────────────────────────────────

class TestPlacementCatalog:
    def test_synthetic_slots_present(self):
        """Überlauf und 6 "nicht angegeben"-Slots mit konfigurierter Kapazität."""
        catalog = PlacementCatalog.build([uni(1, total=2)], CatalogConfig(synthetic_capacity=500))
        assert catalog.overflow.capacity(Semester.FIRST) == 500
        for rank in range(1, 7):
            slot = catalog.unlisted(rank)
            assert slot.capacity(Semester.SECOND) == 500
            assert slot.level_capacity(Semester.FIRST, StudyLevel.MSC) == 500
        assert len(catalog.real_slots) == 1

    def test_overflow_not_in_agreement_groups(self):
        catalog = PlacementCatalog.build([uni(1, total=2)])
        groups = catalog.agreements()
        assert SlotKey.overflow().agreement is None
        assert all(len(slots) == 1 for key, slots in groups.items()
                   if key.kind is SlotKind.UNLISTED)
        assert len(groups) == 1 + 6

    def test_agreement_keys_do_not_collide(self):
        """Abkommen 1 und "nicht angegeben" Rang 1 sind verschiedene Gruppen."""
        catalog = PlacementCatalog.build([uni(1, total=2)])
        real = AgreementKey(SlotKind.REAL, 1)
        unlisted = AgreementKey(SlotKind.UNLISTED, 1)
        assert real != unlisted
        assert real in catalog.agreements()
        assert unlisted in catalog.agreements()

    def test_agreement_capacity_from_first_slot(self):
        catalog = PlacementCatalog.build([
            uni(10, "CS", first=2),
            uni(10, "EE", first=5),
        ])
        agreement = AgreementKey(SlotKind.REAL, 10)
        assert len(catalog.agreements()[agreement]) == 2
        assert catalog.agreement_capacity(agreement, Semester.FIRST) == 2
        assert catalog.agreement_capacity(agreement, Semester.SECOND) == 0

    def test_duplicate_row_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            catalog = PlacementCatalog.build([uni(1, total=2), uni(1, total=9)])
        assert len(catalog.real_slots) == 1
        assert catalog[SlotKey.real(1, "CS")].capacity(Semester.FIRST) == 2
        assert "Doppelte Katalogzeile" in caplog.text

    def test_non_scaling_flag(self):
        unis = [
            uni(1, total=1, agreement_type="exchange i"),
            uni(2, total=1, agreement_type="Erasmus+"),
        ]
        catalog = PlacementCatalog.build(unis, CatalogConfig(non_scaling_agreement_types=["Exchange I"]))
        assert catalog[SlotKey.real(1, "CS")].non_scaling
        assert not catalog[SlotKey.real(2, "CS")].non_scaling

    def test_non_scaling_off_by_default(self):
        """Ohne konfigurierte Abkommenstypen skaliert jeder Slot mit den Gewichten."""
        catalog = PlacementCatalog.build([uni(1, total=1, agreement_type="Exchange I")])
        assert not catalog[SlotKey.real(1, "CS")].non_scaling

    def test_faculty_limits_only_positive(self):
        catalog = PlacementCatalog.build([
            uni(1, total=4, faculty={Faculty.EEMCS: 2, Faculty.BMS: 0}),
            uni(2, total=4),
        ])
        constrained = catalog[SlotKey.real(1, "CS")]
        assert constrained.faculty_limits == {Faculty.EEMCS: 2}
        assert constrained.is_faculty_constrained
        assert not catalog[SlotKey.real(2, "CS")].is_faculty_constrained
        assert catalog.has_faculty_constraints

    def test_lookup(self):
        catalog = PlacementCatalog.build([uni(1, total=2)])
        assert SlotKey.real(1, "CS") in catalog
        assert SlotKey.real(1, "EE") not in catalog
        assert catalog.get(SlotKey.real(1, "EE")) is None


# ─── PRÄFERENZEN ──────────────────────────────────────────────────────────────

class TestCleanPreferences:
    @pytest.fixture
    def catalog(self):
        return PlacementCatalog.build([
            uni(10, "CS", total=1),
            uni(11, "CS", total=1),
            uni(12, "CS", total=1),
            uni(13, "EE", total=1),
        ])

    def test_cleanup_example(self, catalog):
        """Leere, doppelte und unbekannte Einträge fallen weg, Reihenfolge bleibt."""
        prefs = clean_preferences([10, None, 10, 99, 11.0, "12"], "CS", catalog)
        assert prefs == (
            SlotKey.real(10, "CS"), SlotKey.real(11, "CS"), SlotKey.real(12, "CS"),
            None, None, None,
        )

    def test_own_study_field_only(self, catalog):
        """Abkommen 13 existiert nur für EE → für CS-Bewerbung nicht wählbar."""
        prefs = clean_preferences([13, 10], "CS", catalog)
        assert prefs[0] == SlotKey.real(10, "CS")
        assert prefs[1:] == (None,) * 5

    @pytest.mark.parametrize("raw", [
        [],
        [None] * 6,
        [10, 10, 10, 10, 10, 10],
        [None, None, None, None, None, 12],
        [12, 11, 10, 13, 99, "x"],
        ["", " ", 10.5, 11, None, 11],
        [10, 11, 12, 10, 11, 12],
    ])
    def test_cleanup_invariants(self, catalog, raw):
        """6 Einträge, keine Duplikate, alle im Katalog, None nur am Ende."""
        prefs = clean_preferences(raw, "CS", catalog)
        assert len(prefs) == 6
        kept = [p for p in prefs if p is not None]
        assert len(kept) == len(set(kept))
        assert all(p in catalog for p in kept)
        assert prefs[len(kept):] == (None,) * (6 - len(kept))

    def test_more_than_six_entries_truncated(self, catalog):
        prefs = clean_preferences([None] * 6 + [10], "CS", catalog)
        assert prefs == (None,) * 6


class TestNormalizeAgreementId:
    @pytest.mark.parametrize("raw,expected", [
        (101, 101),
        (101.0, 101),
        ("101", 101),
        (" 101.0 ", 101),
        (101.5, None),
        ("abc", None),
        ("", None),
        (None, None),
        (True, None),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_agreement_id(raw) == expected


# ─── FAKULTÄTEN ───────────────────────────────────────────────────────────────

class TestFacultyResolution:
    def test_strip_level(self):
        assert strip_level("Computer Science (BSc)") == "Computer Science"
        assert strip_level("Psychology(MSc)") == "Psychology"
        assert strip_level("Applied Physics") == "Applied Physics"

    @pytest.mark.parametrize("field,faculty", [
        ("Computer Science (BSc)", Faculty.EEMCS),
        ("Psychology", Faculty.BMS),
        ("Mechanical Engineering (MSc)", Faculty.ET),
        ("Spatial Engineering", Faculty.ITC),
        ("applied physics", Faculty.ST),
        ("Technology and Liberal Arts & Sciences (ATLAS)", Faculty.UCT),
    ])
    def test_known_fields(self, field, faculty):
        assert resolve_faculty(field) is faculty

    def test_unknown_field_logged(self, caplog):
        """Unbekanntes Studienfach → None + Fehler im Log, kein Abbruch."""
        with caplog.at_level(logging.ERROR):
            assert resolve_faculty("Basket Weaving", student_id=7) is None
        assert "Basket Weaving" in caplog.text
        assert "7" in caplog.text


class TestResolveStudents:
    def test_students_resolved(self):
        catalog = PlacementCatalog.build([uni(1, total=1), uni(2, total=1)])
        students = resolve_students([
            applicant(5, [2, 1, 2], first_name="Eva", last_name="Klein"),
            applicant(6, [], field="Unknown Field"),
        ], catalog)
        eva, other = students
        assert eva.preferences[:2] == (SlotKey.real(2, "CS"), SlotKey.real(1, "CS"))
        assert eva.listed_count == 2
        assert eva.rank_of(SlotKey.real(1, "CS")) == 2
        assert eva.rank_of(SlotKey.overflow()) is None
        assert eva.faculty is Faculty.EEMCS
        assert eva.full_name == "Eva Klein"
        assert other.listed_count == 0
        assert other.faculty is None

    def test_duplicate_application_id(self):
        catalog = PlacementCatalog.build([uni(1, total=1)])
        students = resolve_students([applicant(5, [1]), applicant(5, [])], catalog)
        assert len(students) == 1
        assert students[0].listed_count == 1

    def test_full_year_is_first_cohort(self):
        from models.enums import Enrollment
        catalog = PlacementCatalog.build([uni(1, total=1)])
        (student,) = resolve_students(
            [applicant(5, [1], enrollment=Enrollment.FULL_YEAR)], catalog)
        assert student.cohort is Semester.FIRST
