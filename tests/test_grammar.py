"""
Unit tests for the per-field grammars, each field in isolation.
"""

import unittest
from datetime import date

from academicsync import grammar
from academicsync.errors import MalformedContentError
from academicsync.model import Branch, HistoryType, Quarter, SurveyKind


class TestSharedFields(unittest.TestCase):
    def test_course_code(self) -> None:
        self.assertEqual(grammar.parse_course_code("950701"), "950701")
        for bad in ["95070", "9507011", "95070A", ""]:
            with self.subTest(value=bad):
                with self.assertRaises(MalformedContentError):
                    grammar.parse_course_code(bad)

    def test_date(self) -> None:
        self.assertEqual(grammar.parse_date("05/03/2019"), date(2019, 3, 5))
        with self.assertRaises(MalformedContentError):
            grammar.parse_date("2019-03-05")

    def test_branch(self) -> None:
        self.assertIs(grammar.parse_branch("CAMPUS"), Branch.CAMPUS)
        self.assertIs(grammar.parse_branch("PIÑERO"), Branch.PINERO)
        self.assertIsNone(grammar.parse_branch("SIN_DESIGNAR"))
        with self.assertRaises(MalformedContentError):
            grammar.parse_branch("NARNIA")


class TestTranscriptFields(unittest.TestCase):
    def test_student_id_and_name(self) -> None:
        self.assertEqual(grammar.parse_student_id_and_name("12.345-6 Jane Doe"), ("12.345-6", "Jane Doe"))
        # the check digit is sometimes missing
        self.assertEqual(grammar.parse_student_id_and_name("123.456- John Roe"), ("123.456-", "John Roe"))
        with self.assertRaises(MalformedContentError):
            grammar.parse_student_id_and_name("Jane Doe")

    def test_year_and_quarter(self) -> None:
        self.assertEqual(grammar.match_year_and_quarter("1er Cuat 2021"), (2021, Quarter.FIRST))
        self.assertEqual(grammar.match_year_and_quarter("2do Cuat 2020"), (2020, Quarter.SECOND))
        self.assertEqual(grammar.match_year_and_quarter("Anual 2019"), (2019, Quarter.ANNUAL))
        self.assertIsNone(grammar.match_year_and_quarter("3er Cuat 2021"))
        self.assertIsNone(grammar.match_year_and_quarter("II"))

    def test_normalize_branch(self) -> None:
        self.assertEqual(grammar.normalize_transcript_branch("Campus Virtual"), "AULA_VIRTUAL")
        self.assertEqual(grammar.normalize_transcript_branch("Medrano"), "MEDRANO")
        self.assertEqual(grammar.normalize_transcript_branch("Sin designar"), "SIN_DESIGNAR")
        self.assertEqual(grammar.normalize_transcript_branch("Escuela"), "ESCUELA")

    def test_format_student_id(self) -> None:
        self.assertEqual(grammar.format_student_id("1234567"), "123.456-7")
        self.assertEqual(grammar.format_student_id(" 1234567 "), "123.456-7")
        self.assertEqual(grammar.format_student_id("123456"), "12.345-6")
        with self.assertRaises(MalformedContentError):
            grammar.format_student_id("12.345-6")

    def test_plan_code(self) -> None:
        self.assertEqual(grammar.parse_plan_code("Plan: (K08) Ingeniería en Sistemas"), "K08")
        with self.assertRaises(MalformedContentError):
            grammar.parse_plan_code("Plan K08")


class TestHistoryRows(unittest.TestCase):
    def test_course_code_from_header(self) -> None:
        self.assertEqual(grammar.parse_history_course_code("Física I (950701)"), "950701")
        with self.assertRaises(MalformedContentError):
            grammar.parse_history_course_code("Física I")

    def test_signed_row(self) -> None:
        row = grammar.parse_history_row("Regularidad - Aprobado 10/03/2019 - Libro 3 Detalle")
        self.assertEqual(row.type, HistoryType.SIGNED)
        self.assertEqual(row.grade, "Aprobado")
        self.assertEqual(row.date, date(2019, 3, 10))

    def test_passed_row_with_numeric_grade(self) -> None:
        row = grammar.parse_history_row("Promoción  - 8 (ocho) Promocionado 15/12/2019 - Detalle")
        self.assertEqual(row.type, HistoryType.PASSED)
        self.assertTrue(grammar.is_approved_grade(row.grade))

    def test_equivalence_rows(self) -> None:
        partial = grammar.parse_history_row("Equivalencia Parcial - Aprobada (Aprobada) Aprobado 01/04/2020 - Detalle")
        total = grammar.parse_history_row("Equivalencia Total - Aprobado 01/04/2020 - Detalle")
        self.assertEqual(partial.type, HistoryType.SIGNED)
        self.assertEqual(total.type, HistoryType.PASSED)

    def test_unknown_status_fails(self) -> None:
        with self.assertRaises(MalformedContentError):
            grammar.parse_history_row("Libre - Aprobado 10/03/2019 - Detalle")

    def test_approved_grades(self) -> None:
        self.assertTrue(grammar.is_approved_grade("Aprobado"))
        self.assertTrue(grammar.is_approved_grade("Aprobada (Aprobada) Aprobado"))
        self.assertFalse(grammar.is_approved_grade("2 (dos) Reprobado"))
        self.assertFalse(grammar.is_approved_grade("No aprobad (No aprobada) Ausente"))
        self.assertFalse(grammar.is_approved_grade("Inicio de dictado"))
        self.assertFalse(grammar.is_approved_grade("Ausente"))


class TestPortalFields(unittest.TestCase):
    def test_class_time(self) -> None:
        self.assertEqual(grammar.parse_class_time("2019 Cuat 1/2"), (2019, Quarter.FIRST))
        self.assertEqual(grammar.parse_class_time("2019 Cuat 2/2"), (2019, Quarter.SECOND))
        self.assertEqual(grammar.parse_class_time("2019 Anual"), (2019, Quarter.ANNUAL))
        self.assertEqual(grammar.parse_class_time("2019      1/1"), (2019, Quarter.ANNUAL))
        with self.assertRaises(MalformedContentError):
            grammar.parse_class_time("Opcional")

    def test_survey_label(self) -> None:
        label = grammar.parse_survey_label("Encuesta Docente 2019 1er C")
        self.assertEqual(label, (SurveyKind.DOCENTE, 2019, Quarter.FIRST))

        label = grammar.parse_survey_label("Encuesta_Auxiliares 2020 2do C")
        self.assertEqual(label, (SurveyKind.AUXILIAR, 2020, Quarter.SECOND))

        label = grammar.parse_survey_label("Encuesta Docente 2018 Anual")
        self.assertEqual(label, (SurveyKind.DOCENTE, 2018, Quarter.ANNUAL))

        with self.assertRaises(MalformedContentError):
            grammar.parse_survey_label("Encuesta Alumnos 2019 1er C")

    def test_survey_onclick(self) -> None:
        onclick = (
            "if(fn_encuesta(51,36218,52143,'Z3574 [950309] Economía','[JEFE DE TP] GALLONI GUILLEN, ROLANDO'))"
            "{return jslib_submit(null,'/alu/encdocpop.do','popup',null,false );} else return false;"
        )
        params = grammar.parse_survey_onclick(onclick)
        self.assertEqual(params.iden, 51)
        self.assertEqual(params.idcu, 36218)
        self.assertEqual(params.iddo, 52143)
        self.assertEqual(params.course_name, "Z3574 [950309] Economía")
        self.assertEqual(params.professor_name, "[JEFE DE TP] GALLONI GUILLEN, ROLANDO")
        self.assertEqual(params.as_form_data()["form_submit"], 0)

    def test_survey_onclick_missing(self) -> None:
        with self.assertRaises(MalformedContentError):
            grammar.parse_survey_onclick(None)


if __name__ == "__main__":
    unittest.main()
