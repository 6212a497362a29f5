import unittest

from matching import QuizAnswer, match_careers
from matching.schema import MatchBreakdown
from reports import NEXT_STEPS, build_career_report, fit_factors, format_salary, report_filename


class TestFormatSalary(unittest.TestCase):

    def test_lakhs(self):
        self.assertEqual(format_salary(800000, 2500000), "₹8L - ₹25L")

    def test_crores_and_thousands(self):
        self.assertEqual(format_salary(15000000), "₹1.5Cr")
        self.assertEqual(format_salary(50000), "₹50K")

    def test_halves_round_up(self):
        self.assertEqual(format_salary(250000), "₹3L")
        self.assertEqual(format_salary(2500), "₹3K")
        self.assertEqual(format_salary(15500000), "₹1.6Cr")
        self.assertEqual(format_salary(350000, 1250000), "₹4L - ₹13L")

    def test_missing_values(self):
        self.assertEqual(format_salary(None), "N/A")
        self.assertEqual(format_salary(0, 5000000), "N/A - ₹50L")
        self.assertEqual(format_salary("lots"), "N/A")


class TestFitFactors(unittest.TestCase):

    def test_strong_profile(self):
        factors = fit_factors(MatchBreakdown(personality_match=100, skills_match=80, interests_match=90))
        self.assertIn("strongly", factors[0])
        self.assertIn("excellent", factors[1])
        self.assertIn("highly", factors[2])

    def test_thresholds_are_exclusive(self):
        factors = fit_factors(MatchBreakdown(personality_match=70, skills_match=70, interests_match=70))
        self.assertIn("moderately", factors[0])
        self.assertIn("good", factors[1])
        self.assertIn("moderately", factors[2])

    def test_developing_skills(self):
        factors = fit_factors(MatchBreakdown(personality_match=0, skills_match=50, interests_match=0))
        self.assertIn("developing", factors[1])


class TestBuildReport(unittest.TestCase):

    def test_report_content(self):
        result = match_careers([
            QuizAnswer(question_id=1, selected_option="1a", value=3),
            QuizAnswer(question_id=2, selected_option="2c", value=3),
        ])[0]
        report = build_career_report(result)

        self.assertEqual(report.title, "DreamWeave")
        self.assertEqual(report.user_name, "Student")
        self.assertEqual(report.match_score, 100)
        self.assertEqual([row.value for row in report.breakdown_rows], [50, 0, 50])
        self.assertEqual(report.insights[1].value, "92%")
        self.assertEqual(report.next_steps, NEXT_STEPS)
        self.assertEqual(report.filename, "DreamWeave_Software_Engineer_Report.pdf")

    def test_filename_collapses_whitespace(self):
        self.assertEqual(report_filename("UX  Designer"), "DreamWeave_UX_Designer_Report.pdf")


if __name__ == "__main__":
    unittest.main()
