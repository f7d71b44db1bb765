import unittest

from app.documents.models import ResumeBlock
from app.documents.structure import is_likely_header, is_section_title, structure_resume


def flatten_blocks(blocks: list[ResumeBlock]) -> list[str]:
    lines: list[str] = []
    for block in blocks:
        lines.append(block.content)
        lines.extend(child.content for child in block.children)
    return lines


class ResumeStructureTests(unittest.TestCase):
    def test_three_short_lines_are_all_headers(self):
        blocks = structure_resume("Jane Doe\nEXPERIENCE\nLed a team of 5")
        self.assertEqual(
            blocks,
            [
                ResumeBlock.header("Jane Doe"),
                ResumeBlock.header("EXPERIENCE"),
                ResumeBlock.header("Led a team of 5"),
            ],
        )

    def test_heading_after_header_window_groups_body_lines(self):
        blocks = structure_resume("Jane Doe\nStaff Engineer\nBerlin\nEXPERIENCE\nLed a team of 5")
        self.assertEqual(
            blocks,
            [
                ResumeBlock.header("Jane Doe"),
                ResumeBlock.header("Staff Engineer"),
                ResumeBlock.header("Berlin"),
                ResumeBlock.section("EXPERIENCE", [ResumeBlock.text("Led a team of 5")]),
            ],
        )

    def test_header_line_closes_open_section(self):
        text = "Summary http://jane.dev\nJane Doe\nEngineer\nBuilds things"
        blocks = structure_resume(text)
        self.assertEqual(
            blocks,
            [
                ResumeBlock.section("Summary http://jane.dev"),
                ResumeBlock.header("Jane Doe"),
                ResumeBlock.header("Engineer"),
                ResumeBlock.text("Builds things"),
            ],
        )
        self.assertEqual(flatten_blocks(blocks), text.split("\n"))

    def test_every_line_kept_once_in_order(self):
        text = (
            "Jane Doe\n"
            "\n"
            "jane@example.com | https://jane.dev\n"
            "Senior Engineer\n"
            "Intro line before any section\n"
            "Summary\n"
            "Builds reliable backend systems.\n"
            "\n"
            "Work Experience\n"
            "Acme Corp - Staff Engineer\n"
            "Shipped billing platform\n"
            "Education\n"
            "BSc Computer Science\n"
        )
        blocks = structure_resume(text)
        expected = [line.strip() for line in text.split("\n") if line.strip()]
        self.assertEqual(flatten_blocks(blocks), expected)

    def test_header_beats_section_keyword_in_first_lines(self):
        blocks = structure_resume("Skills Summary\nPython\nGo")
        self.assertEqual([block.type for block in blocks], ["header", "header", "header"])
        self.assertEqual(blocks[0].content, "Skills Summary")

    def test_line_four_or_later_is_never_header(self):
        self.assertTrue(is_likely_header("Jane Doe", 2))
        self.assertFalse(is_likely_header("Jane Doe", 3))
        blocks = structure_resume("a@b.com\nhttp://x.dev\nc@d.com\nJane Doe")
        self.assertEqual([block.type for block in blocks], ["text", "text", "text", "text"])

    def test_header_rejects_contact_details_and_long_lines(self):
        self.assertFalse(is_likely_header("jane@example.com", 0))
        self.assertFalse(is_likely_header("linkedin: https://linkedin.com/in/jane", 1))
        self.assertFalse(is_likely_header("x" * 100, 0))
        self.assertTrue(is_likely_header("x" * 99, 0))

    def test_blank_lines_do_not_count_towards_header_window(self):
        blocks = structure_resume("\n\nJane Doe\n\n\nEngineer\n")
        self.assertEqual([block.type for block in blocks], ["header", "header"])

    def test_section_title_length_boundary(self):
        prefix = "Experience "
        at_limit = prefix + "x" * (50 - len(prefix))
        below_limit = prefix + "x" * (49 - len(prefix))
        self.assertEqual(len(at_limit), 50)
        self.assertFalse(is_section_title(at_limit))
        self.assertTrue(is_section_title(below_limit))

        blocks = structure_resume(f"Jane\nDoe\nEngineer\n{at_limit}")
        self.assertEqual(blocks[-1], ResumeBlock.text(at_limit))

    def test_section_keywords_match_case_insensitively(self):
        for title in ("TECHNICAL SKILLS", "Core Competencies", "Licenses & Certifications", "Career Objective"):
            self.assertTrue(is_section_title(title), title)
        self.assertFalse(is_section_title("Python, Go, Rust"))

    def test_new_heading_flushes_previous_section(self):
        text = "Jane\nDoe\nEngineer\nExperience\nLine A\nLine B\nEducation\nLine C\n"
        blocks = structure_resume(text)
        self.assertEqual(len(blocks), 5)
        experience, education = blocks[3], blocks[4]
        self.assertEqual(experience.content, "Experience")
        self.assertEqual([child.content for child in experience.children], ["Line A", "Line B"])
        self.assertEqual(education.content, "Education")
        self.assertEqual([child.content for child in education.children], ["Line C"])

    def test_empty_section_is_still_emitted(self):
        blocks = structure_resume("Jane\nDoe\nEngineer\nProjects\nSkills\nPython")
        self.assertEqual(blocks[3], ResumeBlock.section("Projects"))
        self.assertEqual(blocks[4], ResumeBlock.section("Skills", [ResumeBlock.text("Python")]))

    def test_body_before_any_section_stays_top_level(self):
        blocks = structure_resume("Jane\nDoe\nEngineer\nLoose line one\nLoose line two")
        self.assertEqual(blocks[3:], [ResumeBlock.text("Loose line one"), ResumeBlock.text("Loose line two")])

    def test_windows_line_endings_are_trimmed(self):
        blocks = structure_resume("Jane Doe\r\nEngineer\r\nBerlin\r\nEXPERIENCE\r\nLed a team of 5\r\n")
        self.assertEqual(blocks[3].content, "EXPERIENCE")
        self.assertEqual(blocks[3].children[0].content, "Led a team of 5")

    def test_empty_input(self):
        self.assertEqual(structure_resume(""), [])
        self.assertEqual(structure_resume("\n  \n\t\n"), [])


if __name__ == "__main__":
    unittest.main()
