import unittest
from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from app.documents.models import ResumeBlock
from app.documents.render import (
    BULLET_GLYPH,
    build_markup_document,
    build_resume_document,
    classify_markup_line,
    content_disposition,
    optimized_filename,
    render_markup_docx,
    render_resume_docx,
)
from app.documents.themes import THEMES, resolve_theme


def _bottom_border(paragraph):
    p_pr = paragraph._p.pPr
    if p_pr is None:
        return None
    borders = p_pr.find(qn("w:pBdr"))
    if borders is None:
        return None
    return borders.find(qn("w:bottom"))


class StructuredRenderTests(unittest.TestCase):
    def setUp(self):
        self.blocks = [
            ResumeBlock.header("Jane Doe"),
            ResumeBlock.text("Remote, EU"),
            ResumeBlock.section("Experience", [ResumeBlock.text("Led a team of 5"), ResumeBlock.text("Cut costs 20%")]),
            ResumeBlock.section("Skills", [ResumeBlock.text("Python, SQL")]),
        ]

    def test_one_paragraph_per_block_in_source_order(self):
        document = build_resume_document(self.blocks)
        texts = [paragraph.text for paragraph in document.paragraphs]
        self.assertEqual(
            texts,
            ["Jane Doe", "Remote, EU", "EXPERIENCE", "Led a team of 5", "Cut costs 20%", "SKILLS", "Python, SQL"],
        )

    def test_header_is_centered_bold_and_large(self):
        header = build_resume_document(self.blocks).paragraphs[0]
        self.assertEqual(header.alignment, WD_ALIGN_PARAGRAPH.CENTER)
        self.assertTrue(header.runs[0].bold)
        self.assertEqual(header.runs[0].font.size, Pt(16))
        self.assertEqual(header.paragraph_format.space_after, Pt(10))

    def test_section_heading_has_border_and_spacing(self):
        document = build_resume_document(self.blocks)
        heading = document.paragraphs[2]
        self.assertTrue(heading.runs[0].bold)
        self.assertEqual(heading.runs[0].font.size, Pt(12))
        self.assertEqual(heading.paragraph_format.space_before, Pt(15))
        self.assertEqual(heading.paragraph_format.space_after, Pt(5))
        border = _bottom_border(heading)
        self.assertIsNotNone(border)
        self.assertEqual(border.get(qn("w:val")), "single")
        self.assertEqual(border.get(qn("w:sz")), "6")

    def test_body_lines_are_small_and_not_bold(self):
        document = build_resume_document(self.blocks)
        for index in (1, 3, 4, 6):
            paragraph = document.paragraphs[index]
            self.assertFalse(paragraph.runs[0].bold)
            self.assertEqual(paragraph.runs[0].font.size, Pt(11))
            self.assertIsNone(_bottom_border(paragraph))

    def test_render_resume_docx_round_trips_through_python_docx(self):
        payload = render_resume_docx("Jane Doe\nEXPERIENCE\nLed a team of 5")
        self.assertTrue(payload.startswith(b"PK"))
        reopened = Document(BytesIO(payload))
        self.assertEqual([p.text for p in reopened.paragraphs], ["Jane Doe", "EXPERIENCE", "Led a team of 5"])

    def test_arbitrary_text_never_fails(self):
        text = "\x0b weird \t line\n###\n**\n- \n## \n" + "x" * 5000
        self.assertTrue(render_resume_docx(text).startswith(b"PK"))
        self.assertTrue(render_markup_docx(text, "modern").startswith(b"PK"))
        self.assertTrue(render_resume_docx("").startswith(b"PK"))


class MarkupRenderTests(unittest.TestCase):
    def test_classification_priority(self):
        cases = {
            "## Experience": ("heading", "Experience"),
            "### Staff Engineer, Acme": ("subheading", "Staff Engineer, Acme"),
            "**Open to relocation**": ("emphasis", "Open to relocation"),
            "- Built billing platform": ("bullet", "Built billing platform"),
            "": ("break", ""),
            "   ": ("break", ""),
            "Plain sentence.": ("paragraph", "Plain sentence."),
            "##No space": ("paragraph", "##No space"),
            "-no space": ("paragraph", "-no space"),
            "**half bold": ("paragraph", "**half bold"),
            "**Python** and **Go**": ("emphasis", "Python and Go"),
            "**": ("emphasis", ""),
        }
        for line, (kind, text) in cases.items():
            classified = classify_markup_line(line)
            self.assertEqual((classified.kind, classified.text), (kind, text), line)

    def test_triple_hash_is_never_a_top_level_heading(self):
        self.assertEqual(classify_markup_line("### Role").kind, "subheading")
        self.assertEqual(classify_markup_line("#### Deep").kind, "paragraph")

    def test_blank_line_is_never_a_heading(self):
        self.assertEqual(classify_markup_line("  \t").kind, "break")

    def test_theme_colors_applied(self):
        theme = THEMES["creative"]
        document = build_markup_document("## Experience\n### Role\n- Shipped it\n\nPlain text", theme)
        paragraphs = document.paragraphs
        self.assertEqual(len(paragraphs), 5)

        heading, subheading, bullet, gap, body = paragraphs
        self.assertEqual(heading.text, "Experience")
        self.assertEqual(heading.runs[0].font.color.rgb, RGBColor.from_string(theme.primary))
        self.assertIsNotNone(_bottom_border(heading))
        self.assertEqual(subheading.runs[0].font.color.rgb, RGBColor.from_string(theme.secondary))
        self.assertEqual(bullet.runs[0].text, f"{BULLET_GLYPH} ")
        self.assertEqual(bullet.runs[0].font.color.rgb, RGBColor.from_string(theme.accent))
        self.assertEqual(bullet.runs[1].text, "Shipped it")
        self.assertEqual(bullet.runs[1].font.color.rgb, RGBColor.from_string(theme.text))
        self.assertEqual(gap.text, "")
        self.assertEqual(body.runs[0].font.color.rgb, RGBColor.from_string(theme.text))

    def test_emphasis_markers_are_stripped(self):
        document = build_markup_document("**Key achievement**", THEMES["minimal"])
        paragraph = document.paragraphs[0]
        self.assertEqual(paragraph.text, "Key achievement")
        self.assertTrue(paragraph.runs[0].bold)

    def test_inner_emphasis_markers_are_stripped(self):
        document = build_markup_document("**Led** a team of **5**", THEMES["minimal"])
        self.assertEqual(document.paragraphs[0].text, "Led a team of 5")

    def test_unknown_theme_falls_back_to_default(self):
        self.assertEqual(resolve_theme("neon").name, "professional")
        self.assertEqual(resolve_theme(None).name, "professional")
        self.assertEqual(resolve_theme(" Modern ").name, "modern")


class FilenameTests(unittest.TestCase):
    def test_optimized_filename_replaces_extension(self):
        self.assertEqual(optimized_filename("jane_resume.pdf"), "optimized_jane_resume.docx")
        self.assertEqual(optimized_filename("cv.final.docx"), "optimized_cv.final.docx")
        self.assertEqual(optimized_filename("notes"), "optimized_notes.docx")
        self.assertEqual(optimized_filename("C:\\Users\\jane\\cv.doc"), "optimized_cv.docx")
        self.assertEqual(optimized_filename(""), "optimized_resume.docx")

    def test_content_disposition_ascii_and_unicode(self):
        self.assertEqual(
            content_disposition("optimized_cv.docx"),
            'attachment; filename="optimized_cv.docx"',
        )
        header = content_disposition("optimized_Zoë.docx")
        self.assertIn('filename="optimized_Zo_.docx"', header)
        self.assertIn("filename*=UTF-8''optimized_Zo%C3%AB.docx", header)
        header.encode("latin-1")


if __name__ == "__main__":
    unittest.main()
