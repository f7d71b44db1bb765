from __future__ import annotations

from functools import reduce

from .models import ResumeBlock

HEADER_LINE_WINDOW = 3
HEADER_MAX_CHARS = 100
SECTION_TITLE_MAX_CHARS = 50

SECTION_KEYWORDS = (
    "experience",
    "work experience",
    "employment",
    "career",
    "education",
    "academic",
    "qualifications",
    "skills",
    "technical skills",
    "core competencies",
    "projects",
    "achievements",
    "accomplishments",
    "certifications",
    "licenses",
    "summary",
    "objective",
    "profile",
)

# (emitted blocks, currently open section)
_FoldState = tuple[list[ResumeBlock], ResumeBlock | None]


def is_likely_header(line: str, index: int) -> bool:
    return index < HEADER_LINE_WINDOW and len(line) < HEADER_MAX_CHARS and "@" not in line and "http" not in line


def is_section_title(line: str) -> bool:
    lower = line.lower()
    return any(keyword in lower for keyword in SECTION_KEYWORDS) and len(line) < SECTION_TITLE_MAX_CHARS


def _content_lines(text: str) -> list[str]:
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def _step(state: _FoldState, item: tuple[int, str]) -> _FoldState:
    blocks, open_section = state
    index, line = item

    if is_likely_header(line, index):
        if open_section is not None:
            blocks.append(open_section)
        blocks.append(ResumeBlock.header(line))
        return blocks, None

    if is_section_title(line):
        if open_section is not None:
            blocks.append(open_section)
        return blocks, ResumeBlock.section(line)

    if open_section is not None:
        open_section.children.append(ResumeBlock.text(line))
    else:
        blocks.append(ResumeBlock.text(line))
    return blocks, open_section


def structure_resume(text: str) -> list[ResumeBlock]:
    """Group resume text into header, section and body-line blocks.

    Single pass with no backtracking: a line keeps its first classification
    and a closed section is never reopened. A header line closes the open
    section, so blocks keep the input line order. Blank lines are dropped and
    the header window counts non-blank lines only.
    """
    initial: _FoldState = ([], None)
    blocks, open_section = reduce(_step, enumerate(_content_lines(text)), initial)
    if open_section is not None:
        blocks.append(open_section)
    return blocks
