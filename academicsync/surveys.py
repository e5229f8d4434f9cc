"""
Survey answers parsing.

The answers page does not say whether a question is free text or a
percentage score. The only reliable hint is the *second* option of the
question's select:

- "No opina"      -> TEXT, the actual value lives in the textarea of the next row
- "<number>%"     -> PERCENTAGE, the selected option is the score
- anything else   -> we don't know this form, fail
"""

from __future__ import annotations

import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from academicsync.errors import UnsupportedSchemaError
from academicsync.model import AnswerType, SurveyAnswer


NO_OPINION = "no opina"


def sniff_answer_type(second_option: str) -> AnswerType:
    """
    Infer the field type from the label of the second selectable option.
    """
    label = second_option.lower().strip()
    if label == NO_OPINION:
        return AnswerType.TEXT
    if label.endswith("%"):
        return AnswerType.PERCENTAGE
    raise UnsupportedSchemaError(f"Couldn't parse second option: {label!r}", actual=second_option)


def _selected_option(select: Tag) -> Optional[Tag]:
    # Browsers select the first option when none is marked as selected
    option = select.find("option", selected=True)
    if option is None:
        option = select.find("option")
    return option


LEADING_INT_RE = re.compile(r"\s*(-?\d+)")


def _parse_int(value: str) -> Optional[int]:
    # Options read like "75%", only the leading number matters
    groups = LEADING_INT_RE.match(value)
    if not groups:
        return None
    return int(groups.group(1))


def parse_answer_row(row: Tag) -> Optional[SurveyAnswer]:
    """
    Parse one answer row, or return None if nothing was selected.
    """
    cells = row.find_all("td", recursive=False)
    if len(cells) < 2:
        return None

    select = cells[1].find("select")
    option = _selected_option(select) if select is not None else None
    raw_value = option.get_text().strip() if option is not None else ""
    if not raw_value:
        return None

    question = cells[0].get_text().strip()
    second_option = select.find("option", attrs={"value": "2"})
    answer_type = sniff_answer_type(second_option.get_text() if second_option is not None else "")

    if answer_type is AnswerType.TEXT:
        textarea = None
        next_row = row.find_next_sibling("tr")
        if next_row is not None:
            textarea = next_row.find("textarea")
        text = textarea.get_text().strip() if textarea is not None else ""
        return SurveyAnswer(question=question, type=answer_type, value=text or None)

    return SurveyAnswer(question=question, type=answer_type, value=_parse_int(raw_value))


def parse_survey_answers(html: str) -> List[SurveyAnswer]:
    soup = BeautifulSoup(html, "html.parser")
    answers: List[SurveyAnswer] = []
    for row in soup.select(".std-canvas table tr"):
        answer = parse_answer_row(row)
        if answer:
            answers.append(answer)
    return answers
