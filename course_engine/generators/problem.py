"""
Problem OLX: problem/{id}.xml holding one multiple-choice question.

    <problem display_name="..." showanswer="...">
      <multiplechoiceresponse>
        <label>question</label>
        <choicegroup type="MultipleChoice">
          <choice correct="true">text <choicehint>hint</choicehint></choice>
        </choicegroup>
        <solution>...</solution>
      </multiplechoiceresponse>
    </problem>
"""

from typing import Dict, Mapping
from xml.etree import ElementTree as ET

from course_engine.model import ProblemBlock
from course_engine.olx import add_text_element, prettify_xml


def build_problem(block: ProblemBlock) -> ET.Element:
    problem = ET.Element("problem", display_name=block.title, showanswer=block.show_answer)
    response = ET.SubElement(problem, "multiplechoiceresponse")
    add_text_element(response, "label", block.question_text)

    group = ET.SubElement(response, "choicegroup", type="MultipleChoice")
    for choice in block.choices:
        node = add_text_element(group, "choice", choice.text, correct="true" if choice.correct else "false")
        if choice.hint:
            node.text = f"{choice.text} "
            add_text_element(node, "choicehint", choice.hint)

    if block.explanation:
        solution = ET.SubElement(response, "solution")
        detail = ET.SubElement(solution, "div", {"class": "detailed-solution"})
        add_text_element(detail, "p", "Explanation")
        add_text_element(detail, "p", block.explanation)

    return problem


def generate_problem_blocks(problem_blocks: Mapping[str, ProblemBlock]) -> Dict[str, str]:
    return {
        f"problem/{block_id}.xml": prettify_xml(build_problem(block))
        for block_id, block in problem_blocks.items()
    }
