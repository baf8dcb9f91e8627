import pytest
from pydantic import ValidationError

from pinyin_converter.schemas import (
    ConversionMode,
    MathSteps,
    PlainSteps,
    response_format,
    schema_for,
    step_descriptions,
)


def test_schema_selected_by_mode():
    assert schema_for(ConversionMode.PLAIN) is PlainSteps
    assert schema_for("math") is MathSteps
    assert ConversionMode.from_flag(True) is ConversionMode.MATH
    assert ConversionMode.from_flag(False) is ConversionMode.PLAIN


def test_step_layout():
    assert [name for name, _ in step_descriptions("plain")] == [f"step{i}" for i in range(1, 6)]
    assert [name for name, _ in step_descriptions("math")] == [f"step{i}" for i in range(1, 8)]


def test_final_output(plain_steps, math_steps):
    assert PlainSteps.model_validate(plain_steps("完成")).final_output == "完成"
    assert MathSteps.model_validate(math_steps("$x^2$")).final_output == "$x^2$"


def test_missing_intermediate_step_is_rejected(math_steps):
    steps = math_steps()
    del steps["step6"]
    with pytest.raises(ValidationError):
        MathSteps.model_validate(steps)


def test_extra_fields_are_rejected(plain_steps):
    steps = plain_steps()
    steps["step4"]["output"] = "not allowed here"
    with pytest.raises(ValidationError):
        PlainSteps.model_validate(steps)

    steps = plain_steps()
    steps["step6"] = {"output": "surplus"}
    with pytest.raises(ValidationError):
        PlainSteps.model_validate(steps)


def test_empty_final_output_is_rejected(plain_steps):
    with pytest.raises(ValidationError):
        PlainSteps.model_validate(plain_steps(""))


def test_response_format_directive():
    directive = response_format(ConversionMode.MATH)
    assert directive["type"] == "json_schema"
    assert directive["json_schema"]["name"] == "pinyin_math_conversion"
    assert directive["json_schema"]["strict"] is True
    schema = directive["json_schema"]["schema"]
    assert schema["additionalProperties"] is False
    assert sorted(schema["required"]) == sorted(f"step{i}" for i in range(1, 8))


def test_whitespace_final_output_is_rejected(math_steps):
    with pytest.raises(ValidationError):
        MathSteps.model_validate(math_steps("  \n "))


def _walk(node):
    if isinstance(node, dict):
        yield node
        for value in node.values():
            yield from _walk(value)
    elif isinstance(node, list):
        for item in node:
            yield from _walk(item)


@pytest.mark.parametrize("mode", list(ConversionMode))
def test_response_schema_has_no_refs(mode):
    schema = response_format(mode)["json_schema"]["schema"]
    assert "$defs" not in schema
    assert not [node for node in _walk(schema) if "$ref" in node]

    step1 = schema["properties"]["step1"]
    assert step1["type"] == "object"
    assert step1["additionalProperties"] is False
    assert sorted(step1["required"]) == ["analysis", "output"]
    assert step1["description"] == "拼音与英文分词"
