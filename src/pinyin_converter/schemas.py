from __future__ import annotations

"""Multi-step response shapes for schema mode.

The model is made to externalise its reasoning step by step before it writes
the final answer. Only the final step's ``output`` is surfaced; every other
step is still required and validated.
"""

import copy
from enum import Enum
from typing import Any, Dict, Type, Union

from pydantic import BaseModel, ConfigDict, Field


class ConversionMode(str, Enum):
    PLAIN = "plain"
    MATH = "math"

    @classmethod
    def from_flag(cls, math_mode: bool) -> "ConversionMode":
        return cls.MATH if math_mode else cls.PLAIN


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")


class AnalysisStep(_Strict):
    analysis: str = Field(..., description="本步骤的分析过程")
    output: str = Field(..., description="本步骤的结果")


class OutputStep(_Strict):
    output: str = Field(..., description="本步骤的结果")


class CritiqueStep(_Strict):
    analysis: str = Field(..., description="对上一步结果的检查与批评")


class FinalStep(_Strict):
    output: str = Field(..., pattern=r"\S", description="最终转换结果，仅包含转换后的文本")


class PlainSteps(_Strict):
    """Five steps: tokenize, tone-mark & correct, render, critique, final."""

    step1: AnalysisStep = Field(..., description="拼音与英文分词")
    step2: AnalysisStep = Field(..., description="为每个拼音标注声调并纠正错拼")
    step3: OutputStep = Field(..., description="转换为中文")
    step4: CritiqueStep = Field(..., description="检查转换结果是否通顺、符合上下文")
    step5: FinalStep = Field(..., description="修正后的最终结果")

    @property
    def final_output(self) -> str:
        return self.step5.output


class MathSteps(_Strict):
    """Seven steps: the plain chain plus math extraction and substitution."""

    step1: AnalysisStep = Field(..., description="拼音与英文分词")
    step2: AnalysisStep = Field(..., description="为每个拼音标注声调并纠正错拼")
    step3: OutputStep = Field(..., description="转换为中文")
    step4: CritiqueStep = Field(..., description="检查转换结果是否通顺、符合上下文")
    step5: OutputStep = Field(..., description="修正后的草稿")
    step6: AnalysisStep = Field(..., description="提取用自然语言描述的数学公式并转换为 MathJax")
    step7: FinalStep = Field(..., description="将 MathJax 公式替换回草稿后的最终结果")

    @property
    def final_output(self) -> str:
        return self.step7.output


StepwiseResult = Union[PlainSteps, MathSteps]

_SCHEMAS: Dict[ConversionMode, Type[BaseModel]] = {
    ConversionMode.PLAIN: PlainSteps,
    ConversionMode.MATH: MathSteps,
}

_SCHEMA_NAMES = {
    ConversionMode.PLAIN: "pinyin_conversion",
    ConversionMode.MATH: "pinyin_math_conversion",
}


def schema_for(mode: ConversionMode | str) -> Type[BaseModel]:
    return _SCHEMAS[ConversionMode(mode)]


def step_descriptions(mode: ConversionMode | str) -> list[tuple[str, str]]:
    """Return ``(step name, description)`` pairs in order."""
    model = schema_for(mode)
    return [(name, field.description or "") for name, field in model.model_fields.items()]


def _inline_refs(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Replace every ``$ref`` with a copy of its definition.

    Strict structured-output endpoints reject a ``$ref`` that carries sibling
    keys such as ``description``, which is what pydantic emits for described
    model fields.
    """
    defs = schema.get("$defs", {})

    def resolve(node: Any) -> Any:
        if isinstance(node, list):
            return [resolve(item) for item in node]
        if not isinstance(node, dict):
            return node
        if "$ref" in node:
            name = node["$ref"].rsplit("/", 1)[-1]
            merged = copy.deepcopy(defs[name])
            merged.update({k: v for k, v in node.items() if k != "$ref"})
            return resolve(merged)
        return {k: resolve(v) for k, v in node.items() if k != "$defs"}

    return resolve(schema)


def response_format(mode: ConversionMode | str) -> Dict[str, Any]:
    """OpenAI-style ``response_format`` directive for *mode*."""
    mode = ConversionMode(mode)
    return {
        "type": "json_schema",
        "json_schema": {
            "name": _SCHEMA_NAMES[mode],
            "strict": True,
            "schema": _inline_refs(schema_for(mode).model_json_schema()),
        },
    }
