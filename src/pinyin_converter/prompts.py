from __future__ import annotations

"""System / user prompt construction.

The system prompt comes in four flavours: direct or stepwise, each in plain
or math mode. Prompts are written in Chinese since that is the language the
model has to produce.
"""

from typing import Dict, List, NamedTuple

from .context import CONTEXT_MARKER
from .schemas import ConversionMode, step_descriptions

__all__ = [
    "ConversionMode",
    "Prompt",
    "build_system_prompt",
    "build_user_prompt",
    "build_prompt",
]


class Prompt(NamedTuple):
    system: str
    user: str

    def messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


# ---------------------------------------------------------------------------
# System prompt building blocks
# ---------------------------------------------------------------------------

_ROLE = {
    ConversionMode.PLAIN: "你是一位专业的中文拼音翻译助手，能够将包含拼音和英文的混合文本转换成流畅、准确的中文语句。",
    ConversionMode.MATH: (
        "你是一位专业的数学公式翻译助手和中文拼音翻译助手，能够将包含拼音、英文以及自然语言描述的数学公式的混合文本"
        "转换成流畅、准确的中文语句，并使用 MathJax 语法表达其中的数学公式。"
    ),
}

_OBJECTIVES = [
    "将用户提供的拼音和英文混合文本转换成相应的中文语句，力求表达流畅、准确，忠于原文意思，不进行解释、曲解、大幅度修改或扩写。",
    "识别并修复用户可能因输入过快导致的个别拼音或单词的字母顺序颠倒、错乱（例如 “shang” 输入为 “shagn”）。",
]

_MATH_OBJECTIVE = "将用户使用自然语言描述的数学公式（例如：“x 的平方”，“y 对 x 的积分”）转换成对应的 MathJax 格式。"

_INPUT = """\
*   用户输入的文本模拟了在中文输入法下只输入拼音和英文的场景，目的是为了减少选词干扰，保持思路流畅。
*   拼音之间可能存在空格，也可能因用户不想中断思路而连接在一起。
*   英文单词通常完整拼写，应当原样保留在中文语句中。
*   可能同时提供了上下文作为参考，用于更好地了解输入者的表达意图。"""

_RESPONSE = """\
*   只输出转换后的文本，不输出任何解释、说明或额外内容。
*   保留所有其他的格式标记，如 Markdown 格式标记、Obsidian 链接、Wiki 链接 [[...]]、嵌入 ![[...]]、图片链接等，原样输出。
*   严禁解释、曲解、大幅度修改、扩写内容！你只负责转换！"""

_PLAIN_EXAMPLES = [
    (
        "zhe shi yiduan ceshi wenben , duoge pinyin zhijian keneng hunhezaiyiqi yekeneng fenkaile",
        "这是一段测试文本，多个拼音之间可能混合在一起也可能分开了",
    ),
    (
        "sometimes zhijie yong yingwen word keyi genghao de chuanda wode feeling",
        "sometimes 直接用英文 word 可以更好地传达我的 feeling",
    ),
    ("jintian tianqi henhao,  very sunny,  shi he wai chu de rizi", "今天天气很好，very sunny，适合外出的日子。"),
    ("zheshi chagn yong de [[qiudaogongshi]]", "这是常用的[[求导公式]]"),
]

_MATH_EXAMPLES = [
    (
        "zhe ge function shi fxdnegyu x de pingfang ,  its derivative is fx shi 2x ,zheshi chagn yong [[qiudaogongshi]]",
        "这个 function 是 $f(x) = x^2$, its derivative is $f'(x) = 2x$，这是常用[[求导公式]]",
    ),
    ("ruguo wo dui y dengyu x fen zhi yi jinxing jifen,  jieguo shi shenme?", "如果我对 $y = \\frac{1}{x}$ 进行积分，结果是什么？"),
    ("jisuan y dengyu e de x cifang zai qujian 0 dao 1 shang de dingjifen", "计算 $y = e^x$ 在区间 $[0, 1]$ 上的定积分。"),
    ("y dui x de er jie daoshu keyi xiecheng shenmeyang?", "$y$ 对 $x$ 的二阶导数可以写成什么样？"),
]


def _bullets(items: List[str]) -> str:
    return "\n".join(f"*   {item}" for item in items)


def _examples(mode: ConversionMode) -> str:
    pairs = list(_PLAIN_EXAMPLES)
    if mode is ConversionMode.MATH:
        pairs = _MATH_EXAMPLES + pairs
    return "\n".join(f"**Input:** {src}\n**Response:** {dst}" for src, dst in pairs)


def _direct_workflow(mode: ConversionMode) -> str:
    steps = [
        "识别输入文本中的拼音和英文单词。",
        "将拼音转换成对应的汉字，并根据上下文选择最合适的词语。",
        "将英文单词融入中文语句中，确保语义流畅自然。",
    ]
    if mode is ConversionMode.MATH:
        steps.append("将自然语言描述的数学公式转换成对应的 MathJax 语法，行内公式使用 $...$ 包裹。")
    steps += [
        "结合上下文识别字母顺序颠倒、错乱的拼音或单词，并正确地修复它。",
        "整合所有部分，直接输出最终结果。",
    ]
    return "\n".join(f"{i}. {step}" for i, step in enumerate(steps, 1))


def _stepwise_workflow(mode: ConversionMode) -> str:
    lines = [f"{i}. `{name}`：{desc}" for i, (name, desc) in enumerate(step_descriptions(mode), 1)]
    final_step = step_descriptions(mode)[-1][0]
    return (
        "你必须按以下步骤逐步完成转换，并以 JSON 对象返回，键名严格为各步骤名，不允许出现额外的键：\n"
        + "\n".join(lines)
        + "\n每个步骤对象中，`analysis` 字段写分析过程，`output` 字段写该步骤的结果。"
        + f"\n`{final_step}.output` 必须只包含最终转换后的文本，不要包含任何解释。"
    )


def build_system_prompt(mode: ConversionMode | str = ConversionMode.MATH, stepwise: bool = True) -> str:
    mode = ConversionMode(mode)
    objectives = list(_OBJECTIVES)
    if mode is ConversionMode.MATH:
        objectives.insert(1, _MATH_OBJECTIVE)

    style = "自然流畅，符合现代中文表达习惯，避免口语化或过于正式。"
    if mode is ConversionMode.MATH:
        style += "数学公式使用清晰、准确的 MathJax 语法。"

    workflow = _stepwise_workflow(mode) if stepwise else _direct_workflow(mode)

    return "\n".join(
        [
            f"**1. Role:** {_ROLE[mode]}",
            "**2. Objectives:**",
            _bullets(objectives),
            f"**3. Style:** {style}",
            "**4. Input:**",
            _INPUT,
            "**5. Response:**",
            _RESPONSE,
            "**6. Workflow:**",
            workflow,
            "**示例:**",
            _examples(mode),
        ]
    )


def build_user_prompt(text: str, context: str = "") -> str:
    instruction = f"转换下列段落，纠正错误输入和误拼，只输出转换结果，不要任何解释：\n{text}"
    if not context:
        return instruction
    return (
        f"下面是当前输入的上下文，待转换的行已用 {CONTEXT_MARKER} 标出。"
        "上下文仅用于帮助你理解输入者的表达意图和具体场景，以便选择与上下文主题一致的正确词语；"
        "不要转换或输出上下文中的其他内容，只转换指定的段落。\n"
        f"<context>\n{context}\n</context>\n"
        f"{instruction}"
    )


def build_prompt(
    text: str,
    context: str = "",
    mode: ConversionMode | str = ConversionMode.MATH,
    stepwise: bool = True,
) -> Prompt:
    return Prompt(system=build_system_prompt(mode, stepwise), user=build_user_prompt(text, context))
