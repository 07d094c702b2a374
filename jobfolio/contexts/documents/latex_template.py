"""
LaTeX helpers for CV versions: the blank starter document and a structural check.

The blank document is a Jinja2 template with custom delimiters so LaTeX
braces never clash with template syntax:
- Variable: <<< var >>>
- Block: <%% block %%>
- Comment: <# comment #>
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from jinja2 import Environment, FileSystemLoader

from jobfolio.contexts.storage.namespaced import DEFAULT_PARTITION, validate_partition

TEMPLATES_PATH = Path(__file__).resolve().parent / "templates"
BLANK_TEMPLATE_NAME = "blank_cv.tex.jinja"

BLANK_TEMPLATE_LABELS = {
    "zh": {
        "intro": "请根据你的信息填写以下模板内容",
        "education": "教育背景",
        "university": "您的大学名称",
        "major": "专业名称",
        "degree": "学位类型",
        "dates": "起始时间 - 结束时间",
        "honors": "获得的奖学金或荣誉",
        "experience": "实习经历",
        "company": "公司名称",
        "team": "部门/团队",
        "position": "职位",
        "city": "城市",
        "bullets": [
            "主要成就描述：包括具体数据和影响",
            "另一项重要工作内容和结果",
            "技术优化或创新方面的贡献",
        ],
        "research": "主要研究内容",
        "phase": "研究阶段",
        "year": "年份",
        "research_detail": "具体研究内容和成果描述",
        "paper": "论文标题. \\textbf{作者}, 其他作者, 年份.",
        "other": "其他学术成果",
    },
    "en": {
        "intro": "Fill in the template below with your own information",
        "education": "Education",
        "university": "Your University",
        "major": "Major",
        "degree": "Degree",
        "dates": "Start date - End date",
        "honors": "Scholarships or honors",
        "experience": "Experience",
        "company": "Company Name",
        "team": "Department/Team",
        "position": "Position",
        "city": "City",
        "bullets": [
            "Key achievement with concrete numbers and impact",
            "Another major responsibility and its result",
            "Technical improvement or innovation you contributed",
        ],
        "research": "Research",
        "phase": "Research phase",
        "year": "year",
        "research_detail": "What you studied and found",
        "paper": "Paper title. \\textbf{Author}, Co-authors, Year.",
        "other": "Other publications",
    },
}

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_PATH)),
    variable_start_string="<<<",
    variable_end_string=">>>",
    block_start_string="<%%",
    block_end_string="%%>",
    comment_start_string="<#",
    comment_end_string="#>",
    # Drop the newline after block tags so loops do not leave blank lines
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)


def create_blank_template(partition: str = DEFAULT_PARTITION, research_phases: int = 3) -> str:
    """
    Starter LaTeX body for a new resume version, labelled in the partition's language.

    Args:
        partition: "zh" or "en"
        research_phases: Number of placeholder research entries

    Returns:
        LaTeX source text
    """
    labels = BLANK_TEMPLATE_LABELS[validate_partition(partition)]
    template = _env.get_template(BLANK_TEMPLATE_NAME)
    return template.render(labels=labels, research_phases=research_phases)


@dataclass
class LatexValidation:
    """Outcome of validate_latex()."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)


def _count_unescaped(content: str, char: str) -> int:
    count = 0
    escaped = False
    for c in content:
        if escaped:
            escaped = False
        elif c == "\\":
            escaped = True
        elif c == char:
            count += 1
    return count


def validate_latex(content: str) -> LatexValidation:
    """
    Check that content looks like a complete LaTeX document.

    Checks for the document class, document environment and balanced
    (unescaped) braces. Compiling is out of scope.
    """
    errors = []

    if "\\documentclass" not in content:
        errors.append("Missing \\documentclass declaration")
    if "\\begin{document}" not in content:
        errors.append("Missing \\begin{document}")
    if "\\end{document}" not in content:
        errors.append("Missing \\end{document}")
    if _count_unescaped(content, "{") != _count_unescaped(content, "}"):
        errors.append("Unbalanced braces detected")

    return LatexValidation(is_valid=not errors, errors=errors)
