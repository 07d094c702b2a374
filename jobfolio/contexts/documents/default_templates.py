"""
Starter section templates seeded into an empty section library.

One template per section type, with text in the partition's language.
Used by SectionStore.initialize_default_templates().
"""

from typing import Any, Dict, List

from jobfolio.contexts.storage.namespaced import validate_partition

_ZH_TEMPLATES = {
    "education": {
        "title": "教育背景模板",
        "content": "**大学名称**, 专业名称，*学位类型*\n起始时间 - 结束时间\n\n获得的奖学金或荣誉",
        "latex_content": (
            "\\datedsubsection{\\textbf{大学名称}, 专业名称，\\textit{学位类型}}{起始时间 - 结束时间}\n\n"
            "获得的奖学金或荣誉"
        ),
        "tags": ["education", "template"],
    },
    "experience": {
        "title": "实习经历模板",
        "content": (
            "**公司名称** | 部门/团队, **职位**, 城市\n起始时间-结束时间\n\n"
            "• 主要成就描述：包括具体数据和影响\n• 另一项重要工作内容和结果\n• 技术优化或创新方面的贡献"
        ),
        "latex_content": (
            "\\datedsubsection{\\textbf{公司名称} | 部门/团队, \\textbf{职位}, 城市}{起始时间-结束时间}\n"
            "\\begin{itemize}\n"
            "  \\item 主要成就描述：包括具体数据和影响\n"
            "  \\item 另一项重要工作内容和结果\n"
            "  \\item 技术优化或创新方面的贡献\n"
            "\\end{itemize}"
        ),
        "tags": ["experience", "internship", "template"],
    },
    "research": {
        "title": "研究项目模板",
        "content": "**研究阶段 (年份)**：具体研究内容和成果描述\n论文标题. **作者**, 其他作者, 年份.",
        "latex_content": (
            "\\item \\textbf{研究阶段 (年份)}：具体研究内容和成果描述\\\\\n"
            "论文标题. \\textbf{作者}, 其他作者, 年份."
        ),
        "tags": ["research", "academic", "template"],
    },
    "skills": {
        "title": "专业技能模板",
        "content": "**编程语言**: 语言1, 语言2\n**工具与框架**: 工具1, 工具2",
        "latex_content": (
            "\\begin{itemize}\n"
            "  \\item \\textbf{编程语言}: 语言1, 语言2\n"
            "  \\item \\textbf{工具与框架}: 工具1, 工具2\n"
            "\\end{itemize}"
        ),
        "tags": ["skills", "template"],
    },
    "achievements": {
        "title": "获奖与荣誉模板",
        "content": "• 奖项名称, 颁发机构 (年份)\n• 另一项荣誉 (年份)",
        "latex_content": (
            "\\begin{itemize}\n"
            "  \\item 奖项名称, 颁发机构 (年份)\n"
            "  \\item 另一项荣誉 (年份)\n"
            "\\end{itemize}"
        ),
        "tags": ["achievements", "template"],
    },
    "custom": {
        "title": "自定义模块模板",
        "content": "模块标题\n\n自由填写的内容",
        "latex_content": "\\section{模块标题}\n\n自由填写的内容",
        "tags": ["custom", "template"],
    },
}

_EN_TEMPLATES = {
    "education": {
        "title": "Education template",
        "content": "**University Name**, Major, *Degree*\nStart date - End date\n\nScholarships or honors",
        "latex_content": (
            "\\datedsubsection{\\textbf{University Name}, Major, \\textit{Degree}}{Start date - End date}\n\n"
            "Scholarships or honors"
        ),
        "tags": ["education", "template"],
    },
    "experience": {
        "title": "Experience template",
        "content": (
            "**Company Name** | Department/Team, **Position**, City\nStart date - End date\n\n"
            "• Key achievement with concrete numbers and impact\n"
            "• Another major responsibility and its result\n"
            "• Technical improvement or innovation you contributed"
        ),
        "latex_content": (
            "\\datedsubsection{\\textbf{Company Name} | Department/Team, \\textbf{Position}, City}"
            "{Start date - End date}\n"
            "\\begin{itemize}\n"
            "  \\item Key achievement with concrete numbers and impact\n"
            "  \\item Another major responsibility and its result\n"
            "  \\item Technical improvement or innovation you contributed\n"
            "\\end{itemize}"
        ),
        "tags": ["experience", "internship", "template"],
    },
    "research": {
        "title": "Research template",
        "content": "**Research phase (year)**: What you studied and found\nPaper title. **Author**, Co-authors, Year.",
        "latex_content": (
            "\\item \\textbf{Research phase (year)}: What you studied and found\\\\\n"
            "Paper title. \\textbf{Author}, Co-authors, Year."
        ),
        "tags": ["research", "academic", "template"],
    },
    "skills": {
        "title": "Skills template",
        "content": "**Languages**: Language 1, Language 2\n**Tools & frameworks**: Tool 1, Tool 2",
        "latex_content": (
            "\\begin{itemize}\n"
            "  \\item \\textbf{Languages}: Language 1, Language 2\n"
            "  \\item \\textbf{Tools \\& frameworks}: Tool 1, Tool 2\n"
            "\\end{itemize}"
        ),
        "tags": ["skills", "template"],
    },
    "achievements": {
        "title": "Achievements template",
        "content": "• Award name, Awarding body (Year)\n• Another honor (Year)",
        "latex_content": (
            "\\begin{itemize}\n"
            "  \\item Award name, Awarding body (Year)\n"
            "  \\item Another honor (Year)\n"
            "\\end{itemize}"
        ),
        "tags": ["achievements", "template"],
    },
    "custom": {
        "title": "Custom section template",
        "content": "Section title\n\nFree-form content",
        "latex_content": "\\section{Section title}\n\nFree-form content",
        "tags": ["custom", "template"],
    },
}

DEFAULT_TEMPLATES = {"zh": _ZH_TEMPLATES, "en": _EN_TEMPLATES}


def get_default_templates(partition: str) -> List[Dict[str, Any]]:
    """
    Starter template field values for a partition, one per section type.

    Returns:
        List of dicts with section_type, title, content, latex_content, tags
        (fresh copies, safe to mutate)
    """
    templates = DEFAULT_TEMPLATES[validate_partition(partition)]
    return [
        {"section_type": section_type, **fields, "tags": list(fields["tags"])}
        for section_type, fields in templates.items()
    ]
