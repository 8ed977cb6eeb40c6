"""
Services: 여러 템플릿 일괄 출력.
"""

from .export import export_templates, render_template

__all__ = [
    "export_templates",
    "render_template",
]
