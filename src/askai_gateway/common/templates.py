"""Landing page templating helpers."""
from __future__ import annotations
from pathlib import Path

DEFAULT_TEMPLATE = Path(__file__).resolve().parent.parent / "templates" / "index.html"

def load_template(path: str | Path = DEFAULT_TEMPLATE) -> str:
    """
    Load a page template file.

    Args:
        path: Path to template.
    """
    return Path(path).read_text(encoding="utf-8")

def render_page(template: str, values: dict[str, str]) -> str:
    """
    Render values into the template.

    Args:
        template: Template content containing {{KEY}} placeholders.
        values: Mapping of placeholder name to replacement text.

    Returns:
        Rendered page. Unknown placeholders are left untouched.
    """
    for key, value in values.items():
        template = template.replace("{{" + key + "}}", value)
    return template
