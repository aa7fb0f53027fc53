"""HTML rendering of filtered reference tables."""

from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.services.table_schemas import TablesResult
from app.services.text_normalizer import repair_for_display

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

EMPTY_CELL = "—"


def display_cell(value: Optional[str]) -> str:
    """Cleaned cell text, or a dash for blank cells."""
    if value is None or not str(value).strip():
        return EMPTY_CELL
    return repair_for_display(value)


class TableRenderer:
    """Renders a TablesResult as an HTML fragment."""

    def __init__(self, templates_dir: Path = TEMPLATES_DIR):
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["display"] = repair_for_display
        self.env.filters["cell"] = display_cell

    def render(self, result: TablesResult) -> str:
        template = self.env.get_template("tables/_tables.html")
        return template.render(result=result)


table_renderer = TableRenderer()
