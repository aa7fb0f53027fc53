"""
Unit tests for the HTML table renderer.
"""
from app.services.table_renderer import EMPTY_CELL, TableRenderer, display_cell, table_renderer
from app.services.table_schemas import FilteredTable, TablesResult


def make_result(**kwargs) -> TablesResult:
    defaults = {
        "ingredients": ["Kale"],
        "status": "Showing tables for: Kale",
        "tables": [
            FilteredTable(
                name="nutrition",
                title="Nutrition",
                columns=["ingredient_name", "notes"],
                rows=[{"ingredient_name": "Kale", "notes": ""}],
            ),
            FilteredTable(name="cognitive", title="Cognitive Benefits"),
        ],
    }
    defaults.update(kwargs)
    return TablesResult(**defaults)


class TestDisplayCell:
    def test_blank_cells_show_dash(self):
        assert display_cell("") == EMPTY_CELL
        assert display_cell("   ") == EMPTY_CELL
        assert display_cell(None) == EMPTY_CELL

    def test_values_repaired(self):
        assert display_cell("5â€“10 mg") == "5–10 mg"


class TestTableRenderer:
    """Tests for rendering a TablesResult to HTML."""

    def test_renders_status_and_tables(self):
        html = table_renderer.render(make_result())

        assert '<div class="status">Showing tables for: Kale</div>' in html
        assert "<h3>Nutrition</h3>" in html
        assert "<th>ingredient_name</th>" in html
        assert "<td>Kale</td>" in html
        assert f"<td>{EMPTY_CELL}</td>" in html

    def test_empty_table_placeholder(self):
        html = table_renderer.render(make_result())

        assert "<h3>Cognitive Benefits</h3>" in html
        assert "No matching rows." in html

    def test_error_only(self):
        html = table_renderer.render(TablesResult(error="Error rendering tables: boom"))

        assert '<div class="error">Error rendering tables: boom</div>' in html
        assert "<table>" not in html

    def test_no_match_detail_hides_tables(self):
        html = table_renderer.render(
            make_result(
                tables=[FilteredTable(name="nutrition", title="Nutrition")],
                status_detail="No matching rows were found for the selected ingredients.",
            )
        )

        assert "No matching rows were found" in html
        assert "<h3>" not in html

    def test_values_escaped(self):
        """Test that cell text is HTML-escaped."""
        result = make_result(
            tables=[
                FilteredTable(
                    name="nutrition",
                    title="Nutrition",
                    columns=["ingredient_name"],
                    rows=[{"ingredient_name": "<script>alert(1)</script>"}],
                )
            ]
        )

        html = table_renderer.render(result)

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_headers_and_cells_repaired(self):
        result = make_result(
            tables=[
                FilteredTable(
                    name="diet",
                    title="Diet Compatibility",
                    columns=["CafÃ© notes"],
                    rows=[{"CafÃ© notes": "Itâ€™s fine"}],
                )
            ]
        )

        html = TableRenderer().render(result)

        assert "<th>Café notes</th>" in html
        assert "<td>It’s fine</td>" in html
