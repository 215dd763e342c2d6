"""HTMLExporter: write the current browser view as a standalone HTML file."""

from __future__ import annotations

import pathlib
from typing import TYPE_CHECKING

import jinja2
from markupsafe import Markup

from ..render.renderer import ViewRenderer

if TYPE_CHECKING:
    from ..api import DataTable

_TEMPLATE_DIR = pathlib.Path(__file__).parent.parent / "render" / "templates"


class HTMLExporter:
    """Export a DataTable as a standalone HTML file.

    The output is self-contained: CSS is inlined and the markup is the
    same the live browser renders. No scripts are embedded, so the page
    is a static snapshot of the current filter, sort and page.
    """

    @staticmethod
    def render_document(table: DataTable, title: str = "roster-table") -> str:
        env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
            autoescape=True,
        )
        template = env.get_template("standalone.html.j2")
        return template.render(
            title=title,
            css_source=Markup(ViewRenderer.build_css()),
            body=table.render(),
        )

    @staticmethod
    def export(
        path: str | pathlib.Path,
        table: DataTable,
        title: str = "roster-table",
    ) -> None:
        """Write a standalone HTML file.

        Parameters
        ----------
        path : str or Path
            Output file path.
        table : DataTable
            Browser whose current view is exported.
        title : str
            HTML page title.
        """
        path = pathlib.Path(path)
        path.write_text(HTMLExporter.render_document(table, title=title), encoding="utf-8")
