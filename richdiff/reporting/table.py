from typing import Any, List, Optional
from dominate import tags


def render_table_block(headers: List[str], rows: List[List[Any]], *, row_classes: Optional[List[str]] = None):
    """
    Render a generic table block. Cells may be plain values or dominate nodes.
    `row_classes`, when given, is applied per row (same length as rows).
    """
    container = tags.div(_class="table-container")

    with container:
        t = tags.table(_class="report-table")
        with t:
            with tags.thead():
                with tags.tr():
                    for h in headers:
                        tags.th(str(h))

            with tags.tbody():
                for i, r in enumerate(rows or []):
                    cells = r if isinstance(r, (list, tuple)) else [r]
                    cls = row_classes[i] if row_classes and i < len(row_classes) else None
                    with (tags.tr(_class=cls) if cls else tags.tr()):
                        for c in cells:
                            if hasattr(c, "__html__") or hasattr(c, "render"):
                                tags.td(c)
                            else:
                                tags.td("" if c is None else str(c))
    return container
