"""
Report generation module.

Writes the analysis tables and figures into a single HTML document.
"""

from datetime import datetime
from html import escape
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import logging

import pandas as pd

logger = logging.getLogger(__name__)

_CSS = """
body { font-family: Helvetica, Arial, sans-serif; margin: 2em auto; max-width: 1100px; color: #222; }
h1 { border-bottom: 2px solid #444; }
h2 { margin-top: 2em; border-bottom: 1px solid #aaa; }
table.dataframe { border-collapse: collapse; font-size: 0.85em; margin: 1em 0; }
table.dataframe th, table.dataframe td { border: 1px solid #ccc; padding: 3px 8px; text-align: right; }
table.dataframe th { background: #f0f0f0; }
img { max-width: 100%; margin: 1em 0; }
p.note { font-size: 0.85em; color: #555; }
"""


class ReportBuilder:
    """
    HTML report builder.

    Sections are appended in order and written to one document with
    figures referenced relative to the report file.
    """

    def __init__(self, title: str, float_format: str = '{:.4f}'):
        self.title = title
        self.float_format = float_format
        self.sections: List[Tuple[str, str]] = []

    def add_table(self, heading: str, frame: pd.DataFrame,
                  note: Optional[str] = None, index: bool = True):
        """Append a table section"""
        if frame is None or frame.empty:
            body = '<p class="note">No results.</p>'
        else:
            body = frame.to_html(
                index=index,
                float_format=lambda v: self.float_format.format(v),
                border=0,
                na_rep='',
            )
        if note:
            body += f'<p class="note">{escape(note)}</p>'
        self.sections.append((heading, body))

    def add_figure(self, heading: str, image: Path, report_dir: Path, caption: Optional[str] = None):
        """Append a figure section; the image path is stored relative to the report"""
        try:
            src = Path(image).relative_to(report_dir)
        except ValueError:
            src = Path(image)
        body = f'<img src="{src.as_posix()}" alt="{escape(heading)}">'
        if caption:
            body += f'<p class="note">{escape(caption)}</p>'
        self.sections.append((heading, body))

    def add_text(self, heading: str, text: str):
        self.sections.append((heading, f"<p>{escape(text)}</p>"))

    def render(self) -> str:
        parts = [
            "<!DOCTYPE html>",
            "<html><head><meta charset=\"utf-8\">",
            f"<title>{escape(self.title)}</title>",
            f"<style>{_CSS}</style></head><body>",
            f"<h1>{escape(self.title)}</h1>",
            f'<p class="note">Generated {datetime.now():%Y-%m-%d %H:%M}</p>',
        ]
        for heading, body in self.sections:
            parts.append(f"<h2>{escape(heading)}</h2>")
            parts.append(body)
        parts.append("</body></html>")
        return "\n".join(parts)

    def write(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(), encoding='utf-8')
        logger.info(f"Report written to {path} ({len(self.sections)} sections)")
        return path
