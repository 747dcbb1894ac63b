from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from core.contracts.formatter import ReportFormatter
from core.contracts.models import CommitDetail, MatchResult
from utils.errors import FormatterError


def confidence_bar(confidence: int, width: int = 30) -> str:
    """Renders a 0-100 confidence as a fixed-width bar, e.g. ``[######----]``."""
    filled = round(max(0, min(100, confidence)) * width / 100)
    return "[" + "#" * filled + "-" * (width - filled) + "]"


class Jinja2Formatter(ReportFormatter):
    def __init__(
        self,
        template_dir: Optional[str] = None,
        template_name: str = "report.j2",
        bar_width: int = 30,
    ):
        if template_dir is None:
            template_dir = str(Path(__file__).parent / "templates")

        self.template_dir = template_dir
        self.template_name = template_name
        self.bar_width = bar_width
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["bar"] = lambda value: confidence_bar(value, self.bar_width)

    def format(self, detail: CommitDetail, result: MatchResult) -> str:
        try:
            template = self.env.get_template(self.template_name)
            return template.render(detail=detail, result=result).rstrip() + "\n"
        except TemplateError as e:
            raise FormatterError(f"Failed to render template {self.template_name}: {e}") from e
