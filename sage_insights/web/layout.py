# sage_insights/web/layout.py
from pathlib import Path

from fastapi.templating import Jinja2Templates

from sage_insights.api.v1.insight_utils import format_duration

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

BARE_LAYOUT = "layout_bare.html"
CHROME_LAYOUT = "layout_chrome.html"

# sidebar entries: (label, path)
SIDEBAR_LINKS = [
    ("AI Insights", "/ai-insights"),
]


def layout_template(path: str, login_path: str = "/login") -> str:
    """Login renders unwrapped; every other route gets the top bar and sidebar."""
    if path == login_path:
        return BARE_LAYOUT
    return CHROME_LAYOUT


def get_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["duration"] = format_duration
    templates.env.globals["sidebar_links"] = SIDEBAR_LINKS
    return templates
