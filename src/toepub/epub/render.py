"""Jinja2 environment for the EPUB XML templates."""

from functools import lru_cache
from importlib import resources

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

TEMPLATES_DIR = "templates"


@lru_cache(maxsize=1)
def _template_env() -> Environment:
    return Environment(
        loader=PackageLoader("toepub.epub", TEMPLATES_DIR),
        autoescape=select_autoescape(
            enabled_extensions=("xml", "xhtml", "opf"),
            default_for_string=False,
        ),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_template(template_name: str, **context: object) -> str:
    """Render a packaged template; values are XML-escaped unless marked safe."""
    return _template_env().get_template(template_name).render(**context)


def read_static(file_name: str) -> bytes:
    """Read a static file shipped next to the templates."""
    return resources.files("toepub.epub").joinpath(TEMPLATES_DIR, file_name).read_bytes()
