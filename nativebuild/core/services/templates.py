"""
Template renderer — per-target README and package.json.

Templates are compiled on first use and cached by name for the life of
the process.  Compilation happens under a lock, so concurrent first use
of the same name compiles it exactly once.  Rendered output is never
cached.

Rendering uses Jinja2's ``StrictUndefined``: a placeholder with no value
is an error, not an empty string.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

import jinja2

from nativebuild.core.errors import TemplateRenderError
from nativebuild.core.models.manifest import RootManifest
from nativebuild.core.models.target import TargetDescriptor

logger = logging.getLogger(__name__)

# Templates shipped inside the package
BUILTIN_TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"


def template_context(target: TargetDescriptor, manifest: RootManifest) -> dict[str, Any]:
    """Flat placeholder namespace: manifest fields + target fields."""
    context: dict[str, Any] = manifest.model_dump()
    context.update(target.to_dict())
    context["package_name"] = target.package_name(manifest.name)
    return context


class TemplateRenderer:
    """Compile-on-miss, cache-on-hit template store.

    Templates load through a ``FileSystemLoader`` rooted at
    ``templates_dir``, so ``{% include %}`` and ``{% extends %}`` resolve
    against the same directory.
    """

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or BUILTIN_TEMPLATES_DIR
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self.templates_dir)),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self._cache: dict[str, jinja2.Template] = {}
        self._lock = threading.Lock()

    def get_template(self, name: str) -> jinja2.Template:
        """Return the compiled template, compiling it on first use."""
        with self._lock:
            template = self._cache.get(name)
            if template is None:
                template = self._compile(name)
                self._cache[name] = template
            return template

    def _compile(self, name: str) -> jinja2.Template:
        logger.debug("Compiling template %s from %s", name, self.templates_dir)
        try:
            return self._env.get_template(name)
        except jinja2.TemplateNotFound as e:
            raise TemplateRenderError(
                f"Cannot read template {self.templates_dir / name}: not found"
            ) from e
        except jinja2.TemplateSyntaxError as e:
            raise TemplateRenderError(
                f"Invalid template {e.name or name} (line {e.lineno}): {e.message}"
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateRenderError(f"Cannot read template {self.templates_dir / name}: {e}") from e

    def render(self, name: str, target: TargetDescriptor, manifest: RootManifest) -> str:
        """Render one template against one target.

        Raises:
            TemplateRenderError: On a missing/invalid template, a missing
                include, an unresolved placeholder or an expression that
                fails while rendering.
        """
        template = self.get_template(name)
        where = f"Template {name} for {target.target_suffix}"
        try:
            return template.render(template_context(target, manifest))
        except jinja2.TemplateNotFound as e:
            raise TemplateRenderError(f"{where}: included template {e.name} not found") from e
        except jinja2.TemplateSyntaxError as e:
            raise TemplateRenderError(
                f"{where}: invalid template {e.name} (line {e.lineno}): {e.message}"
            ) from e
        except jinja2.TemplateError as e:
            raise TemplateRenderError(f"{where}: {e.message}") from e
        except (TypeError, ValueError, ArithmeticError) as e:
            raise TemplateRenderError(f"{where}: {e}") from e


_renderers: dict[Path, TemplateRenderer] = {}
_renderers_lock = threading.Lock()


def default_renderer(templates_dir: Path | None = None) -> TemplateRenderer:
    """Process-wide renderer for a templates directory."""
    key = (templates_dir or BUILTIN_TEMPLATES_DIR).resolve()
    with _renderers_lock:
        renderer = _renderers.get(key)
        if renderer is None:
            renderer = _renderers[key] = TemplateRenderer(key)
        return renderer
