"""Template Engine implementation."""

import threading
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path
from typing import Any

from stencil_core.config import EngineConfig, load_config
from stencil_core.errors import StencilError, create_error, get_error_factory
from stencil_core.logging import LogConfig, configure_logging, get_logger
from stencil_core.telemetry import instrument_compile, instrument_render

from .document import Template
from .loader import FileSystemLoader
from .registry import Registries, default_registries

logger = get_logger("engine")

STRING_TEMPLATE_NAME = "<string>"


class TemplateEngine:
    """Compile and render templates.

    Supports:
    - Output expressions: {{ user.name }}, {{ a + b * 2 }}, {{ items|join:", " }}
    - Tags: block, extends, include, if, for, comment (plus registered tags)
    - Static includes parsed with the template, deferred includes per render

    Does NOT support:
    - Autoescaping
    - Calling host functions or methods from templates
    - Streaming output
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        registries: Registries | None = None,
        loader: FileSystemLoader | None = None,
    ):
        """Initialize template engine.

        Args:
            config: Engine configuration (defaults to EngineConfig())
            registries: Tags and filters (defaults to the process-wide registries)
            loader: Template source loader (defaults to one over ``templates.base_dir``)
        """
        self.config = config or EngineConfig()
        self.registries = registries or default_registries()
        templates = self.config.templates
        self.loader = loader or FileSystemLoader(templates.base_dir, templates.encoding)
        self.max_inheritance_depth = templates.max_inheritance_depth
        self.cache_deferred_includes = templates.cache_deferred_includes

        self._deferred: dict[str, Template] = {}
        self._deferred_lock = threading.Lock()

        if self.config.logging.configure:
            configure_logging(
                LogConfig(level=self.config.logging.level, format=self.config.logging.format)
            )

    def instrument(self, operation: str, name: str) -> AbstractContextManager[Any]:
        """Span + metrics context for ``compile`` or ``render`` (no-op when disabled)."""
        if not self.config.telemetry.enabled:
            return nullcontext()
        if operation == "compile":
            return instrument_compile(name)
        return instrument_render(name)

    # -- compiling --------------------------------------------------------

    def compile(self, name: str, source: str, chain: tuple[str, ...] = ()) -> Template:
        """Compile template source.

        Args:
            name: Template name, used for error positions and relative includes
            source: Template source text
            chain: Names of templates statically loading this one

        Returns:
            Compiled Template

        Raises:
            StencilError: On any lexing, parsing or static include error
        """
        with self.instrument("compile", name):
            try:
                template = Template(name, source, self, chain)
            except StencilError as e:
                logger.error("Compile failed", template=name, code=e.code, location=e.location)
                raise
            except RecursionError as e:
                raise get_error_factory().from_exception(e, template=name) from e
        logger.debug("Template compiled", template=name, blocks=len(template.blocks))
        return template

    def from_string(self, source: str, name: str = STRING_TEMPLATE_NAME) -> Template:
        """Compile a template held in memory."""
        return self.compile(name, source)

    def from_file(self, path: str | Path) -> Template:
        """Load and compile a template file (relative paths resolve against ``base_dir``)."""
        name = Path(path).as_posix()
        return self.compile(name, self.loader.get_source(name))

    def load_template(self, name: str, chain: tuple[str, ...] = ()) -> Template:
        """Load a template referenced by another one while it is being compiled.

        Args:
            name: Template name, already resolved relative to the referencing template
            chain: Names of the templates currently being compiled, outermost first

        Returns:
            A new Template instance, private to the caller

        Raises:
            StencilError(CIRCULAR_REFERENCE): If ``name`` is already in the chain
                or the chain is too deep
        """
        if name in chain:
            raise create_error(
                "CIRCULAR_REFERENCE", path=name, chain=" -> ".join((*chain, name))
            )
        if len(chain) >= self.max_inheritance_depth:
            raise create_error(
                "CIRCULAR_REFERENCE",
                path=name,
                detail=f"Template nesting deeper than {self.max_inheritance_depth} levels",
            )
        return self.compile(name, self.loader.get_source(name), chain)

    def load_deferred(self, name: str) -> Template:
        """Load a template for a deferred include, from the cache when enabled."""
        if not self.cache_deferred_includes:
            return self.load_template(name)

        with self._deferred_lock:
            template = self._deferred.get(name)
            if template is None:
                template = self.load_template(name)
                self._deferred[name] = template
                logger.debug("Deferred include cached", template=name)
        return template

    def clear_cache(self) -> None:
        """Forget cached deferred includes."""
        with self._deferred_lock:
            self._deferred.clear()

    # -- rendering --------------------------------------------------------

    def render_string(
        self,
        source: str,
        context: dict[str, Any] | None = None,
        name: str = STRING_TEMPLATE_NAME,
    ) -> str:
        """Compile and render a template string in one step."""
        return self.from_string(source, name).render(context)

    def render_file(self, path: str | Path, context: dict[str, Any] | None = None) -> str:
        """Compile and render a template file in one step."""
        return self.from_file(path).render(context)

    # -- analysis ---------------------------------------------------------

    def validate(self, source: str, name: str = STRING_TEMPLATE_NAME) -> list[str]:
        """Validate template syntax without rendering.

        Returns list of errors (empty if valid).
        Does NOT check variable existence.

        Args:
            source: Template source text
            name: Template name used in messages

        Returns:
            List of error messages (empty if valid)
        """
        try:
            self.compile(name, source)
        except StencilError as e:
            return [str(e)]
        return []

    def extract_references(self, source: str, name: str = STRING_TEMPLATE_NAME) -> list[str]:
        """Extract all variable references from template.

        E.g., "{{ user.name }} {% if items %}" → ["user.name", "items"]

        Useful for dependency analysis.

        Args:
            source: Template source text
            name: Template name used in error messages

        Returns:
            Unique variable paths in order of first use
        """
        template = self.compile(name, source)
        return list(dict.fromkeys(template.references()))


_default_engine: TemplateEngine | None = None


def get_default_engine() -> TemplateEngine:
    """Get the engine behind the package-level helpers, creating it on first use."""
    global _default_engine  # noqa: PLW0603
    if _default_engine is None:
        _default_engine = TemplateEngine(load_config())
    return _default_engine


def reset_default_engine() -> None:
    """Drop the default engine (for testing)."""
    global _default_engine  # noqa: PLW0603
    _default_engine = None
