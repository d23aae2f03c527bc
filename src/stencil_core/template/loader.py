"""Template source loading."""

import posixpath
from pathlib import Path

from stencil_core.errors import create_error, get_error_factory
from stencil_core.logging import get_logger

logger = get_logger("loader")


def join_relative(including: str, filename: str) -> str:
    """Name of ``filename`` relative to the directory of the template ``including``.

    E.g. ("pages/index.html", "../partials/nav.html") → "partials/nav.html"
    """
    if posixpath.isabs(filename):
        return posixpath.normpath(filename)
    directory = posixpath.dirname(including)
    return posixpath.normpath(posixpath.join(directory, filename))


class FileSystemLoader:
    """Reads template sources from a directory.

    Template names are '/'-separated paths relative to ``base_dir``;
    absolute names are used as they are.
    """

    def __init__(self, base_dir: str | Path = ".", encoding: str = "utf-8"):
        """Initialize loader.

        Args:
            base_dir: Directory relative template names resolve against
            encoding: Text encoding of template files
        """
        self.base_dir = Path(base_dir)
        self.encoding = encoding

    def resolve(self, name: str) -> Path:
        """Filesystem path for a template name."""
        path = Path(name)
        if path.is_absolute():
            return path
        return self.base_dir / path

    def get_source(self, name: str) -> str:
        """Read a template source.

        Raises:
            StencilError(TEMPLATE_NOT_FOUND): If the file does not exist
            StencilError(TEMPLATE_UNREADABLE): If it cannot be read or decoded
        """
        path = self.resolve(name)
        logger.debug("Loading template", template=name, path=str(path))
        try:
            return path.read_text(encoding=self.encoding)
        except UnicodeDecodeError as e:
            raise create_error("TEMPLATE_UNREADABLE", path=name, detail=str(e)) from e
        except OSError as e:
            raise get_error_factory().from_exception(e) from e
