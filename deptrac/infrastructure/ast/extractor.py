"""Builds the AST map of a set of files."""

from typing import Dict, Iterable

from deptrac.infrastructure.ast.events import PostCreateAstMapEvent, PreCreateAstMapEvent
from deptrac.infrastructure.ast.parser import FileReference, PythonAstParser
from deptrac.infrastructure.event.dispatcher import EventDispatcher
from deptrac.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)


class AstMapExtractor:
    """
    Parses every file and returns the references keyed by path.

    ``PreCreateAstMapEvent`` is dispatched before the first file is parsed
    and ``PostCreateAstMapEvent`` once all files are done, which is where the
    file cache is loaded and written.
    """

    def __init__(self, parser: PythonAstParser, dispatcher: EventDispatcher):
        self.parser = parser
        self.dispatcher = dispatcher

    def extract(self, files: Iterable[str]) -> Dict[str, FileReference]:
        files = list(files)
        self.dispatcher.dispatch(PreCreateAstMapEvent(files))

        references = {filepath: self.parser.parse_file(filepath) for filepath in files}

        self.dispatcher.dispatch(PostCreateAstMapEvent(references))
        logger.debug(f"Created AST map for {len(references)} file(s)")
        return references
