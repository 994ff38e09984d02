"""Tree-sitter parser for JavaScript and TypeScript sources."""
from pathlib import Path
from typing import Optional, Union
from tree_sitter import Language, Parser, Tree
import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript


class LanguageParser:
    """JS/TS parser using the tree-sitter v0.22+ API."""

    SUPPORTED_LANGUAGES = {
        '.js': 'javascript',
        '.jsx': 'javascript',
        '.mjs': 'javascript',
        '.cjs': 'javascript',
        '.ts': 'typescript',
        '.mts': 'typescript',
        '.cts': 'typescript',
        '.tsx': 'tsx',
    }

    def __init__(self, language: str):
        """Initialize parser for given language (javascript, typescript, tsx).

        Args:
            language: One of 'javascript', 'typescript', 'tsx'

        Raises:
            ValueError: If language is not supported
        """
        self.language = language
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        """Factory method using the tree-sitter v0.25+ API.

        The grammar packages return PyCapsules which must be wrapped with
        Language() before being handed to Parser.

        Returns:
            Configured Parser instance

        Raises:
            ValueError: If language is not supported
        """
        if self.language == 'javascript':
            lang = Language(tsjavascript.language())
        elif self.language == 'typescript':
            lang = Language(tstypescript.language_typescript())
        elif self.language == 'tsx':
            lang = Language(tstypescript.language_tsx())
        else:
            raise ValueError(f"Unsupported language: {self.language}")

        return Parser(lang)

    def parse_source(self, source_code: Union[str, bytes]) -> Tree:
        """Parse in-memory source and return the tree-sitter Tree."""
        if isinstance(source_code, str):
            source_code = source_code.encode('utf-8')
        return self.parser.parse(source_code)

    def parse_file(self, file_path: Union[str, Path]) -> Optional[Tree]:
        """Parse file and return tree-sitter Tree.

        Args:
            file_path: Path to source file to parse

        Returns:
            Parsed Tree object, or None if the file could not be read
        """
        file_path = Path(file_path)

        if not file_path.is_file():
            return None

        try:
            source_code = file_path.read_bytes()
        except OSError:
            return None
        return self.parse_source(source_code)

    @classmethod
    def language_for(cls, file_path: Union[str, Path]) -> Optional[str]:
        """Return the language name for a path, or None if unsupported."""
        return cls.SUPPORTED_LANGUAGES.get(Path(file_path).suffix.lower())
