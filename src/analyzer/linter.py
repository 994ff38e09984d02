"""require-mutation-invalidation: host visitation and diagnostic reporting."""
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from tree_sitter import Node, Tree

from .cache import DEFAULT_CACHE_DIR, LintCache
from .matcher import NOT_INVALIDATED, Finding, MutationCallMatcher
from .parser import LanguageParser
from .syntax import Call, Identifier, Span, lower_call_site

RULE_NAME = "require-mutation-invalidation"
MESSAGE_ID = "missingInvalidation"
MESSAGES = {
    MESSAGE_ID: "useMutation onSuccess callback must call invalidateQueries to ensure data consistency",
}

RULE_META = {
    'name': RULE_NAME,
    'type': 'problem',
    'description': "Enforce calling invalidateQueries in useMutation onSuccess callbacks",
    'messages': MESSAGES,
    'url': f"https://github.com/adelowo/eslint-plugin-react-query-keys/blob/main/docs/rules/{RULE_NAME}.md",
}

# Directories never worth linting
DEFAULT_EXCLUDED_DIRS = {
    'node_modules', '.git', 'dist', 'build', 'out', 'coverage',
    '.next', '.nuxt', '.turbo', '.cache', 'vendor', 'third_party',
    'venv', '.venv', '__pycache__', DEFAULT_CACHE_DIR,
}


@dataclass
class Diagnostic:
    """One reported call-site."""
    file_path: str
    line: int
    column: int
    end_line: int
    end_column: int
    rule: str = RULE_NAME
    message_id: str = MESSAGE_ID
    message: str = MESSAGES[MESSAGE_ID]
    reason: str = ""  # missing-options, missing-callback or not-invalidated

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Diagnostic':
        return cls(**data)


def discover_sources(paths: Iterable[Union[str, Path]],
                     exclude_dirs: Iterable[str] = ()) -> List[Path]:
    """Collect supported JS/TS files under the given paths.

    Explicit file arguments are kept when their extension is supported;
    directories are walked recursively, skipping excluded directory names.
    """
    excluded = DEFAULT_EXCLUDED_DIRS | set(exclude_dirs)
    found = set()

    for path in paths:
        path = Path(path)
        if path.is_file():
            if LanguageParser.language_for(path):
                found.add(path)
            continue

        for extension in LanguageParser.SUPPORTED_LANGUAGES:
            for file_path in path.rglob(f'*{extension}'):
                relative_parts = file_path.relative_to(path).parts[:-1]
                if any(part in excluded for part in relative_parts):
                    continue
                if file_path.is_file():
                    found.add(file_path)

    return sorted(found)


class MutationInvalidationLinter:
    """Runs the call-site matcher over every call expression of a tree."""

    def __init__(self, matcher: Optional[MutationCallMatcher] = None):
        self.matcher = matcher or MutationCallMatcher()
        self._parsers: Dict[str, LanguageParser] = {}

    def _parser_for(self, language: str) -> LanguageParser:
        if language not in self._parsers:
            self._parsers[language] = LanguageParser(language)
        return self._parsers[language]

    @staticmethod
    def _iter_call_sites(root: Node) -> Iterator[Node]:
        """Pre-order walk yielding call expressions in source order."""
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == 'call_expression':
                yield node
            stack.extend(reversed(node.named_children))

    def _names_hook(self, call_node: Node) -> bool:
        """Cheap check on the raw callee before lowering anything."""
        callee = call_node.child_by_field_name('function')
        return (callee is not None and callee.type == 'identifier'
                and callee.text.decode('utf-8', errors='replace') == self.matcher.hook_name)

    def _check_call_site(self, call_node: Node) -> Optional[Finding]:
        try:
            call = lower_call_site(call_node)
            if not isinstance(call, Call):
                return None
            return self.matcher.check(call)
        except RecursionError:
            # Options nested too deeply to lower: the invalidation cannot be shown
            return Finding(
                anchor=Call(callee=Identifier(self.matcher.hook_name), arguments=(),
                            span=Span.of(call_node)),
                reason=NOT_INVALIDATED,
            )

    def lint_tree(self, tree: Tree, file_path: str = '<source>') -> List[Diagnostic]:
        diagnostics = []
        for call_node in self._iter_call_sites(tree.root_node):
            if not self._names_hook(call_node):
                continue

            finding = self._check_call_site(call_node)
            if finding is None:
                continue

            span = finding.anchor.span
            diagnostics.append(Diagnostic(
                file_path=str(file_path),
                line=span.start_line,
                column=span.start_column,
                end_line=span.end_line,
                end_column=span.end_column,
                reason=finding.reason,
            ))
        return diagnostics

    def lint_source(self, source_code: Union[str, bytes], file_path: str = '<source>',
                    language: str = 'javascript') -> List[Diagnostic]:
        """Lint in-memory source.

        Raises:
            ValueError: If language is not supported
        """
        tree = self._parser_for(language).parse_source(source_code)
        return self.lint_tree(tree, file_path)

    def lint_file(self, file_path: Union[str, Path]) -> List[Diagnostic]:
        """Lint one file; unsupported or unreadable files yield no diagnostics."""
        language = LanguageParser.language_for(file_path)
        if language is None:
            return []

        tree = self._parser_for(language).parse_file(file_path)
        if tree is None:
            return []
        return self.lint_tree(tree, str(file_path))

    def lint_paths(self, paths: Iterable[Union[str, Path]], exclude_dirs: Iterable[str] = (),
                   cache: Optional[LintCache] = None) -> List[Diagnostic]:
        """Lint every supported file under paths, using the cache when given."""
        diagnostics = []
        for file_path in discover_sources(paths, exclude_dirs):
            diagnostics.extend(self.lint_cached(file_path, cache))
        return diagnostics

    def lint_cached(self, file_path: Path, cache: Optional[LintCache] = None) -> List[Diagnostic]:
        if cache is not None:
            cached = cache.get_diagnostics(file_path)
            if cached is not None:
                return [Diagnostic.from_dict(d) for d in cached]

        diagnostics = self.lint_file(file_path)

        if cache is not None:
            cache.set_diagnostics(file_path, [d.to_dict() for d in diagnostics])
        return diagnostics
