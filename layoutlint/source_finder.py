# source_finder.py
"""Static text index: rendered text back to the source line that wrote it.

Source files are read as plain text and searched line by line with regexes.
Matches land in three maps ranked by how likely they are to be the text a
user sees:

1. ``i18n``   - arguments of ``t("...")``, ``translate("...")``, ``$t("...")``
   and ``i18n.t("...")``
2. ``jsx``    - text between ``>`` and ``<``
3. ``string`` - any other quoted literal

A lookup always prefers a higher tier, even when a lower tier holds a closer
string match.
"""
import os
import re
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .constants import SOURCE_EXTENSIONS, SKIP_DIRS, MIN_TEXT_LENGTH
from .models import SourceLocation
from .utils import normalize_text, exact_then_substring

logger = logging.getLogger(__name__)

I18N_PATTERNS = [
    re.compile(r'(?<![\w$.])t\(["\'`]([^"\'`]+)["\'`]\)'),
    re.compile(r'(?<![\w$.])translate\(["\'`]([^"\'`]+)["\'`]\)'),
    re.compile(r'\$t\(["\'`]([^"\'`]+)["\'`]\)'),
    re.compile(r'i18n\.t\(["\'`]([^"\'`]+)["\'`]\)'),
]
JSX_TEXT_PATTERN = re.compile(r'>([^<>]{3,})<')
STRING_PATTERNS = [
    re.compile(r'"([^"\\]{3,})"'),
    re.compile(r"'([^'\\]{3,})'"),
]

PRIORITIES = ('i18n', 'jsx', 'string')

TextLocationMap = Dict[str, List[SourceLocation]]


class SourceFinder:
    def __init__(self, project_root, extensions: Optional[Iterable[str]] = None,
                 skip_dirs: Optional[Iterable[str]] = None):
        self.project_root = Path(project_root)
        self.extensions = tuple(extensions if extensions is not None else SOURCE_EXTENSIONS)
        self.skip_dirs = set(skip_dirs if skip_dirs is not None else SKIP_DIRS)
        self.maps: Dict[str, TextLocationMap] = {priority: {} for priority in PRIORITIES}
        self.files_scanned = 0
        self.scanned = False

    def scan(self) -> None:
        if self.scanned:
            return
        self._scan_directory(self.project_root)
        self.scanned = True
        logger.info(
            f"Indexed {self.files_scanned} source files under {self.project_root}: "
            + ', '.join(f"{len(m)} {p}" for p, m in self.maps.items())
        )

    def find_source(self, text: str) -> Optional[SourceLocation]:
        query = normalize_text(text)
        if not query:
            return None
        for priority in PRIORITIES:
            location = self._find_in_map(query, self.maps[priority], priority)
            if location is not None:
                return location
        return None

    def _find_in_map(self, query: str, text_map: TextLocationMap, priority: str) -> Optional[SourceLocation]:
        locations = exact_then_substring(
            query,
            ((key, locs) for key, locs in text_map.items() if locs),
            lookup=lambda key: text_map.get(key) or None,
        )
        if not locations:
            return None
        first = locations[0]
        return SourceLocation(file=first.file, line=first.line, column=first.column, priority=priority)

    def _scan_directory(self, directory: Path) -> None:
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            return

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    if entry.name not in self.skip_dirs:
                        self._scan_directory(Path(entry.path))
                elif entry.is_file() and entry.name.endswith(self.extensions):
                    self._scan_file(Path(entry.path))
            except OSError as e:
                logger.debug(f"Skipping {entry.path}: {e}")

    def _scan_file(self, path: Path) -> None:
        try:
            content = path.read_text(encoding='utf-8', errors='replace')
        except OSError as e:
            logger.debug(f"Skipping unreadable file {path}: {e}")
            return

        relative = path.relative_to(self.project_root).as_posix()
        for number, line in enumerate(content.split('\n'), start=1):
            self.extract_strings(line, relative, number)
        self.files_scanned += 1

    def extract_strings(self, line: str, file: str, line_number: int) -> None:
        for pattern in I18N_PATTERNS:
            for match in pattern.finditer(line):
                self._add(self.maps['i18n'], match.group(1), file, line_number, match.start(1))

        for match in JSX_TEXT_PATTERN.finditer(line):
            text = match.group(1).strip()
            if len(text) >= MIN_TEXT_LENGTH and not text.startswith('{'):
                self._add(self.maps['jsx'], text, file, line_number, match.start(1))

        # No lookahead past the current line: a key whose colon sits on the
        # next line is indexed as a plain string.
        if 'import ' in line or 'require(' in line:
            return
        for pattern in STRING_PATTERNS:
            for match in pattern.finditer(line):
                if line[match.end():].lstrip().startswith(':'):
                    continue
                self._add(self.maps['string'], match.group(1), file, line_number, match.start(1))

    def _add(self, text_map: TextLocationMap, text: str, file: str, line: int, column: int) -> None:
        key = normalize_text(text)
        if len(key) < MIN_TEXT_LENGTH:
            return
        text_map.setdefault(key, []).append(SourceLocation(file=file, line=line, column=column + 1))
