# attribution.py
import logging
from typing import Optional

from .constants import SOURCE_LOCALE
from .models import OverflowIssue
from .pseudo_locale import restore_pseudo
from .source_finder import SourceFinder
from .translation_mapper import TranslationMapper

logger = logging.getLogger(__name__)

SIMULATED_EXPANSIONS = ('pseudo', 'expansion')


class SourceAttributor:
    """Fills in static source locations for issues the page could not attribute.

    Runtime attribution (a file/line read off the element) always wins. For
    other issues the rendered text is mapped back to something the source
    tree contains: pseudo-localized text is restored, translated text is
    replaced by its English original, and the result is looked up in the
    static index.
    """

    def __init__(self, finder: Optional[SourceFinder] = None,
                 mapper: Optional[TranslationMapper] = None,
                 source_locale: str = SOURCE_LOCALE):
        self.finder = finder
        self.mapper = mapper
        self.source_locale = source_locale

    @classmethod
    def for_project(cls, project_path) -> 'SourceAttributor':
        finder = SourceFinder(project_path)
        finder.scan()
        mapper = TranslationMapper(project_path)
        mapper.load()
        return cls(finder, mapper)

    def attribute(self, issue: OverflowIssue, transform: Optional[str] = None) -> OverflowIssue:
        if issue.source_file:
            return issue

        text = issue.text_content
        if text.endswith('...'):
            text = text[:-3]
        if not text.strip():
            return issue

        changes = {}
        lookup_text = text
        if transform in SIMULATED_EXPANSIONS:
            lookup_text = restore_pseudo(text)
        elif self.mapper is not None and issue.locale != self.source_locale:
            entry = self.mapper.find_english_original(text, issue.locale)
            if entry is not None:
                changes['english_text'] = entry.english_text
                changes['translation_key'] = entry.key
                lookup_text = entry.english_text

        if self.finder is not None:
            location = self.finder.find_source(lookup_text)
            if location is None and lookup_text != text:
                location = self.finder.find_source(text)
            if location is not None:
                changes.update(
                    source_file=location.file,
                    source_line=location.line,
                    source_priority=location.priority,
                )

        if not changes:
            return issue
        return issue.with_attribution(**changes)
