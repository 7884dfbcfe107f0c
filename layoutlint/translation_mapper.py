# translation_mapper.py
import json
import re
import logging
from pathlib import Path
from typing import Dict, List, Optional

from .constants import LOCALES_DIR, SOURCE_LOCALE
from .models import TranslationEntry
from .utils import exact_then_substring

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r'\s+')
_PUNCTUATION = re.compile(r'[^\w\s]')


def normalize(text: str) -> str:
    return _PUNCTUATION.sub('', _WHITESPACE.sub(' ', text.lower())).strip()


def _read_locale_file(path: Path) -> Dict[str, str]:
    data = json.loads(path.read_text(encoding='utf-8'))
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} is not a JSON object")
    return {key: value for key, value in data.items() if isinstance(value, str)}


class TranslationMapper:
    """Maps translated text back to the English string sharing its key."""

    def __init__(self, project_path, source_locale: str = SOURCE_LOCALE):
        self.project_path = Path(project_path)
        self.locales_dir = self.project_path / LOCALES_DIR
        self.source_locale = source_locale
        self.english: Dict[str, str] = {}
        self.english_to_key: Dict[str, str] = {}
        self.reverse_maps: Dict[str, Dict[str, TranslationEntry]] = {}

    @property
    def locales(self) -> List[str]:
        return list(self.reverse_maps)

    @property
    def loaded(self) -> bool:
        return bool(self.reverse_maps)

    def load(self) -> None:
        english_path = self.locales_dir / f"{self.source_locale}.json"
        try:
            self.english = _read_locale_file(english_path)
        except (OSError, ValueError) as e:
            logger.debug(f"No usable source locale file at {english_path}: {e}")
            return

        self.english_to_key = {normalize(value): key for key, value in self.english.items()}

        for path in sorted(self.locales_dir.glob('*.json')):
            if path.name == english_path.name:
                continue
            try:
                translations = _read_locale_file(path)
            except (OSError, ValueError) as e:
                logger.debug(f"Skipping locale file {path}: {e}")
                continue

            reverse_map = {}
            for key, translated_text in translations.items():
                normalized = normalize(translated_text)
                if not normalized:
                    continue
                reverse_map[normalized] = TranslationEntry(
                    english_text=self.english.get(key) or key,
                    translated_text=translated_text,
                    key=key,
                )
            self.reverse_maps[path.stem] = reverse_map

        logger.info(f"Loaded reverse translation maps for {len(self.reverse_maps)} locale(s)")

    def find_english_original(self, text: str, locale: Optional[str] = None) -> Optional[TranslationEntry]:
        query = normalize(text)
        if not query:
            return None

        if locale and locale != self.source_locale:
            reverse_map = self.reverse_maps.get(locale)
            if reverse_map:
                entry = exact_then_substring(query, reverse_map.items(), lookup=reverse_map.get)
                if entry is not None:
                    return entry

        for reverse_map in self.reverse_maps.values():
            entry = exact_then_substring(query, reverse_map.items(), lookup=reverse_map.get)
            if entry is not None:
                return entry
        return None

    def is_english(self, text: str) -> bool:
        query = normalize(text)
        if not query:
            return False
        if query in self.english_to_key:
            return True
        for value in self.english.values():
            candidate = normalize(value)
            if candidate and (candidate in query or query in candidate):
                return True
        return False

    def get_english_for_key(self, key: str) -> Optional[str]:
        return self.english.get(key) or None
