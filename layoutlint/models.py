# models.py
from dataclasses import dataclass, field, asdict, replace
from typing import Optional, List, Dict, Any


@dataclass(frozen=True)
class BoundingRect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class OverflowIssue:
    selector: str
    tag_name: str
    text_content: str
    offset_width: int
    scroll_width: int
    offset_height: int
    scroll_height: int
    overflow_direction: str  # horizontal, vertical, both
    severity: str  # error, warning, info
    locale: str
    suggestion: str = ''
    bounding_rect: Optional[BoundingRect] = None
    source_file: Optional[str] = None
    source_line: Optional[int] = None
    component_name: Optional[str] = None
    source_priority: Optional[str] = None  # i18n, jsx, string
    english_text: Optional[str] = None
    translation_key: Optional[str] = None

    @property
    def width_overflow(self) -> int:
        return self.scroll_width - self.offset_width

    @property
    def height_overflow(self) -> int:
        return self.scroll_height - self.offset_height

    def with_attribution(self, **changes) -> 'OverflowIssue':
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['width_overflow'] = self.width_overflow
        data['height_overflow'] = self.height_overflow
        return data


@dataclass(frozen=True)
class AuditResult:
    url: str
    locale: str
    timestamp: str
    issues: List[OverflowIssue] = field(default_factory=list)
    duration: int = 0
    error: Optional[str] = None

    @property
    def issue_count(self) -> int:
        return len(self.issues)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def count(self, severity: str) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'locale': self.locale,
            'timestamp': self.timestamp,
            'issue_count': self.issue_count,
            'issues': [issue.to_dict() for issue in self.issues],
            'duration': self.duration,
            'error': self.error,
        }


@dataclass(frozen=True)
class SourceLocation:
    file: str
    line: int
    column: Optional[int] = None
    priority: str = 'string'  # i18n, jsx, string


@dataclass(frozen=True)
class TranslationEntry:
    english_text: str
    translated_text: str
    key: str


@dataclass(frozen=True)
class ComponentOrigin:
    file: Optional[str] = None
    line: Optional[int] = None
    component_name: Optional[str] = None


@dataclass
class ProviderRunResult:
    success: bool
    output: str
    error: Optional[str] = None
    locales_generated: List[str] = field(default_factory=list)
    files_modified: List[str] = field(default_factory=list)
