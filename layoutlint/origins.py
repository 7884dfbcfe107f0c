# origins.py
"""Runtime component-origin providers.

Each provider contributes one page-side function ``(el) => origin | null``
where ``origin`` is ``{file, line, componentName}``. The detector runs the
providers in order for every flagged element and keeps the first non-null
answer, so providers are listed from most to least trustworthy.
"""
import json
from typing import Any, Dict, Iterable, List, Optional

from .constants import INTERNAL_COMPONENTS
from .models import ComponentOrigin


class ComponentOriginProvider:
    name = 'base'

    def script(self) -> str:
        raise NotImplementedError


class DataSourceAttributeProvider(ComponentOriginProvider):
    """Explicit ``data-source="file:line"`` markers written at build time."""
    name = 'data-source'

    def __init__(self, attribute: str = 'data-source'):
        self.attribute = attribute

    def script(self) -> str:
        return """(el) => {
            const marker = el.getAttribute(%s);
            if (!marker) return null;
            const match = marker.match(/^(.+):(\\d+)$/);
            if (!match) return null;
            const file = match[1];
            const stem = file.split('/').pop().replace(/\\.\\w+$/, '');
            return {
                file,
                line: parseInt(match[2], 10),
                componentName: el.getAttribute('data-component') || stem,
            };
        }""" % json.dumps(self.attribute)


class ReactFiberProvider(ComponentOriginProvider):
    """Debug source records React attaches to host nodes in development builds."""
    name = 'react-fiber'

    def __init__(self, excluded_components: Optional[Iterable[str]] = None):
        if excluded_components is None:
            excluded_components = INTERNAL_COMPONENTS
        self.excluded_components = list(excluded_components)

    def script(self) -> str:
        return """(el) => {
            const excluded = %s;
            const fiberKey = Object.keys(el).find((key) =>
                key.startsWith('__reactFiber$') || key.startsWith('__reactInternalInstance$'));
            if (!fiberKey) return null;
            let fiber = el[fiberKey];
            while (fiber) {
                const source = fiber._debugSource;
                if (source && source.fileName) {
                    const type = fiber.type;
                    let componentName = null;
                    if (typeof type === 'string') {
                        componentName = type;
                    } else if (typeof type === 'function') {
                        const name = type.displayName || type.name;
                        if (name && !excluded.includes(name)) componentName = name;
                    }
                    return { file: source.fileName, line: source.lineNumber, componentName };
                }
                fiber = fiber._debugOwner || fiber.return;
            }
            return null;
        }""" % json.dumps(self.excluded_components)


class IdentifierFallbackProvider(ComponentOriginProvider):
    """Names without a file: data-component, test ids, then the element id."""
    name = 'identifier'

    def script(self) -> str:
        return """(el) => {
            const component = el.getAttribute('data-component');
            if (component) return { componentName: component };
            const testId = el.getAttribute('data-testid') || el.getAttribute('data-test-id');
            if (testId) return { componentName: testId };
            if (el.id) return { componentName: '#' + el.id };
            return null;
        }"""


def default_providers() -> List[ComponentOriginProvider]:
    return [DataSourceAttributeProvider(), ReactFiberProvider(), IdentifierFallbackProvider()]


def providers_script(providers: Iterable[ComponentOriginProvider]) -> str:
    return '[' + ',\n'.join(provider.script() for provider in providers) + ']'


def parse_origin(raw: Optional[Dict[str, Any]]) -> Optional[ComponentOrigin]:
    if not raw:
        return None
    line = raw.get('line')
    origin = ComponentOrigin(
        file=raw.get('file') or None,
        line=int(line) if line is not None else None,
        component_name=raw.get('componentName') or None,
    )
    if origin.file is None and origin.component_name is None:
        return None
    return origin
