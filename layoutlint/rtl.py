# rtl.py
import logging

from playwright.async_api import Page

from .constants import RTL_LOCALES

logger = logging.getLogger(__name__)

STYLE_ID = 'layoutlint-rtl-styles'
INDICATOR_ID = 'layoutlint-rtl-indicator'

# Dashed outlines mark one-sided inline offsets that will not mirror.
RTL_STYLESHEET = """
html[dir="rtl"] body {
  direction: rtl;
  text-align: right;
}
html[dir="rtl"] [style*="text-align: left"] {
  text-align: right !important;
}
html[dir="rtl"] .flex-row,
html[dir="rtl"] [style*="flex-direction: row"] {
  flex-direction: row-reverse;
}
html[dir="rtl"] [style*="margin-left"]:not([style*="margin-right"]),
html[dir="rtl"] [style*="padding-left"]:not([style*="padding-right"]),
html[dir="rtl"] [style*="left:"]:not([style*="right:"]) {
  outline: 2px dashed #FF6B6B !important;
  outline-offset: 2px;
}
#layoutlint-rtl-indicator {
  position: fixed;
  top: 4px;
  left: 4px;
  background: #10B981;
  color: white;
  padding: 4px 8px;
  border-radius: 4px;
  font-size: 10px;
  font-family: monospace;
  z-index: 99999;
  opacity: 0.9;
  direction: ltr;
}
"""

APPLY_SCRIPT = """
({ locale, stylesheet, styleId, indicatorId }) => {
    document.documentElement.dir = 'rtl';
    document.documentElement.lang = locale;

    const styles = document.createElement('style');
    styles.id = styleId;
    styles.textContent = stylesheet;
    document.head.appendChild(styles);

    let flipped = 0;
    document.querySelectorAll('[style]').forEach((el) => {
        const style = el.style;
        if (style.marginLeft && !style.marginRight) {
            style.marginRight = style.marginLeft;
            style.marginLeft = '';
            flipped++;
        }
        if (style.paddingLeft && !style.paddingRight) {
            style.paddingRight = style.paddingLeft;
            style.paddingLeft = '';
            flipped++;
        }
        if (style.textAlign === 'left') {
            style.textAlign = 'right';
            flipped++;
        } else if (style.textAlign === 'right') {
            style.textAlign = 'left';
            flipped++;
        }
    });

    const indicator = document.createElement('div');
    indicator.id = indicatorId;
    indicator.textContent = `RTL (${locale.toUpperCase()})`;
    document.body.appendChild(indicator);
    return flipped;
}
"""


def primary_subtag(locale: str) -> str:
    return locale.lower().split('-')[0]


def is_rtl(locale: str) -> bool:
    return primary_subtag(locale) in RTL_LOCALES


async def apply_rtl(page: Page, locale: str = 'ar') -> int:
    flipped = await page.evaluate(APPLY_SCRIPT, {
        'locale': locale,
        'stylesheet': RTL_STYLESHEET,
        'styleId': STYLE_ID,
        'indicatorId': INDICATOR_ID,
    })
    logger.debug(f"RTL transform for {locale} flipped {flipped} inline style values")
    return flipped
