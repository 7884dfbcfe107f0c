# transforms.py
import logging
from typing import Optional

from playwright.async_api import Page, Error as PlaywrightError

from .constants import PSEUDO_EXPANSION_FACTOR, GERMAN_EXPANSION_FACTOR, CJK_LOCALES
from .pseudo_locale import apply_pseudo_locale
from .rtl import apply_rtl, is_rtl, primary_subtag

logger = logging.getLogger(__name__)


def transform_for(locale: str) -> Optional[str]:
    """Name of the simulated transform a locale needs, or None."""
    code = locale.lower()
    if code == 'pseudo':
        return 'pseudo'
    if is_rtl(code):
        return 'rtl'
    if primary_subtag(code) == 'de':
        return 'expansion'
    return None


async def apply_locale_transform(page: Page, locale: str) -> Optional[str]:
    """Simulate ``locale`` on the loaded page.

    Returns the name of the transform that was applied. A transform that
    fails inside the page is skipped and reported as ``None`` so detection
    can still run on whatever state the page is in.
    """
    name = transform_for(locale)
    try:
        if name == 'pseudo':
            logger.info("Applying pseudo-locale transformation...")
            await apply_pseudo_locale(page, PSEUDO_EXPANSION_FACTOR)
        elif name == 'rtl':
            logger.info(f"Applying RTL transformation for {locale}...")
            await apply_rtl(page, locale)
        elif name == 'expansion':
            logger.info("Applying German expansion simulation...")
            await apply_pseudo_locale(page, GERMAN_EXPANSION_FACTOR)
        elif primary_subtag(locale) in CJK_LOCALES:
            logger.info(f"Checking CJK rendering for {locale}...")
        else:
            logger.info(f"No transformation for locale: {locale}")
    except PlaywrightError as e:
        logger.warning(f"Skipping {name} transform for {locale}: {e}")
        return None
    return name
