# errors.py


class LayoutLintError(Exception):
    pass


class NavigationError(LayoutLintError):
    """The page never became ready for a locale pass."""

    def __init__(self, url: str, locale: str, reason: str):
        super().__init__(f"Failed to load {url} for locale {locale}: {reason}")
        self.url = url
        self.locale = locale
        self.reason = reason


class ConfigError(LayoutLintError):
    pass
