# provider.py
import asyncio
import json
import os
import re
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .constants import (
    PROVIDER_CONFIG_FILES, PROVIDER_API_KEY_ENV, PROVIDER_COMMAND, SOURCE_LOCALE,
)
from .models import ProviderRunResult

logger = logging.getLogger(__name__)

_TRANSLATING = re.compile(r'Translating to (\w+)')
_WRITING = re.compile(r'Writing to (\S+)')


class TranslationProvider:
    """Port for whatever generates the per-locale files under ``locales/``."""

    def detect_config(self) -> bool:
        raise NotImplementedError

    @property
    def source_locale(self) -> str:
        return SOURCE_LOCALE

    @property
    def target_locales(self) -> List[str]:
        return []

    def enable_pseudo_locale(self) -> bool:
        raise NotImplementedError

    async def run(self, locale: Optional[str] = None, force: bool = False) -> ProviderRunResult:
        raise NotImplementedError


def parse_locales(output: str) -> List[str]:
    return _TRANSLATING.findall(output)


def parse_files(output: str) -> List[str]:
    return _WRITING.findall(output)


class LingoCliProvider(TranslationProvider):
    """Runs the Lingo.dev CLI in the project directory."""

    def __init__(self, project_path, api_key: Optional[str] = None, command: Optional[List[str]] = None):
        self.project_path = Path(project_path)
        self.api_key = api_key
        self.command = list(command or PROVIDER_COMMAND)
        self.config_path: Optional[Path] = None
        self.config: Optional[Dict[str, Any]] = None

    def detect_config(self) -> bool:
        for name in PROVIDER_CONFIG_FILES:
            path = self.project_path / name
            if not path.is_file():
                continue
            if path.suffix == '.json':
                try:
                    self.config = json.loads(path.read_text(encoding='utf-8'))
                except (OSError, ValueError) as e:
                    logger.debug(f"Ignoring unreadable provider config {path}: {e}")
                    continue
            self.config_path = path
            logger.info(f"Found translation provider config: {name}")
            return True
        logger.info("No translation provider config found")
        return False

    @property
    def source_locale(self) -> str:
        if not self.config:
            return SOURCE_LOCALE
        return self.config.get('locale', {}).get('source') or SOURCE_LOCALE

    @property
    def target_locales(self) -> List[str]:
        if not self.config:
            return []
        return list(self.config.get('locale', {}).get('targets', []))

    def enable_pseudo_locale(self) -> bool:
        if not self.config or not self.config_path:
            logger.info("No provider config to modify")
            return False

        targets = self.config.setdefault('locale', {}).setdefault('targets', [])
        if 'pseudo' in targets:
            logger.debug("Pseudo-locale already enabled")
            return True
        targets.append('pseudo')

        try:
            self.config_path.write_text(json.dumps(self.config, indent=2), encoding='utf-8')
        except OSError as e:
            logger.warning(f"Failed to update provider config: {e}")
            return False
        logger.info("Added pseudo-locale to provider config")
        return True

    def _environment(self) -> Dict[str, str]:
        env = dict(os.environ)
        if self.api_key:
            env[PROVIDER_API_KEY_ENV] = self.api_key
        return env

    async def run(self, locale: Optional[str] = None, force: bool = False) -> ProviderRunResult:
        args = self.command + ['run']
        if locale:
            args += ['--locale', locale]
        if force:
            args.append('--force')

        logger.info(f"Running: {' '.join(args)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=str(self.project_path),
                env=self._environment(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()
        except OSError as e:
            logger.warning(f"Translation provider could not start: {e}")
            return ProviderRunResult(success=False, output='', error=str(e))

        output = stdout.decode('utf-8', errors='replace')
        error_output = stderr.decode('utf-8', errors='replace')
        return ProviderRunResult(
            success=process.returncode == 0,
            output=output,
            error=error_output or None,
            locales_generated=parse_locales(output),
            files_modified=parse_files(output),
        )
