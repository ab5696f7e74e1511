import logging
import os
from typing import Optional

import yaml

from apicrawl.domain.config import CrawlerConfig
from apicrawl.domain.crawl_profile import CrawlProfile
from apicrawl.exceptions import ConfigNotFoundError, ConfigurationError
from apicrawl.services.crawler_config_parser import CrawlerConfigParser

logger = logging.getLogger(__name__)


class ConfigFileStore:
    """Filesystem/YAML IO for crawl profile files.

    Responsibility: locate, read, and parse YAML files on disk.
    """

    def __init__(self, *, configs_dir: str, parser: Optional[CrawlerConfigParser] = None):
        self.configs_dir = configs_dir
        self.parser = parser or CrawlerConfigParser()

    def list_config_files(self) -> list[str]:
        if not os.path.isdir(self.configs_dir):
            return []
        return sorted(
            fname
            for fname in os.listdir(self.configs_dir)
            if fname.endswith(".yml") or fname.endswith(".yaml")
        )

    def _resolve_path(self, config_path: str) -> str:
        return config_path if os.path.isabs(config_path) else os.path.join(self.configs_dir, config_path)

    def load_yaml_dict(self, config_path: str) -> dict:
        """Return the parsed YAML mapping for `config_path`."""
        full_path = self._resolve_path(config_path)
        if not os.path.isfile(full_path):
            raise ConfigNotFoundError(config_path)
        try:
            with open(full_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Profile {config_path!r} is not valid YAML: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Profile {config_path!r} must be a YAML mapping")
        return data

    def load_profile(self, config_path: str, defaults: Optional[CrawlerConfig] = None) -> CrawlProfile:
        data = self.load_yaml_dict(config_path)
        profile = self.parser.parse(config_path=config_path, data=data, defaults=defaults)
        logger.debug("Loaded profile %s from %s", profile.name, config_path)
        return profile

    def list_profiles(self) -> list[CrawlProfile]:
        profiles = []
        for fname in self.list_config_files():
            try:
                profiles.append(self.load_profile(fname))
            except ConfigurationError as e:
                logger.warning("Skipping invalid profile %s: %s", fname, e)
        return profiles
