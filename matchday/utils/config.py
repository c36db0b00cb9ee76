"""Configuration management"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv
from matchday.utils.logging import get_logger

load_dotenv()

logger = get_logger("utils.config")


class Config:
    """Configuration manager"""

    def __init__(self, config_path: str = "config/config.yaml"):
        """Initialize configuration"""
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from YAML file"""
        if self.config_path.exists():
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}
        else:
            self._config = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation"""
        keys = key.split('.')
        value = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def get_scraping_config(self) -> Dict[str, Any]:
        """Get browser scraping settings"""
        return self.get('scraping', {}) or {}

    def get_browser_executable_path(self) -> Optional[str]:
        """Get browser executable override from environment"""
        return os.getenv('BROWSER_EXECUTABLE_PATH') or os.getenv('PUPPETEER_EXECUTABLE_PATH') or None

    def get_openweather_api_key(self) -> Optional[str]:
        """Get OpenWeatherMap API key from environment"""
        return os.getenv('OPENWEATHER_API_KEY')

    def get_commentary_models(self) -> List[str]:
        """Get the ordered list of models that produce commentary"""
        models = self.get('llm.commentary_models')
        if not models:
            return ['gemini-2.0-flash', 'gpt-4o-mini', 'claude-3-5-haiku-latest']
        return list(models)

    def get_database_url(self) -> str:
        """Get database URL from environment or config"""
        return os.getenv('DATABASE_URL', 'sqlite:///data/db/matchday.db')

    def get_log_level(self) -> str:
        """Get log level"""
        return os.getenv('LOG_LEVEL', 'INFO')

    def is_debug_mode(self) -> bool:
        """Check if debug mode is enabled"""
        return os.getenv('DEBUG', '').lower() in ('true', '1', 'yes') or self.get('debug', False)


config = Config()
