import json
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict


class I18nProvider:
    """Provides English/Arabic translations for client-facing messages"""

    def __init__(self, translations_dir: Path = Path(__file__).parent / "translations"):
        self.translations: Dict[str, Dict[str, str]] = {}
        self.default_language = "en"
        self.supported_languages = {"en", "ar"}
        self.translations_dir = translations_dir
        self._load_translations()

    def _load_translations(self) -> None:
        if not self.translations_dir.exists():
            raise FileNotFoundError(f"Translations directory not found: {self.translations_dir}")

        for lang in self.supported_languages:
            file_path = self.translations_dir / f"{lang}.json"
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    self.translations[lang] = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in translation file {file_path}: {str(e)}")

    def get_translation(self, language: str = "en") -> Callable[..., str]:
        """Get translation function, falling back to English and then to the key itself"""
        if language not in self.supported_languages:
            language = self.default_language

        translations = self.translations.get(language, self.translations[self.default_language])

        def translate(key: str, **kwargs) -> str:
            translation = translations.get(key)
            if translation is None:
                translation = self.translations[self.default_language].get(key, key)

            if kwargs:
                try:
                    return translation.format(**kwargs)
                except KeyError:
                    return translation

            return translation

        return translate


# Singleton instance
i18n_provider = I18nProvider()


@lru_cache(maxsize=128)
def get_translation(language: str = "en") -> Callable[..., str]:
    """Get cached translation function"""
    return i18n_provider.get_translation(language)
