"""
Data models and validation for the ingredient recipe finder.
Handles configuration, input validation and reshaping of Spoonacular payloads.
"""

import os
from dataclasses import dataclass
from typing import List, Optional, Dict, Any


DEFAULT_PORT = 5000
DEFAULT_BASE_URL = "https://api.spoonacular.com"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RESULTS_PER_SOURCE = 3


class ValidationError(Exception):
    """Custom exception for validation errors."""
    def __init__(self, message: str, field: str = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


class ConfigurationError(Exception):
    """Raised when the process environment cannot produce a usable config."""
    def __init__(self, message: str, setting: str = None):
        self.message = message
        self.setting = setting
        super().__init__(self.message)


class APIError(Exception):
    """Base exception for API errors."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ExternalAPIError(APIError):
    """Exception for external API failures (Spoonacular)."""


def _read_number(env: Dict[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {raw!r}", name)
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}", name)
    return value


@dataclass(frozen=True)
class AppConfig:
    """Process-wide settings, read once at startup and never mutated."""
    spoonacular_api_key: str
    port: int = DEFAULT_PORT
    spoonacular_base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    results_per_source: int = DEFAULT_RESULTS_PER_SOURCE
    debug: bool = False

    @staticmethod
    def from_env(env: Optional[Dict[str, str]] = None) -> "AppConfig":
        """
        Build the config from environment variables.

        Args:
            env: Mapping to read from (defaults to os.environ)

        Returns:
            AppConfig with defaults applied

        Raises:
            ConfigurationError: If the API key is missing or a number is invalid
        """
        if env is None:
            env = os.environ

        api_key = (env.get("SPOONACULAR_API_KEY") or "").strip()
        if not api_key:
            raise ConfigurationError(
                "Spoonacular API key is missing! Set SPOONACULAR_API_KEY or add it to .env",
                "SPOONACULAR_API_KEY",
            )

        base_url = (env.get("SPOONACULAR_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")

        return AppConfig(
            spoonacular_api_key=api_key,
            port=_read_number(env, "PORT", DEFAULT_PORT, int),
            spoonacular_base_url=base_url,
            request_timeout=_read_number(env, "REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float),
            results_per_source=_read_number(env, "RESULTS_PER_SOURCE", DEFAULT_RESULTS_PER_SOURCE, int),
            debug=env.get("FLASK_ENV", "production") == "development",
        )


@dataclass
class RecipeSearchRequest:
    """Validated body of a recipe search request."""
    ingredients: str

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "RecipeSearchRequest":
        """
        Create a search request from the JSON body.

        The ingredients string is kept verbatim (no trimming, no splitting);
        only its presence and non-blank content are checked.

        Raises:
            ValidationError: If ingredients are missing, not a string or blank
        """
        if not isinstance(data, dict):
            raise ValidationError("Ingredients are required!", "ingredients")

        ingredients = data.get("ingredients")
        if not isinstance(ingredients, str) or not ingredients.strip():
            raise ValidationError("Ingredients are required!", "ingredients")

        return RecipeSearchRequest(ingredients=ingredients)


@dataclass
class RecipeSummary:
    """A recipe as returned to the client by the search endpoint."""
    id: Optional[int]
    title: str
    image: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "image": self.image,
        }

    @staticmethod
    def from_spoonacular(recipe_data: Any) -> Optional["RecipeSummary"]:
        """Map one search result entry; returns None for non-object entries."""
        if not isinstance(recipe_data, dict):
            return None

        return RecipeSummary(
            id=recipe_data.get("id"),
            title=recipe_data.get("title") or "",
            image=recipe_data.get("image") or "",
        )

    @staticmethod
    def list_from_spoonacular(entries: Any) -> List["RecipeSummary"]:
        if not isinstance(entries, list):
            return []
        summaries = []
        for entry in entries:
            summary = RecipeSummary.from_spoonacular(entry)
            if summary:
                summaries.append(summary)
        return summaries


@dataclass
class InstructionStep:
    """One numbered step of Spoonacular's analyzed instructions."""
    number: Any
    text: str

    def format(self) -> str:
        return f"Step {self.number}: {self.text}"

    @staticmethod
    def from_spoonacular(step_data: Any) -> Optional["InstructionStep"]:
        if not isinstance(step_data, dict):
            return None
        return InstructionStep(
            number=step_data.get("number"),
            text=step_data.get("step") or "",
        )
