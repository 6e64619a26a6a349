"""
Service layer for external API calls and business logic.
Handles Spoonacular lookups, the two-source recipe search and instruction steps.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Dict, Any
from urllib.parse import quote

import requests

from app_models import (
    AppConfig, RecipeSummary, InstructionStep, ExternalAPIError
)

logger = logging.getLogger(__name__)

NO_INSTRUCTIONS_MESSAGE = "Step-by-step instructions not available."
INSTRUCTIONS_FAILED_MESSAGE = "Failed to fetch instructions."


class SpoonacularService:
    """Handle all Spoonacular API calls."""

    def __init__(self, config: AppConfig, session: requests.Session = None):
        """Initialize Spoonacular service."""
        self.api_key = config.spoonacular_api_key
        self.base_url = config.spoonacular_base_url
        self.timeout = config.request_timeout
        self.session = session or requests.Session()

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        """
        GET a Spoonacular endpoint and decode the JSON body.

        Raises:
            ExternalAPIError: On transport errors, parameters that cannot be encoded,
                non-2xx status or a body that is not JSON
        """
        url = f"{self.base_url}{path}"
        query = dict(params)
        query["apiKey"] = self.api_key

        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
            response.raise_for_status()
        except (requests.exceptions.RequestException, UnicodeError, ValueError) as e:
            raise ExternalAPIError(f"Spoonacular request to {path} failed: {str(e)}")

        try:
            return response.json()
        except ValueError as e:
            raise ExternalAPIError(f"Spoonacular returned malformed JSON for {path}: {str(e)}")

    def complex_search(self, query: str, include_ingredients: str, number: int) -> List[Dict[str, Any]]:
        """
        Search recipes by a free-text query filtered by ingredients.

        Args:
            query: Cuisine or dish keyword (e.g. "indian")
            include_ingredients: Raw ingredients string from the client
            number: Number of recipes to return

        Returns:
            The "results" array of the complexSearch response

        Raises:
            ExternalAPIError: If the API call fails or the payload has no results array
        """
        data = self._get("/recipes/complexSearch", {
            "query": query,
            "includeIngredients": include_ingredients,
            "number": number,
        })

        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise ExternalAPIError("Spoonacular complexSearch response has no results array")
        return data["results"]

    def find_by_ingredients(self, ingredients: str, number: int) -> List[Dict[str, Any]]:
        """
        Search recipes by ingredient overlap.

        Raises:
            ExternalAPIError: If the API call fails or the payload is not a list
        """
        data = self._get("/recipes/findByIngredients", {
            "ingredients": ingredients,
            "number": number,
        })

        if not isinstance(data, list):
            raise ExternalAPIError("Spoonacular findByIngredients response is not a list")
        return data

    def get_analyzed_instructions(self, recipe_id) -> List[Dict[str, Any]]:
        """
        Get the analyzed instruction groups for a recipe.

        Raises:
            ExternalAPIError: If the API call fails or the payload is not a list
        """
        path = f"/recipes/{quote(str(recipe_id), safe='')}/analyzedInstructions"
        data = self._get(path, {})

        if not isinstance(data, list):
            raise ExternalAPIError(f"Spoonacular instructions for recipe {recipe_id} are not a list")
        return data


class RecipeSearchService:
    """Best-effort fan-out over the category search and the ingredient search."""

    CATEGORY_QUERY = "indian"

    def __init__(self, spoonacular_service: SpoonacularService, results_per_source: int = 3):
        self.spoonacular = spoonacular_service
        self.results_per_source = results_per_source

    def search_indian_recipes(self, ingredients: str) -> List[RecipeSummary]:
        try:
            results = self.spoonacular.complex_search(
                self.CATEGORY_QUERY, ingredients, self.results_per_source
            )
        except ExternalAPIError as e:
            logger.error(f"Error fetching Indian recipes: {e.message}")
            return []

        recipes = RecipeSummary.list_from_spoonacular(results)
        logger.info(f"Spoonacular found {len(recipes)} Indian recipes")
        return recipes

    def search_international_recipes(self, ingredients: str) -> List[RecipeSummary]:
        try:
            results = self.spoonacular.find_by_ingredients(ingredients, self.results_per_source)
        except ExternalAPIError as e:
            logger.error(f"Error fetching international recipes: {e.message}")
            return []

        recipes = RecipeSummary.list_from_spoonacular(results)
        logger.info(f"Spoonacular found {len(recipes)} international recipes")
        return recipes

    def find_recipes(self, ingredients: str) -> List[RecipeSummary]:
        """
        Run both searches concurrently and combine them.

        Category results always come first, ingredient-match results second,
        whichever lookup finishes first. A failed source contributes nothing.

        Args:
            ingredients: Raw ingredients string from the client

        Returns:
            Combined list of RecipeSummary (possibly empty)
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            indian_future = executor.submit(self.search_indian_recipes, ingredients)
            international_future = executor.submit(self.search_international_recipes, ingredients)
            indian_recipes = indian_future.result()
            international_recipes = international_future.result()

        return indian_recipes + international_recipes


class RecipeDetailService:
    """Turn Spoonacular analyzed instructions into readable step strings."""

    def __init__(self, spoonacular_service: SpoonacularService):
        self.spoonacular = spoonacular_service

    def get_steps(self, recipe_id) -> List[str]:
        """
        Fetch the instruction steps of a recipe.

        Only the first instruction group is used; step numbers and text are
        kept exactly as Spoonacular sends them.

        Returns:
            List of "Step <N>: <text>" strings, or a one-element list holding
            a placeholder when no instructions exist or the lookup failed
        """
        try:
            groups = self.spoonacular.get_analyzed_instructions(recipe_id)
        except ExternalAPIError as e:
            logger.error(f"Error fetching recipe details for {recipe_id}: {e.message}")
            return [INSTRUCTIONS_FAILED_MESSAGE]

        if not groups:
            return [NO_INSTRUCTIONS_MESSAGE]

        first_group = groups[0]
        raw_steps = first_group.get("steps") if isinstance(first_group, dict) else None
        if not isinstance(raw_steps, list):
            logger.error(f"Instruction group for recipe {recipe_id} has no steps list")
            return [INSTRUCTIONS_FAILED_MESSAGE]

        steps = []
        for step_data in raw_steps:
            step = InstructionStep.from_spoonacular(step_data)
            if step:
                steps.append(step.format())
        return steps
