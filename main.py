"""Flask app entrypoint for the ingredient recipe finder.

This file wires up the Flask app, CORS, the Spoonacular-backed services
and the two endpoints used by the frontend. Configuration is loaded once
in main(); a missing API key stops the process before the server binds.
"""

import sys
import logging
from datetime import datetime
from flask import Flask, request, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
from app_models import (
    AppConfig,
    RecipeSearchRequest,
    ValidationError,
    ConfigurationError,
)
from app_services import SpoonacularService, RecipeSearchService, RecipeDetailService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

NO_RECIPES_MESSAGE = "No recipes found. Try different ingredients!"


def create_app(config: AppConfig, spoonacular_service=None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Immutable process configuration
        spoonacular_service: Optional Spoonacular client (tests pass a stub)

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)

    # Any origin may call the API
    CORS(app, resources={r"/*": {"origins": "*"}}, send_wildcard=True)

    if spoonacular_service is None:
        spoonacular_service = SpoonacularService(config)
    search_service = RecipeSearchService(spoonacular_service, config.results_per_source)
    detail_service = RecipeDetailService(spoonacular_service)

    start_time = datetime.now()

    @app.route("/get-recipes", methods=["POST"])
    def get_recipes():
        """
        Search recipes for the given ingredients.

        Expected JSON payload:
        {
            "ingredients": "chicken, rice, tomato"
        }

        Response (success):
        {
            "recipes": [{"id": 1, "title": "...", "image": "..."}, ...]
        }
        """
        try:
            search_request = RecipeSearchRequest.from_dict(request.get_json(silent=True))
        except ValidationError as e:
            logger.warning(f"Validation error: {e.message}")
            return jsonify({"error": e.message}), 400

        try:
            logger.info(f"Request received with ingredients: {search_request.ingredients}")
            recipes = search_service.find_recipes(search_request.ingredients)

            if not recipes:
                return jsonify({"recipes": [NO_RECIPES_MESSAGE]}), 200

            logger.info(f"Returning {len(recipes)} recipes")
            return jsonify({"recipes": [r.to_dict() for r in recipes]}), 200

        except Exception as e:
            logger.exception(f"Failed to fetch recipes: {str(e)}")
            return jsonify({"error": "Failed to fetch recipes."}), 500

    @app.route("/get-recipe-details/<recipe_id>", methods=["GET"])
    def get_recipe_details(recipe_id):
        """Return the step-by-step instructions of one recipe."""
        if not recipe_id or not recipe_id.strip():
            return jsonify({"error": "Recipe ID is required!"}), 400

        try:
            logger.info(f"Fetching details for recipe ID: {recipe_id}")
            steps = detail_service.get_steps(recipe_id)
            return jsonify({"steps": steps}), 200
        except Exception as e:
            logger.exception(f"Failed to fetch recipe details for {recipe_id}: {str(e)}")
            return jsonify({"error": "Failed to fetch recipe details."}), 500

    @app.route("/health", methods=["GET"])
    def health_check():
        """Health check endpoint for deployment monitoring."""
        uptime_seconds = (datetime.now() - start_time).total_seconds()
        return jsonify({
            "status": "ok",
            "uptime_seconds": int(uptime_seconds),
            "timestamp": datetime.now().isoformat()
        }), 200

    @app.errorhandler(404)
    def handle_not_found(e):
        """Handle 404 errors."""
        return jsonify({"error": "Endpoint not found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        """Handle 405 errors."""
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def handle_server_error(e):
        """Handle 500 errors."""
        logger.error(f"Server error: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500

    return app


def main():
    load_dotenv()

    try:
        config = AppConfig.from_env()
    except ConfigurationError as e:
        logger.error(f"ERROR: {e.message}")
        sys.exit(1)

    app = create_app(config)

    logger.info(f"Starting Flask app on port {config.port} (debug={config.debug})")
    logger.info("CORS allowed origins: * (all sites)")
    logger.info(f"Spoonacular API: {config.spoonacular_base_url} (timeout {config.request_timeout}s)")

    app.run(host="0.0.0.0", port=config.port, debug=config.debug)


if __name__ == "__main__":
    main()
