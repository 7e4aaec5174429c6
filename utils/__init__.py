# Utility modules for Recipe App
from .image_handler import save_recipe_image, remove_recipe_image, allowed_file, ImageValidationError
from .sanitizer import sanitize_text, sanitize_name, sanitize_optional, sanitize_int
from .gemini import GeminiClient, InferenceError, from_config as gemini_from_config
