# agripulse/services/gemini_client.py
"""
Thin async client over the Gemini API.

Both calls are single-shot: one request per user action, no retry, no
timeout. Any failure is re-raised as AdvisorUnavailableError so that screen
controllers can substitute their own fixed message.
"""
import base64
import binascii
import logging
import google.generativeai as genai
from agripulse.core.config import settings
from agripulse.models.common import Context

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTIONS: dict[Context, str] = {
    Context.MANAGEMENT: (
        "You are an expert agricultural project manager. Provide practical, step-by-step advice "
        "on farm operations, resource allocation, and seasonal planning."
    ),
    Context.MARKETING: (
        "You are a specialist in agricultural commodities and marketing. Advise farmers on how to "
        "brand their produce, find buyers, understand market trends, and maximize profit."
    ),
    Context.HYBRID: (
        "You are an agronomist specializing in crop breeding. Help farmers understand the potential "
        "of hybridizing different varieties, focusing on yield, disease resistance, and climate adaptation."
    ),
}

DIAGNOSTIC_INSTRUCTION = (
    "Analyze this image of a crop or livestock. Identify any visible signs of disease, pests, "
    "or nutritional deficiencies. Provide a diagnosis and recommended immediate actions for the farmer."
)


class AdvisorUnavailableError(Exception):
    """The remote model could not be reached or rejected the request."""


def configure_gemini(api_key: str | None = None) -> bool:
    """Configures the SDK once at startup. Returns False when no key is set."""
    api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
    if not api_key:
        logger.warning("GEMINI_API_KEY not found in settings. Advisor requests will fail.")
        return False
    genai.configure(api_key=api_key)
    logger.info(f"Gemini client configured for model: {settings.GEMINI_MODEL_NAME}")
    return True


def _response_text(response) -> str | None:
    # response.text raises ValueError when the candidate has no text parts (e.g. blocked)
    try:
        text = response.text
    except (AttributeError, ValueError) as e:
        logger.warning(f"Gemini returned no text: {e}")
        return None
    return text or None


def _strip_data_url_header(image: str) -> str:
    return image.split(",", 1)[1] if "," in image else image


async def get_advisor_response(prompt: str, context: Context) -> str | None:
    """Sends `prompt` with the system instruction for `context`; returns the reply text."""
    system_instruction = SYSTEM_INSTRUCTIONS[Context(context)]
    logger.info(f"Sending {Context(context).value} prompt to Gemini: '{prompt[:50]}...'")
    try:
        model = genai.GenerativeModel(settings.GEMINI_MODEL_NAME, system_instruction=system_instruction)
        response = await model.generate_content_async(prompt)
    except Exception as e:
        logger.error(f"Gemini advisor request failed: {e}", exc_info=True)
        raise AdvisorUnavailableError(str(e)) from e
    return _response_text(response)


async def analyze_diagnostic_image(image: str, mime_type: str) -> str | None:
    """
    Sends an image (data URL or bare base64) together with the fixed diagnostic
    instruction and returns the model's diagnosis.
    """
    try:
        image_bytes = base64.b64decode(_strip_data_url_header(image), validate=True)
    except (binascii.Error, ValueError) as e:
        raise AdvisorUnavailableError(f"Image payload could not be decoded: {e}") from e

    logger.info(f"Sending {mime_type} image ({len(image_bytes)} bytes) to Gemini for diagnosis.")
    contents = [
        {"mime_type": mime_type, "data": image_bytes},
        DIAGNOSTIC_INSTRUCTION,
    ]
    try:
        model = genai.GenerativeModel(settings.GEMINI_MODEL_NAME)
        response = await model.generate_content_async(contents)
    except Exception as e:
        logger.error(f"Gemini diagnostic request failed: {e}", exc_info=True)
        raise AdvisorUnavailableError(str(e)) from e
    return _response_text(response)
