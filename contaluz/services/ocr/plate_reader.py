"""
Rating Plate Reader using Gemini Vision

DESIGN DECISION: Rating plates (the sticker with "220V ~ 50Hz 1200W") are
read by a multimodal model rather than a classic OCR engine because:
1. Plates are tiny, skewed and often half worn off
2. We need INTERPRETED values (kW converted to W), not raw text
3. The same call can suggest a human name for the appliance

This service handles:
1. Checking the upload is an image we accept (jpeg, png, webp)
2. Decoding it with Pillow so broken files fail here, not at the API
3. Asking Gemini for power, voltage, model and a suggested name
4. Validating the answer into a PlateReading

CRITICAL: The reader never touches the tracker state. A reading only
pre-fills an appliance draft, which the user still confirms.
"""

import io
import json
from typing import Optional

import google.generativeai as genai
from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from contaluz.audit import get_logger
from contaluz.config import get_settings
from contaluz.config.settings import GeminiSettings
from contaluz.models.energy import PlateImage, PlateReading


logger = get_logger(__name__)

PLATE_READ_FAILED_MESSAGE = "Não foi possível ler a placa. Tente preencher manualmente."

# Keep uploads small enough for a single request
MAX_IMAGE_BYTES = 10 * 1024 * 1024

PLATE_PROMPT = """Analise a imagem desta placa de especificações técnicas de um eletrodoméstico.
Extraia as seguintes informações:
1. Potência (Power) em Watts (W). Procure por números seguidos de 'W' ou 'Watts'. Se estiver em 'kW', converta para 'W'.
2. Tensão (Voltage) em Volts (V). Procure por 'V', 'Volts', '110V', '220V', etc.
3. Modelo (Model). Procure por códigos alfanuméricos de modelo.
4. Nome sugerido do aparelho baseado na placa (ex: 'Micro-ondas', 'Ferro de engomar').

Responda APENAS com um objeto JSON neste formato exato:
{"power": 1200, "voltage": "220V", "model": "ABC-123", "suggestedName": "Micro-ondas"}

Use null para o que não conseguir ler. "power" é obrigatório."""


class OCRError(Exception):
    """Base exception for plate reading errors."""
    pass


class UnsupportedImageError(OCRError):
    """Upload is not an image we can send for recognition."""
    pass


class PlateReadError(OCRError):
    """Recognition failed; the user should fill the appliance in by hand."""

    def __init__(self, message: str = PLATE_READ_FAILED_MESSAGE, cause: Optional[str] = None):
        self.cause = cause
        super().__init__(message)


class PlateReaderService:
    """
    Reads appliance rating plates with Gemini.

    IMPORTANT BOUNDARIES:
    1. This service ONLY extracts data - it does NOT create appliances
    2. A plate without a readable power is a failure, not a zero
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model=None,
    ):
        self._settings = settings or get_settings().gemini
        self._model = model if model is not None else self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": 0.1,  # Reading, not writing
                "max_output_tokens": 256,
            }
        )

    def _decode_image(self, image_bytes: bytes, mime_type: str) -> Image.Image:
        try:
            PlateImage(file_size_bytes=len(image_bytes), mime_type=mime_type)
        except ValidationError as e:
            raise UnsupportedImageError(str(e))

        if not image_bytes:
            raise UnsupportedImageError("Empty image")
        if len(image_bytes) > MAX_IMAGE_BYTES:
            raise UnsupportedImageError(
                f"Image too large: {len(image_bytes)} bytes (max {MAX_IMAGE_BYTES})"
            )

        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise UnsupportedImageError(f"Could not decode image: {e}")

        if image.mode != "RGB":
            image = image.convert("RGB")
        return image

    @staticmethod
    def parse_reading(text: str) -> PlateReading:
        """Pull the JSON object out of the model's answer."""
        start = text.find("{")
        end = text.rfind("}") + 1
        if start < 0 or end <= start:
            raise ValueError("No JSON object in response")

        data = json.loads(text[start:end])
        if data.get("power") is None:
            raise ValueError("Power missing from plate reading")
        return PlateReading.model_validate(data)

    async def read_plate(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> PlateReading:
        """
        Read a rating plate photo.

        Raises:
            PlateReadError: On any failure, with a message fit for the user
        """
        try:
            image = self._decode_image(image_bytes, mime_type)
        except UnsupportedImageError as e:
            logger.warning("plate_image_rejected", error=str(e), mime_type=mime_type)
            raise PlateReadError(cause=str(e))

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._settings.max_attempts),
                wait=wait_exponential(multiplier=1, min=2, max=10),
                reraise=True,
            ):
                with attempt:
                    response = await self._model.generate_content_async([PLATE_PROMPT, image])
                    reading = self.parse_reading(response.text.strip())
        except Exception as e:
            logger.warning("plate_read_failed", error=str(e))
            raise PlateReadError(cause=str(e))

        logger.info(
            "plate_read",
            power=reading.power,
            voltage=reading.voltage,
            suggested_name=reading.suggested_name,
        )
        return reading
