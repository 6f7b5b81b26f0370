"""
Inbound request validation.

Turns the raw JSON body into an ``AnalysisRequest`` or raises
``InvalidRequest``. Nothing here talks to the model.
"""
from typing import Any

from pydantic import ValidationError

from ketometer.core.config import settings
from ketometer.core.errors import InvalidRequest
from ketometer.core.logger import logger
from ketometer.models.request import AnalysisMode, AnalysisRequest, ImagePayload, InboundImage
from ketometer.services import image_service


VALID_MODES = {mode.value for mode in AnalysisMode}


def _parse_images(
    raw_images: Any,
    max_images: int,
    max_image_bytes: int,
) -> list[ImagePayload]:
    if raw_images is None:
        return []
    if not isinstance(raw_images, list):
        raise InvalidRequest("imageData must be an array")
    if len(raw_images) > max_images:
        raise InvalidRequest(f"too many images: {len(raw_images)} exceeds limit of {max_images}")

    images = []
    for index, raw in enumerate(raw_images):
        try:
            inbound = InboundImage.model_validate(raw)
        except ValidationError:
            raise InvalidRequest(f"invalid imageData[{index}]: expected {{uri, base64, type}}")

        # Mobile pickers often send the bare asset kind "image"
        media_type = inbound.type.strip().lower()
        if media_type != "image" and not media_type.startswith("image/"):
            raise InvalidRequest(f"unsupported media type for imageData[{index}]: {inbound.type}")

        try:
            data = image_service.decode_base64_image(inbound.base64)
        except ValueError as e:
            raise InvalidRequest(f"invalid imageData[{index}]: {e}")

        if len(data) > max_image_bytes:
            raise InvalidRequest(
                f"imageData[{index}] too large: {len(data) // (1024 * 1024)}MB exceeds "
                f"{max_image_bytes // (1024 * 1024)}MB limit"
            )

        try:
            image_format = image_service.verify_image(data)
        except ValueError as e:
            raise InvalidRequest(f"invalid imageData[{index}]: {e}")

        # The decoded bytes win over the declared type
        detected = image_service.media_type_for(image_format)
        if media_type == "image":
            media_type = detected or f"image/{image_format.lower()}"
        elif detected and detected != media_type:
            logger.warning(f"imageData[{index}] declared {media_type} but is {detected}")
            media_type = detected

        images.append(ImagePayload(data=data, media_type=media_type, uri=inbound.uri))
    return images


def normalize_request(
    payload: Any,
    max_images: int = settings.MAX_IMAGES,
    max_image_bytes: int = settings.MAX_IMAGE_BYTES,
) -> AnalysisRequest:
    """
    Validate an inbound payload.

    Args:
        payload: Decoded JSON body ``{inputType, content?, imageData?}``
        max_images: Upper bound on attached images
        max_image_bytes: Upper bound on each decoded image

    Returns:
        Typed analysis request

    Raises:
        InvalidRequest: If the payload is malformed or incomplete
    """
    if not isinstance(payload, dict):
        raise InvalidRequest("request body must be a JSON object")

    mode_value = payload.get("inputType")
    if not isinstance(mode_value, str) or mode_value not in VALID_MODES:
        raise InvalidRequest("missing mode")
    mode = AnalysisMode(mode_value)

    content = payload.get("content")
    if content is not None and not isinstance(content, str):
        raise InvalidRequest("content must be a string")
    content = content.strip() if content else None
    content = content or None

    if mode is AnalysisMode.TEXT:
        if not content:
            raise InvalidRequest("missing content")
        if payload.get("imageData"):
            logger.warning("Ignoring imageData on a text analysis request")
        return AnalysisRequest(mode=mode, content=content)

    images = _parse_images(payload.get("imageData"), max_images, max_image_bytes)
    if not images:
        raise InvalidRequest("missing images")

    return AnalysisRequest(mode=mode, content=content, images=images)
