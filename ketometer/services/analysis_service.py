"""
Keto analysis pipeline.

Received -> Normalized -> PromptBuilt -> ModelInvoked -> Validated. Each
request runs the pipeline once; any stage may end it with an
``AnalysisError``.
"""
import asyncio
from typing import Any

from ketometer.core.logger import log_stage, preview
from ketometer.models.analysis import AnalysisResult, MenuAnalysis, tier_for_score
from ketometer.models.request import AnalysisRequest
from ketometer.services import image_service
from ketometer.services.model_invoker import ModelInvoker
from ketometer.services.normalizer import normalize_request
from ketometer.services.prompt_builder import build_prompt
from ketometer.services.response_validator import parse_analysis


class AnalysisService:
    """Stateless apart from the injected model invoker."""

    def __init__(self, invoker: ModelInvoker, max_image_dimension: int = 2048):
        self.invoker = invoker
        self.max_image_dimension = max_image_dimension

    def _prepare_images(self, request: AnalysisRequest) -> AnalysisRequest:
        return request.model_copy(update={
            "images": [
                image_service.prepare_image(img, self.max_image_dimension)
                for img in request.images
            ]
        })

    async def analyze(self, payload: Any) -> AnalysisResult:
        """
        Run one analysis request end to end.

        Args:
            payload: Decoded JSON body from the client

        Returns:
            SingleItemAnalysis for text/image requests, MenuAnalysis for menus

        Raises:
            AnalysisError: Any pipeline failure (see ketometer.core.errors)
        """
        # Base64 decoding and Pillow work are CPU-bound: keep them off the event loop
        loop = asyncio.get_running_loop()
        request = await loop.run_in_executor(None, normalize_request, payload)
        log_stage(
            "Normalized",
            f"mode={request.mode.value}, content={preview(request.content)}, images={len(request.images)}",
        )

        if request.has_images:
            request = await loop.run_in_executor(None, self._prepare_images, request)

        prompt = build_prompt(request)
        log_stage("PromptBuilt", f"{len(prompt.user)} chars")

        raw = await self.invoker.invoke(prompt)
        log_stage("ModelInvoked", f"{len(raw)} chars")

        analysis = parse_analysis(raw, request.mode)

        if isinstance(analysis, MenuAnalysis):
            log_stage(
                "Validated",
                f"{analysis.item_count} menu items in {len(analysis.compatibilitySections)} sections",
            )
        else:
            tier = tier_for_score(analysis.ketoScore)
            log_stage("Validated", f"{analysis.dishName} scored {analysis.ketoScore} ({tier.level})")
        return analysis
