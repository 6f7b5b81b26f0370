"""
Mode-specific prompts for keto analysis.

The model has no schema enforcement beyond "answer with a JSON object", so
each prompt spells out the exact output shape. The shape is rendered from the
result models in ``ketometer.models.analysis``.
"""
from pydantic import BaseModel

from ketometer.models.analysis import (
    COMPATIBILITY_TIERS,
    MenuAnalysis,
    MenuItem,
    SingleItemAnalysis,
    tier_max_score,
)
from ketometer.models.request import AnalysisMode, AnalysisRequest, ImagePayload
from ketometer.services.schema_template import render_template, required_fields, to_prompt_json


class Prompt(BaseModel):
    """Instruction pair plus the images to attach."""
    system: str
    user: str
    images: list[ImagePayload] = []


# --- System messages ---

TEXT_SYSTEM_PROMPT = (
    "You are a keto nutrition expert. Analyze food items and provide detailed nutritional information, "
    "keto scores, and recommendations. You must respond with valid JSON only, no additional text or formatting."
)

IMAGE_SYSTEM_PROMPT = (
    "You are a keto nutrition expert. Analyze food images and provide detailed nutritional information, "
    "keto scores, and recommendations. You must respond with valid JSON only, no additional text or formatting."
)

MENU_SYSTEM_PROMPT = (
    "You are a keto nutrition expert and restaurant menu analyst. Analyze menu images and categorize items "
    "by keto compatibility. You must respond with valid JSON only, no additional text or formatting."
)


# --- Shared guideline blocks ---

EXPERT_INTRO = (
    "You are an expert keto nutritionist and metabolic health specialist with deep understanding of ketosis, "
    "insulin response, and nutritional biochemistry."
)

BREAKDOWN_GUIDELINES = """
Breakdown Analysis Guidelines:
- Write a SINGLE narrative paragraph that tells the keto story of this food
- Focus on the 2-3 most important factors that determine the keto score
- Structure: Start with keto-friendly base, then moderate concerns, then the main keto blockers
- DON'T list every ingredient - only mention what actually impacts the keto score
- DO explain WHY certain components help or hurt ketosis
- DO use specific ingredient names when they're the key factors
- DO consider cooking methods and their metabolic effects
- DO make it educational and actionable
- DO focus on what makes THIS food unique in terms of keto impact
- Keep it concise but informative - aim for 2-3 sentences maximum
"""

ADVANCED_GUIDELINES = """
Advanced Guidelines:
- Consider glycemic index, not just total carbs
- Evaluate insulin response and metabolic flexibility
- Assess nutrient density and bioavailability
- Consider anti-nutrients and inflammatory potential
- Factor in cooking methods and their metabolic effects
- Evaluate protein quality and amino acid profile
- Consider fat quality and omega-3/6 ratios
- Assess micronutrient content and absorption
- Consider individual metabolic variability
- Provide context for different keto approaches (strict, targeted, cyclical)
- Explain the science behind your recommendations
- Consider timing and meal context
- Factor in individual health conditions and goals
"""

VISUAL_GUIDELINES = """
Visual Analysis Guidelines:
- Identify all visible food items and ingredients
- Estimate portion sizes based on visual cues
- Analyze cooking methods (fried, grilled, steamed, etc.)
- Consider food presentation and preparation style
- Identify potential hidden carbs or sugars
- Assess protein, fat, and vegetable content
- Consider the overall meal composition
- Identify keto-friendly substitutions that could be made
- Consider the visual appeal and satiety factors
"""

MENU_GUIDELINES = """
Analysis Guidelines:
- Categorize ALL visible menu items into appropriate compatibility levels
- Consider hidden carbs, cooking methods, and preparation styles
- Provide realistic keto scores (0-100) based on actual keto impact
- Include specific modifications that can be requested
- Focus on practical advice for restaurant dining
- Consider portion sizes and typical restaurant serving practices
- Account for common restaurant ingredients (oils, seasonings, etc.)
- Provide actionable modifications that restaurants can actually accommodate
- Be realistic about what's achievable in a restaurant setting
- Consider the restaurant type and cuisine style in your analysis
"""


def _images_phrase(count: int, adjective: str = "") -> str:
    return f"{count} {adjective}image" + ("" if count == 1 else "s")


def _output_contract(template: dict, required: list[str]) -> str:
    return (
        f"{to_prompt_json(template)}\n\n"
        f"ketoScore must be an integer between 0 and 100.\n"
        f"Required fields (never omit, never null): {', '.join(required)}\n"
    )


# --- Builders ---

def build_text_prompt(request: AnalysisRequest) -> Prompt:
    """Prompt for a typed food description."""
    schema = _output_contract(render_template(SingleItemAnalysis), required_fields(SingleItemAnalysis))

    user_prompt = f"""{EXPERT_INTRO} Analyze this food with sophisticated nuance and context.

Food Description: "{request.content}"

Provide a comprehensive, nuanced analysis in JSON format. Consider multiple factors beyond just carb count:

{schema}
{ADVANCED_GUIDELINES}
{BREAKDOWN_GUIDELINES}"""

    return Prompt(system=TEXT_SYSTEM_PROMPT, user=user_prompt)


def build_image_prompt(request: AnalysisRequest) -> Prompt:
    """Prompt for one or more photos of a single dish."""
    schema = _output_contract(render_template(SingleItemAnalysis), required_fields(SingleItemAnalysis))
    note = f'Additional Description: "{request.content}"\n' if request.content else ""
    count = len(request.images)

    user_prompt = f"""{EXPERT_INTRO} Analyze the food images with sophisticated nuance and context.

{note}{_images_phrase(count)} of the food {'is' if count == 1 else 'are'} attached. Base the dish name, portion and nutrition estimates on what is visible.

Provide a comprehensive, nuanced analysis in JSON format. Consider multiple factors beyond just carb count:

{schema}
{VISUAL_GUIDELINES}
{BREAKDOWN_GUIDELINES}"""

    return Prompt(system=IMAGE_SYSTEM_PROMPT, user=user_prompt, images=request.images)


def _menu_template() -> dict:
    item = render_template(MenuItem)
    sections = []
    for tier in COMPATIBILITY_TIERS:
        sections.append({
            "level": tier.level,
            "items": [{**item, "ketoScore": tier.example_score}],
        })
    template = render_template(MenuAnalysis)
    template["compatibilitySections"] = sections
    return template


def _tier_guidelines() -> str:
    lines = ["Compatibility Levels (use exactly these level names, in this order):"]
    for tier in COMPATIBILITY_TIERS:
        lines.append(f'- "{tier.level}": ketoScore {tier.min_score}-{tier_max_score(tier)}')
    lines.append("- Include every level even if it has no items (use an empty items array)")
    return "\n".join(lines)


def build_menu_prompt(request: AnalysisRequest) -> Prompt:
    """Prompt for one or more photos of a restaurant menu."""
    schema = _output_contract(_menu_template(), required_fields(MenuAnalysis))
    menu_text = f'Menu Text: "{request.content}"\n' if request.content else ""
    count = len(request.images)

    user_prompt = f"""You are an expert keto nutritionist and restaurant menu analyst. Analyze this restaurant menu and categorize menu items by their keto compatibility.

{menu_text}The menu is provided as {_images_phrase(count, 'attached ')}; treat all pages as one menu.

Provide a comprehensive menu analysis in JSON format:

{schema}
{_tier_guidelines()}
{MENU_GUIDELINES}"""

    return Prompt(system=MENU_SYSTEM_PROMPT, user=user_prompt, images=request.images)


_BUILDERS = {
    AnalysisMode.TEXT: build_text_prompt,
    AnalysisMode.IMAGE: build_image_prompt,
    AnalysisMode.MENU: build_menu_prompt,
}


def build_prompt(request: AnalysisRequest) -> Prompt:
    """Build the prompt for a normalized request."""
    return _BUILDERS[request.mode](request)
