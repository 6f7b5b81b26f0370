"""
Pydantic models for analysis results.

These models are the output contract of the service. The prompt builder
renders their field examples into the instruction text and the response
validator parses the model's JSON with them, so the two never drift apart.
"""
from typing import Annotated, Any, Literal, NamedTuple, Optional, Union
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StringConstraints


def coerce_keto_score(value: Any) -> int:
    """Accept a JSON number in [0, 100] and return it as an int."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("ketoScore must be a number")
    if not 0 <= value <= 100:
        raise ValueError("ketoScore must be between 0 and 100")
    return int(round(value))


def display_value(value: Any) -> Any:
    """Nutrition values are display strings; bare numbers are converted."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


KetoScore = Annotated[int, BeforeValidator(coerce_keto_score)]
DisplayValue = Annotated[str, BeforeValidator(display_value)]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class AnalysisModel(BaseModel):
    """Base for result models. Unknown keys are passed through to the client."""

    model_config = ConfigDict(extra="allow")


# --- Compatibility tiers ---

class CompatibilityTier(NamedTuple):
    level: str
    min_score: int
    example_score: int


COMPATIBILITY_TIERS = (
    CompatibilityTier("Highly Compatible", 75, 85),
    CompatibilityTier("Moderately Compatible", 50, 65),
    CompatibilityTier("Less Compatible", 25, 35),
    CompatibilityTier("Not Compatible", 0, 15),
)


def tier_for_score(score: int) -> CompatibilityTier:
    """Return the compatibility tier a keto score falls into."""
    for tier in COMPATIBILITY_TIERS:
        if score >= tier.min_score:
            return tier
    raise ValueError(f"Keto score out of range: {score}")


def tier_max_score(tier: CompatibilityTier) -> int:
    """Upper bound of a tier, i.e. one below the next tier up."""
    index = COMPATIBILITY_TIERS.index(tier)
    if index == 0:
        return 100
    return COMPATIBILITY_TIERS[index - 1].min_score - 1


# --- Single item (text / image) ---

class Breakdown(AnalysisModel):
    """Narrative keto breakdown of a dish."""

    summary: NonEmptyStr = Field(
        ...,
        description=(
            "Write a concise, narrative-style breakdown focusing only on what matters for keto. "
            "Structure it like: 'The base of the dish ([keto-friendly components]) is highly keto-friendly, "
            "providing [benefits]. The [moderate concern] introduces some uncertainty, as [reasoning]. "
            "The real concern, however, comes from [main keto blocker], which [impact on keto score].' "
            "Focus on the 2-3 most important factors that determine the keto score, not every ingredient."
        ),
    )


class NutritionSnapshot(AnalysisModel):
    """Display-ready nutrition estimate for one serving."""

    servingSize: Optional[DisplayValue] = Field(
        None, description="Specific serving size (e.g., 'per 100g', 'per 250ml', 'per medium bowl', 'per slice')"
    )
    calories: DisplayValue = Field(..., description="Realistic estimate with units")
    netCarbs: DisplayValue = Field(..., description="Realistic estimate with units (consider glycemic index)")
    protein: DisplayValue = Field(..., description="Realistic estimate with units")
    fat: DisplayValue = Field(..., description="Realistic estimate with units")
    fiber: DisplayValue = Field(..., description="Realistic estimate with units")
    sugar: Optional[DisplayValue] = Field(None, description="Natural vs added sugars breakdown")
    glycemicLoad: Optional[DisplayValue] = Field(None, description="Estimated glycemic impact")


class ServingAdvice(AnalysisModel):
    """One serving recommendation."""

    type: Literal["skip", "recommend", "modify"]
    text: NonEmptyStr = Field(..., description="Specific, science-based advice with reasoning")
    icon: Optional[Literal["green", "yellow", "red"]] = None
    impact: Optional[str] = Field(None, description="Expected effect on keto score")


class SingleItemAnalysis(AnalysisModel):
    """Keto report for one dish or food, produced for text and image requests."""

    dishName: NonEmptyStr = Field(..., description="Appropriate dish name")
    ketoScore: KetoScore = Field(..., examples=[85])
    scoreComment: NonEmptyStr = Field(
        ..., description="Nuanced assessment considering metabolic impact, insulin response, and keto optimization"
    )
    breakdown: Breakdown
    nutritionSnapshot: NutritionSnapshot
    metabolicAnalysis: Optional[dict[str, Any]] = Field(
        None,
        examples=[{
            "insulinImpact": "Low/Moderate/High - explain why",
            "ketoCompatibility": "How this affects ketosis",
            "satietyFactor": "How filling/satisfying this is",
            "nutrientDensity": "Overall nutritional value",
        }],
    )
    healthNotes: list[str] = Field(
        ...,
        examples=[[
            "Detailed health considerations with scientific reasoning",
            "Metabolic and hormonal impacts",
            "Nutrient bioavailability and absorption",
            "Potential inflammatory or beneficial effects",
        ]],
    )
    servingAdvice: list[ServingAdvice] = Field(
        ...,
        examples=[[{
            "type": "skip | recommend | modify",
            "text": "Specific, science-based advice with reasoning",
            "icon": "red | green | yellow",
            "impact": "Expected effect on keto score",
        }]],
    )
    educationalText: NonEmptyStr = Field(
        ...,
        description=(
            "Comprehensive educational content covering metabolic science, nutritional biochemistry, "
            "and practical keto optimization strategies specific to this food"
        ),
    )
    macroAnalysis: Optional[dict[str, Any]] = Field(
        None,
        examples=[{
            "fatRatio": "Percentage of calories from fat",
            "proteinRatio": "Percentage of calories from protein",
            "carbRatio": "Percentage of calories from carbs",
            "ketoZone": "How close to optimal 70-80% fat, 15-25% protein, 5-10% carbs",
            "macroBalance": "Assessment of macro balance for keto",
        }],
    )
    mealContext: Optional[dict[str, Any]] = Field(
        None,
        examples=[{
            "bestTiming": "Optimal time to eat this food",
            "exerciseContext": "Pre/post workout considerations",
            "fastingCompatibility": "How this fits intermittent fasting",
            "ketoPhase": "Suitable for induction, maintenance, or cycling",
        }],
    )
    optimizationTips: Optional[dict[str, Any]] = Field(
        None,
        examples=[{
            "fatBoosters": ["Ways to increase healthy fats"],
            "proteinEnhancers": ["How to optimize protein quality"],
            "carbMinimizers": ["Ways to reduce carb impact"],
            "ketoHacks": ["Specific keto optimization strategies"],
        }],
    )
    individualFactors: Optional[dict[str, Any]] = Field(
        None,
        examples=[{
            "beginnerFriendly": "Suitable for keto beginners",
            "advancedTips": "Advanced keto considerations",
            "healthConditions": "Considerations for specific health issues",
            "activityLevel": "Recommendations based on exercise level",
        }],
    )


# --- Menu ---

class MenuItemNutrition(AnalysisModel):
    calories: Optional[DisplayValue] = Field(None, description="Estimated calories")
    netCarbs: Optional[DisplayValue] = Field(None, description="Estimated net carbs")


class MenuItem(AnalysisModel):
    """One dish on a menu."""

    name: NonEmptyStr = Field(..., description="Dish name")
    ketoScore: KetoScore = Field(..., examples=[85])
    reasoning: NonEmptyStr = Field(..., description="Explanation of this dish's keto compatibility")
    nutrition: Optional[MenuItemNutrition] = None
    modifications: Optional[list[str]] = Field(
        None, examples=[["Modifications to make it more keto-friendly"]]
    )


class CompatibilitySection(AnalysisModel):
    """Menu items grouped under one compatibility tier."""

    level: NonEmptyStr = Field(..., description="Compatibility tier name")
    items: list[MenuItem]


class MenuAnalysis(AnalysisModel):
    """Categorized keto report for a restaurant menu."""

    compatibilitySections: list[CompatibilitySection]
    summary: str = Field(
        ..., description="Overall assessment of the menu's keto-friendliness and general recommendations"
    )
    tips: list[str] = Field(
        ...,
        examples=[[
            "General tips for ordering keto at this type of restaurant",
            "Common pitfalls to avoid",
            "Best practices for customization",
        ]],
    )

    @property
    def item_count(self) -> int:
        return sum(len(section.items) for section in self.compatibilitySections)


AnalysisResult = Union[SingleItemAnalysis, MenuAnalysis]


# --- Response envelopes ---

class AnalysisSuccess(BaseModel):
    """Outbound success response."""
    success: Literal[True] = True
    analysis: dict[str, Any]


class AnalysisFailure(BaseModel):
    """Outbound failure response. Always sent with HTTP 200."""
    success: Literal[False] = False
    error: str
    details: Optional[str] = None
