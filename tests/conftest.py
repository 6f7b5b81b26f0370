"""
Pytest fixtures for the Ketometer analysis service tests.
"""
import base64
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Mock environment variables before importing app
import os
os.environ.setdefault("OPENAI_API_KEY", "test-api-key")

from ketometer.main import app
from ketometer.core.limiter import limiter
from ketometer.routes.analysis import get_analysis_service
from ketometer.services.analysis_service import AnalysisService


class FakeInvoker:
    """Stands in for ModelInvoker; records prompts and replays a canned answer."""

    def __init__(self, response: str = "{}", error: Exception = None):
        self.response = response
        self.error = error
        self.prompts = []

    async def invoke(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


def make_image_base64(size=(8, 8), fmt="PNG", color="red") -> str:
    """Small real image, base64 encoded."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return base64.b64encode(buf.getvalue()).decode()


@pytest.fixture(autouse=True)
def disable_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def fake_invoker():
    return FakeInvoker()


@pytest.fixture
def client(fake_invoker):
    """Test client whose analysis service talks to the fake invoker."""
    app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(fake_invoker)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def png_base64():
    return make_image_base64()


@pytest.fixture
def image_factory():
    """Build base64 images of a given size and format."""
    return make_image_base64


@pytest.fixture
def sample_text_request():
    return {"inputType": "text", "content": "grilled chicken salad with olive oil"}


@pytest.fixture
def sample_menu_request(png_base64):
    return {
        "inputType": "menu",
        "content": "",
        "imageData": [{"uri": "file:///menu-1.png", "base64": png_base64, "type": "image/png"}],
    }


@pytest.fixture
def sample_single_item_analysis():
    """Model answer for a text or image request."""
    return {
        "dishName": "Grilled Chicken Salad",
        "ketoScore": 92,
        "scoreComment": "Lean protein and healthy fats with almost no carbs.",
        "breakdown": {
            "summary": "The base of the dish (grilled chicken and leafy greens) is highly keto-friendly. "
                       "Olive oil adds clean fat. Watch for sweet dressings."
        },
        "nutritionSnapshot": {
            "servingSize": "per medium bowl",
            "calories": "420 kcal",
            "netCarbs": "4g",
            "protein": "38g",
            "fat": "27g",
            "fiber": "3g",
        },
        "metabolicAnalysis": {"insulinImpact": "Low"},
        "healthNotes": ["High in protein", "Rich in monounsaturated fat"],
        "servingAdvice": [
            {"type": "recommend", "text": "Add avocado for more fat", "icon": "green"},
            {"type": "skip", "text": "Skip croutons", "icon": "red", "impact": "-15 points"},
        ],
        "educationalText": "Olive oil is mostly monounsaturated fat and does not raise insulin.",
    }


@pytest.fixture
def sample_menu_analysis():
    """Model answer for a menu request."""
    return {
        "compatibilitySections": [
            {
                "level": "Highly Compatible",
                "items": [
                    {
                        "name": "Grilled Salmon",
                        "ketoScore": 88,
                        "reasoning": "Fatty fish with vegetables, no starch.",
                        "nutrition": {"calories": "520", "netCarbs": "5g"},
                        "modifications": ["Ask for extra butter"],
                    }
                ],
            },
            {"level": "Moderately Compatible", "items": []},
            {
                "level": "Less Compatible",
                "items": [{"name": "Caesar Salad", "ketoScore": 40, "reasoning": "Croutons and dressing."}],
            },
            {
                "level": "Not Compatible",
                "items": [{"name": "Pasta Carbonara", "ketoScore": 10, "reasoning": "Wheat pasta."}],
            },
        ],
        "summary": "A seafood-forward menu with several keto options.",
        "tips": ["Swap fries for a side salad"],
    }
