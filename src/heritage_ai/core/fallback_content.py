"""Static payloads served when upstream providers are unavailable."""

from urllib.parse import quote

from heritage_ai.domain.models import (
    AnalysisResult,
    CompositeResult,
    PlaceMetadata,
    Section,
    ServedFrom,
    VisualExperience,
)

PLACEHOLDER_BASE_URL = "https://via.placeholder.com/1200x675/2c2419/d4af37"

# Characters left unescaped in the placeholder text
_URI_COMPONENT_SAFE = "!~*'()"


def placeholder_image_url(
    place_name: str, base_url: str = PLACEHOLDER_BASE_URL
) -> str:
    """Deterministic placeholder image for a subject."""
    return f"{base_url}?text={quote(place_name, safe=_URI_COMPONENT_SAFE)}"


def mock_composite(place_name: str, language: str) -> CompositeResult:
    return CompositeResult(
        metadata=PlaceMetadata(
            place_name=place_name,
            location="India",
            time_period="Historical",
            who_built_it="Unknown",
            architectural_style="Traditional",
        ),
        detected_language=language,
        narrative_sections=[
            Section(
                title="Overview",
                content=(
                    f"{place_name} is a significant heritage site with rich "
                    "historical importance. Due to high API demand, we're showing "
                    "limited information. Please try again later for detailed "
                    "insights."
                ),
            ),
            Section(
                title="Historical Significance",
                content="This site represents an important part of cultural heritage.",
            ),
        ],
        visual_sections=[
            Section(
                title="3D Visualization",
                content="A magnificent structure showcasing traditional architecture.",
            )
        ],
        visualization_description=f"Architectural visualization of {place_name}",
        visual_experience=VisualExperience(),
        served_from=ServedFrom.FALLBACK,
    )


def mock_analysis() -> AnalysisResult:
    return AnalysisResult(
        sections=[
            Section(
                title="Image Description",
                content=(
                    "Analysis service temporarily unavailable. Please try again later."
                ),
            ),
            Section(
                title="Note",
                content=(
                    "We're experiencing high demand. Your image will be analyzed "
                    "when the service is available."
                ),
            ),
        ],
        served_from=ServedFrom.FALLBACK,
    )
