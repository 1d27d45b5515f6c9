"""Prompt builders for the text, image and vision providers."""

LOCALIZATION_SYSTEM_INSTRUCTION = """You are a multilingual experience localization engine.

CRITICAL RULES:
- ALL section titles (subtitles / headings) MUST be in the selected language.
- DO NOT use English titles unless the selected language is English.
- DO NOT reuse or translate fixed English headings.
- DO NOT output any English text when the selected language is not English.
- Titles and content must be generated together.
- Mode-specific structure must be respected.
"""

MODE_SECTIONS: dict[str, list[str]] = {
    "deep_insight": [
        "Overview",
        "Global Context",
        "Historical Significance",
        "Cultural Meaning",
        "Did You Know? (Provide a list of 3 items)",
    ],
    "3d_visualization": [
        "3D Visualization Description (Detailed visual description for reconstruction)",
        "Depth & Spatial Layers",
        "Camera Movement Guidance",
        "Key Structures to Notice",
        "Immersive Context",
    ],
    "photo_analysis": [
        "Image Description",
        "Architectural Details",
        "Materials & Texture",
        "Visible Age & Wear",
        "What This Reveals",
    ],
}

SECTIONS_OUTPUT_FORMAT = """Output format (JSON ONLY):
{{
  "language": "language_name",
  "mode": "{mode}",
  "sections": [
    {{
      "title": "localized section title",
      "content": "localized section content (string or array of strings)"
    }}
  ]
}}"""


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{index}. {item}" for index, item in enumerate(items, 1))


def metadata_prompt(place_name: str, language: str) -> str:
    return f"""Input: "{place_name}"
Language: "{language}"

Task: Extract basic metadata in the selected language.
Rules:
- Translate values to {language}.
- "placeName" should be in {language}.
- "architecturalStyle" should be in {language}.

Output JSON:
{{
  "placeName": "...",
  "location": "...",
  "timePeriod": "...",
  "whoBuiltIt": "...",
  "architecturalStyle": "..."
}}"""


def sections_prompt(place_name: str, language: str, mode: str) -> str:
    """Localized multi-section prompt for ``deep_insight`` or ``3d_visualization``."""
    return f"""Input:
1. Selected language: {language}
2. Selected mode: {mode}
3. Canonical factual information about a historical site (already known and verified): {place_name}

Task:
Generate a COMPLETE localized response for the selected mode.

Return sections:
{_numbered(MODE_SECTIONS[mode])}

{SECTIONS_OUTPUT_FORMAT.format(mode=mode)}"""


def visual_experience_prompt(place_name: str, language: str) -> str:
    return f"""You are a visual experience director for a historical knowledge system.

Input:
- Historical site: {place_name}
- Selected language: {language}

Task:
Design a visually immersive "Deep Insight" experience.

Rules:
- Do NOT describe text content.
- Describe ONLY visual behavior.
- Adapt visuals to the cultural reading style of the selected language.

Generate:
1. Section title animation style
2. Background visual texture
3. Transition behavior between sections
4. Highlight effects for key ideas
5. Reading rhythm (slow / medium / guided)

Output format (JSON ONLY):
{{
  "title_animation": "string",
  "background_visual": "string",
  "transition_style": "string",
  "highlight_effect": "string",
  "reading_rhythm": "string"
}}"""


def photo_analysis_prompt(language: str) -> str:
    return f"""Input:
1. Selected language: {language}
2. Selected mode: photo_analysis
3. Analyze the uploaded images.

Task:
Generate a COMPLETE localized response for photo analysis mode.

Return sections:
{_numbered(MODE_SECTIONS["photo_analysis"])}

{SECTIONS_OUTPUT_FORMAT.format(mode="photo_analysis")}"""


def image_prompt(place_name: str, description: str) -> str:
    return (
        f"Cinematic 3D render of {place_name}. {description}. "
        "Photorealistic, 8k resolution, detailed architecture, dramatic lighting."
    )


def image_search_query(place_name: str) -> str:
    return f"{place_name} heritage monument architecture"
