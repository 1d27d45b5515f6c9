"""Heritage AI orchestration service."""

__version__ = "0.1.0"
__description__ = (
    "Resilient orchestration of generative-AI and image-search providers "
    "for heritage site insights"
)
