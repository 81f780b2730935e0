"""Template-based prompt text and cluster names from aggregated visual features."""

import logging
import random
from dataclasses import dataclass, field

from data_models.post import VisualFeatures

logger = logging.getLogger(__name__)

STYLE_TEMPLATES = {
    "cinematic": [
        "A cinematic shot of {subject} in {environment}, {emotion} lighting, film grain, anamorphic lens flare",
        "{subject} in {environment}, cinematic composition, dramatic {emotion} atmosphere, 35mm film look",
        "Epic cinematic scene featuring {subject}, {environment} backdrop, {motion}, movie poster quality",
    ],
    "anime": [
        "Anime illustration of {subject} in {environment}, {emotion} expression, {style} style, trending on ArtStation",
        "{subject} anime art, {environment} background, {emotion} mood, studio Ghibli inspired",
        "Japanese anime style {subject}, detailed {environment}, beautiful {emotion} scene, trending",
    ],
    "realistic": [
        "Hyperrealistic {subject} in {environment}, {emotion} atmosphere, 8K resolution, professional photography",
        "Photorealistic depiction of {subject}, {environment} setting, natural {emotion} lighting, DSLR quality",
        "Ultra realistic {subject} portrait in {environment}, {motion}, studio quality, sharp focus",
    ],
    "fantasy": [
        "Epic fantasy scene of {subject} in {environment}, {emotion} magical atmosphere, concept art",
        "{subject} in enchanted {environment}, {emotion} mystical lighting, fantasy art style",
        "Mythical {subject} surrounded by {environment}, {emotion} fantasy world, highly detailed",
    ],
    "cyberpunk": [
        "Cyberpunk {subject} in neon-lit {environment}, {emotion} dystopian atmosphere, blade runner style",
        "{subject} in futuristic {environment}, cyberpunk aesthetic, {emotion} neon glow, detailed",
        "Sci-fi cyberpunk scene with {subject}, {environment} cityscape, {emotion} tech noir",
    ],
    "default": [
        "A {style} scene of {subject} in {environment}, {emotion} atmosphere, {motion}, trending AI style",
        "{subject} captured in {environment}, {style} aesthetic, {emotion} mood, high detail",
        "Beautiful {style} artwork of {subject}, {environment} setting, {emotion} tone, professional quality",
    ],
}

QUALITY_ENHANCEMENTS = [
    "highly detailed", "intricate details", "sharp focus", "8K resolution",
    "professional quality", "masterpiece", "best quality", "trending on ArtStation",
]

LIGHTING_ENHANCEMENTS = [
    "volumetric lighting", "ray tracing", "global illumination", "dramatic lighting",
    "soft ambient light", "golden hour", "rim lighting", "studio lighting",
]

ASPECT_RATIOS = {
    "image": "1:1, square format",
    "video": "9:16, vertical format, short-form content",
}

COMMON_NEGATIVES = [
    "blurry", "low quality", "watermark", "text", "logo",
    "bad anatomy", "deformed", "disfigured", "ugly",
    "duplicate", "morbid", "mutilated", "out of frame",
]

STYLE_NEGATIVES = {
    "realistic": ["cartoon", "anime", "illustration", "drawing", "painting"],
    "anime": ["realistic", "photorealistic", "3d", "photograph"],
    "cinematic": ["amateur", "snapshot", "phone camera", "low budget"],
}

TOOL_SUFFIXES = {
    "midjourney": "--ar 9:16 --v 6 --style raw",
    "stable-diffusion": "SDXL, high resolution, detailed",
    "dalle": "digital art, high quality",
    "runway": "cinematic, smooth camera movement, professional",
    "pika": "high quality animation, smooth motion",
    "generic": "trending, high quality, professional",
}


@dataclass
class GeneratedPrompt:
    """Prompt text built for a cluster."""

    text: str
    style: str
    aspect_ratio: str
    enhanced_version: str
    keywords: list[str] = field(default_factory=list)


def _first(features: VisualFeatures, category: str) -> str | None:
    values = getattr(features, category)
    return values[0] if values else None


class PromptBuilder:
    """Fill style templates with a cluster's dominant tags."""

    def __init__(self, rng: random.Random | None = None):
        """Initialize builder.

        Args:
            rng: Random source for template and enhancement choice
        """
        self.rng = rng or random.Random()

    def generate_prompt(self, features: VisualFeatures, media_type: str = "image") -> GeneratedPrompt:
        """Generate a prompt from aggregated visual features.

        Args:
            features: Cluster visual features (top tags first)
            media_type: "image" or "video", selects the aspect ratio

        Returns:
            GeneratedPrompt; ``enhanced_version`` is what gets stored
        """
        style = _first(features, "style") or "default"
        template = self.rng.choice(STYLE_TEMPLATES.get(style, STYLE_TEMPLATES["default"]))

        text = template.format(
            subject=_first(features, "subjects") or "a subject",
            environment=_first(features, "environment") or "a detailed environment",
            emotion=_first(features, "emotion") or "atmospheric",
            motion=_first(features, "motion") or "smooth motion",
            style=style,
        )

        keywords = [
            *features.subjects[:3],
            *features.style[:2],
            *features.emotion[:2],
            *features.environment[:2],
        ]

        aspect_ratio = ASPECT_RATIOS.get(media_type, ASPECT_RATIOS["image"])
        quality = self.rng.choice(QUALITY_ENHANCEMENTS)
        lighting = self.rng.choice(LIGHTING_ENHANCEMENTS)

        return GeneratedPrompt(
            text=text,
            style=style,
            aspect_ratio=aspect_ratio,
            enhanced_version=f"{text}, {quality}, {lighting}, {aspect_ratio}",
            keywords=list(dict.fromkeys(k for k in keywords if k)),
        )

    def generate_variations(
        self,
        features: VisualFeatures,
        media_type: str = "image",
        count: int = 3,
    ) -> list[GeneratedPrompt]:
        """Generate up to ``count`` prompts with distinct base text."""
        prompts = []
        seen = set()
        for _ in range(count):
            prompt = self.generate_prompt(features, media_type)
            if prompt.text not in seen:
                seen.add(prompt.text)
                prompts.append(prompt)
        return prompts


def generate_cluster_name(features: VisualFeatures) -> str:
    """Short human-readable cluster name, e.g. "Robot + Dark + Cyberpunk + In city"."""
    parts = [
        value
        for value in (
            _first(features, "subjects"),
            _first(features, "emotion"),
            _first(features, "style"),
        )
        if value
    ]
    environment = _first(features, "environment")
    if environment:
        parts.append(f"in {environment}")

    name = " + ".join(part[:1].upper() + part[1:] for part in parts)
    return name or "Trending Visual"


def generate_negative_prompt(style: str | None) -> str:
    """Comma-separated negative prompt for a dominant style."""
    return ", ".join(COMMON_NEGATIVES + STYLE_NEGATIVES.get(style or "", []))


def enhance_for_ai_tool(prompt: str, tool: str = "generic") -> str:
    """Append tool-specific modifiers to a prompt."""
    return f"{prompt}, {TOOL_SUFFIXES.get(tool, TOOL_SUFFIXES['generic'])}"


def generate_prompt(features: VisualFeatures, media_type: str = "image") -> GeneratedPrompt:
    """Convenience function using an unseeded builder."""
    return PromptBuilder().generate_prompt(features, media_type)
