"""Keyword vocabularies used for text signal extraction.

Every list is a tuple and the container is a frozen dataclass, so a
vocabulary can be shared between extractors without copying.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class KeywordVocabulary:
    """Categorized keyword lists plus AI tool names.

    Category iteration order is the declaration order below and extraction
    results follow the term order within each tuple.
    """

    style: tuple[str, ...]
    emotion: tuple[str, ...]
    motion: tuple[str, ...]
    quality: tuple[str, ...]
    subjects: tuple[str, ...]
    environment: tuple[str, ...]
    ai_tools: tuple[str, ...]

    def categories(self) -> tuple[tuple[str, tuple[str, ...]], ...]:
        """Keyword categories in declaration order (AI tools excluded)."""
        return (
            ("style", self.style),
            ("emotion", self.emotion),
            ("motion", self.motion),
            ("quality", self.quality),
            ("subjects", self.subjects),
            ("environment", self.environment),
        )


DEFAULT_VOCABULARY = KeywordVocabulary(
    style=(
        "cinematic", "anime", "realistic", "photorealistic", "cyberpunk", "vintage",
        "noir", "minimalist", "surreal", "abstract", "fantasy", "sci-fi", "gothic",
        "retro", "futuristic", "dreamlike", "ethereal", "dramatic", "moody",
        "3d render", "digital art", "oil painting", "watercolor", "sketch",
        "illustration", "concept art", "pixel art", "vaporwave", "synthwave",
        "steampunk", "art nouveau", "baroque", "impressionist", "pop art",
        "glitch art", "neon", "pastel", "monochrome", "high contrast",
        "low poly", "isometric", "flat design", "brutalist", "kawaii",
    ),
    emotion=(
        "sad", "happy", "nostalgic", "dark", "melancholic", "joyful", "peaceful",
        "anxious", "hopeful", "lonely", "romantic", "mysterious", "eerie",
        "calm", "energetic", "intense", "serene", "dramatic", "whimsical",
        "haunting", "uplifting", "bittersweet", "triumphant", "contemplative",
    ),
    motion=(
        "slow motion", "slow mo", "time lapse", "timelapse", "zoom in", "zoom out",
        "pan", "tracking shot", "dolly", "crane shot", "handheld", "smooth",
        "fast motion", "reverse", "parallax", "orbit", "fly through",
        "push in", "pull out", "static", "floating", "gliding", "morphing",
        "transition", "loop", "seamless loop",
    ),
    quality=(
        "8k", "4k", "ultra hd", "high resolution", "hdr", "ultra realistic",
        "hyperrealistic", "highly detailed", "intricate detail", "sharp focus",
        "professional", "studio quality", "masterpiece", "best quality",
        "award winning", "trending", "viral", "perfect lighting", "ray tracing",
    ),
    subjects=(
        "boy", "girl", "man", "woman", "child", "robot", "android", "cyborg",
        "alien", "monster", "creature", "animal", "cat", "dog", "bird",
        "dragon", "phoenix", "unicorn", "fairy", "angel", "demon",
        "warrior", "wizard", "witch", "knight", "samurai", "ninja",
        "astronaut", "explorer", "scientist", "artist", "musician",
        "car", "spaceship", "castle", "temple", "tower", "city skyline",
    ),
    environment=(
        "rain", "snow", "forest", "city", "urban", "nature", "ocean", "beach",
        "mountain", "desert", "space", "interior", "outdoor", "night", "day",
        "sunset", "sunrise", "storm", "cloud", "sky", "street", "building",
        "underwater", "cave", "jungle", "arctic", "volcano", "ruins",
        "garden", "library", "laboratory", "throne room", "battlefield",
        "cyberpunk city", "neon lights", "abandoned", "post apocalyptic",
    ),
    ai_tools=(
        "midjourney", "stable diffusion", "dall-e", "dalle", "runway",
        "pika", "luma", "sora", "veo", "gemini", "firefly", "leonardo",
        "krea", "ideogram", "flux", "kling", "haiper", "gen-2", "gen-3",
    ),
)
