"""Deterministic stand-in for a vision/LLM provider.

Returns fake insight and scores derived from a hash of the image reference,
so the same image always produces the same analysis. Useful for demos and
for exercising the full pipeline without provider credentials.
"""

from .schema import CategoryScore, LLMInsight, RiskScores


def _utf16_units(value: str):
    for char in value:
        code = ord(char)
        if code > 0xFFFF:
            code -= 0x10000
            yield 0xD800 + (code >> 10)
            yield 0xDC00 + (code & 0x3FF)
        else:
            yield code


def string_hash(value: str) -> int:
    """Non-negative 32-bit ``h * 31 + c`` string hash.

    Runs over UTF-16 code units, so characters outside the BMP count as a
    surrogate pair and browser-side hashes of the same reference agree.
    """
    h = 0
    for unit in _utf16_units(value):
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


class MockVisionProvider:
    """Fake provider keyed by image reference (path, URL or data URL)."""

    DETECTED_ELEMENTS = ["geometric shapes", "color gradients", "abstract composition"]
    STYLE_INDICATORS = ["digital art style", "modern aesthetic"]
    COMMERCIAL_CONTEXT = ["suitable for digital marketing", "web-friendly format"]

    # (modulus, confidence) per category, in RiskCategory order
    SCORE_PROFILE = {
        "visual_similarity": (30, 0.5),
        "trademark": (20, 0.4),
        "copyright": (25, 0.5),
        "character": (15, 0.3),
        "training_data": (30, 0.3),
        "commercial_usage": (25, 0.5),
    }

    def analyze_image(self, image_ref: str) -> LLMInsight:
        """Return a deterministic qualitative insight for an image."""
        h = string_hash(image_ref)
        return LLMInsight(
            visual_description=(
                "A generated image featuring abstract geometric patterns with "
                "vibrant color gradients"
            ),
            detected_elements=list(self.DETECTED_ELEMENTS),
            similarity_signals=(
                ["resembles common stock photo patterns"] if h % 2 == 0
                else ["unique visual composition"]
            ),
            brand_references=["potential logo-like elements"] if h % 3 == 0 else [],
            style_indicators=list(self.STYLE_INDICATORS),
            character_likeness=["possible humanoid features"] if h % 5 == 0 else [],
            commercial_context=list(self.COMMERCIAL_CONTEXT),
        )

    def analyze_image_scores(self, image_ref: str) -> RiskScores:
        """Return deterministic numeric scores for an image."""
        h = string_hash(image_ref)
        return RiskScores(**{
            name: CategoryScore(score=h % modulus, confidence=confidence)
            for name, (modulus, confidence) in self.SCORE_PROFILE.items()
        })
