"""
Facet Catalog — the descriptive fragments behind every picker in the wizard.
Users pick a persona, a background, a niche and a style; we inject the text.
"""

from .exceptions import CompositionError
from .pipeline.models import SceneType

# Repeated verbatim in every persona's consistency clause
CONSISTENCY_LOCK = "same person, same appearance"

PERSONAS = {
    "indonesian_woman_fair": {
        "id": "indonesian_woman_fair",
        "name": "Woman, fair skin",
        "subject": (
            "Young Indonesian woman, fair skin (kulit sawo matang cerah), natural black hair, "
            "oval face with soft features"
        ),
        "lighting": "cinematic lighting with soft key light and subtle fill, warm color temperature",
        "quality": "4k resolution, photorealistic, high detail, professional video quality",
        "consistency": f"consistent facial features throughout, {CONSISTENCY_LOCK}",
    },
    "indonesian_woman_medium": {
        "id": "indonesian_woman_medium",
        "name": "Woman, medium tan skin",
        "subject": (
            "Young Indonesian woman, medium tan skin (kulit sawo matang), natural black hair, "
            "round face with warm expression"
        ),
        "lighting": "natural indoor lighting with soft shadows, neutral color temperature",
        "quality": "4k resolution, photorealistic, high detail, professional video quality",
        "consistency": f"consistent facial features throughout, {CONSISTENCY_LOCK}",
    },
    "indonesian_man_fair": {
        "id": "indonesian_man_fair",
        "name": "Man, fair skin",
        "subject": (
            "Young Indonesian man, fair skin, short neat black hair, clean-shaven, "
            "friendly expression"
        ),
        "lighting": "cinematic lighting with soft key light and subtle fill, warm color temperature",
        "quality": "4k resolution, photorealistic, high detail, professional video quality",
        "consistency": f"consistent facial features throughout, {CONSISTENCY_LOCK}",
    },
}

BACKGROUNDS = {
    "modern_living_room": (
        "modern Indonesian living room, minimalist decor, soft natural daylight from window, "
        "clean white walls with subtle warm accents, comfortable sofa visible in background"
    ),
    "minimalist_kitchen": (
        "bright minimalist kitchen, white cabinets with wood accents, natural light from window, "
        "clean marble countertop, indoor plants visible"
    ),
    "modern_bedroom": (
        "cozy modern bedroom, soft morning light through sheer curtains, neutral earth tones, "
        "comfortable bedding, minimalist nightstand"
    ),
    "studio_white": (
        "professional studio setup, clean white background, ring light illumination creating "
        "soft even lighting, subtle shadows"
    ),
    "outdoor_garden": (
        "lush Indonesian garden, tropical plants and flowers, golden hour sunlight filtering "
        "through leaves, natural bokeh background"
    ),
}

NICHES = {
    "herbal": {
        "product_focus": "natural organic product packaging, herbal ingredients visible, fresh and clean aesthetic",
        "expressions": "healthy radiant skin, refreshed expression, genuine satisfaction, natural glow",
        "actions": [
            "holding product gently near face",
            "reading product label with interest",
            "applying product with gentle patting motion",
            "showing before/after skin texture",
        ],
        "atmosphere": "fresh, clean, natural, wellness-focused ambiance",
        "color_grading": "natural green and earth tones, fresh and vibrant colors, clean whites",
    },
    "fashion": {
        "product_focus": "detailed fabric texture, elegant stitching visible, premium material quality",
        "expressions": "confident pose, elegant demeanor, fashionable attitude, subtle smile",
        "actions": [
            "fabric flowing with natural movement",
            "graceful walk showing outfit details",
            "turning to show garment from different angles",
            "adjusting clothing with elegant gesture",
        ],
        "atmosphere": "stylish, premium, aspirational fashion aesthetic",
        "color_grading": "rich saturated colors, high contrast, fashion editorial look",
    },
    "elektronik": {
        "product_focus": "sleek gadget design, screen illumination, premium build quality, modern technology",
        "expressions": "focused attention, impressed reaction, tech-savvy confidence, genuine interest",
        "actions": [
            "unboxing with careful attention",
            "demonstrating key feature with finger gesture",
            "showing screen display to camera",
            "comparing size with hand for scale",
        ],
        "atmosphere": "modern, sleek, premium tech aesthetic",
        "color_grading": "cool blue tones, high contrast, cinematic tech commercial look",
    },
}

SCENES = {
    SceneType.HOOK: {
        "purpose": "Grab attention in first 2 seconds",
        "duration": 4,
        "camera_work": {
            "movement": "static or subtle zoom in",
            "composition": "medium close-up, face clearly visible",
            "angle": "eye-level, slightly elevated for flattering angle",
        },
        "actions": [
            "looking directly at camera with friendly smile",
            "holding product near face, making eye contact",
            "surprised/excited expression while revealing product",
        ],
        "prompt_suffix": "engaging with viewer, direct eye contact, inviting expression",
    },
    SceneType.BENEFIT: {
        "purpose": "Show product benefits",
        "duration": 4,
        "camera_work": {
            "movement": "slow pan right or left",
            "composition": "medium shot, product clearly visible",
            "angle": "eye-level",
        },
        "actions": [
            "demonstrating product feature with hands",
            "pointing to product detail while explaining",
            "showing product from different angle",
        ],
        "prompt_suffix": "demonstrating benefit, focused on product, natural presentation",
    },
    SceneType.DEMO: {
        "purpose": "Show product in use",
        "duration": 4,
        "camera_work": {
            "movement": "close-up with subtle follow focus",
            "composition": "close-up on product interaction",
            "angle": "slightly overhead for clear view",
        },
        "actions": [
            "using product with natural movements",
            "showing application technique",
            "revealing product result",
        ],
        "prompt_suffix": "product in action, detailed view, authentic usage demonstration",
    },
    SceneType.CTA: {
        "purpose": "Call to action",
        "duration": 4,
        "camera_work": {
            "movement": "slow zoom in ending on face",
            "composition": "medium shot transitioning to close-up",
            "angle": "eye-level, friendly perspective",
        },
        "actions": [
            "gesturing toward camera with inviting motion",
            "pointing down (toward link/bio)",
            "smiling warmly while holding product",
        ],
        "prompt_suffix": "warm invitation, call to action gesture, friendly closing expression",
    },
}

STYLE_PRESETS = {
    "vlog": {
        "camera": "handheld slight natural shake, authentic vlog feel",
        "lighting": "natural ambient lighting, realistic indoor/outdoor light",
        "color": "natural color grading, warm and inviting",
        "mood": "casual, authentic, relatable content creator vibe",
    },
    "studio": {
        "camera": "locked tripod shot, smooth professional movement",
        "lighting": "professional ring light, even illumination, catch lights in eyes",
        "color": "clean neutral color grading, slightly warm skin tones",
        "mood": "professional, polished, brand commercial quality",
    },
    "cinematic": {
        "camera": "smooth dolly/gimbal movement, shallow depth of field",
        "lighting": "dramatic cinematic lighting, volumetric light effects, lens flare",
        "color": "cinematic color grading, filmic look, rich shadows",
        "mood": "premium, aspirational, high-end commercial",
    },
}


def _lookup(table: dict, catalog: str, key):
    try:
        return table[key]
    except (KeyError, TypeError):
        raise CompositionError(catalog, str(key)) from None


def get_persona(persona_id: str) -> dict:
    return _lookup(PERSONAS, "persona", persona_id)


def get_background(background_id: str) -> str:
    return _lookup(BACKGROUNDS, "background", background_id)


def get_niche(niche_id: str) -> dict:
    return _lookup(NICHES, "niche", niche_id)


def get_scene(scene_type) -> dict:
    """Scene template for a SceneType (or its string value)."""
    try:
        scene_type = SceneType(scene_type)
    except ValueError:
        raise CompositionError("scene type", str(scene_type)) from None
    return _lookup(SCENES, "scene type", scene_type)


def get_style(style_id: str) -> dict:
    return _lookup(STYLE_PRESETS, "style preset", style_id)


def list_catalog() -> dict[str, list[str]]:
    """All selectable ids per catalog, in declaration order."""
    return {
        "personas": list(PERSONAS),
        "backgrounds": list(BACKGROUNDS),
        "niches": list(NICHES),
        "scene_types": [s.value for s in SCENES],
        "styles": list(STYLE_PRESETS),
    }
