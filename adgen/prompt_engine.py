"""
Prompt Composition Engine.

Turns a handful of facet ids into a complete, provider-agnostic generation
request. The prompt is built from an ordered list of named fragment steps:

  subject → environment → action → product → expression → camera → style
  → grading → purpose

joined with ", ". Composition is a pure function of its inputs: no randomness,
no clock. Seeds for "regenerate" are chosen by the caller (see new_seed()).
"""

import random
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from . import facets
from .pipeline.models import (
    SCENE_ORDER,
    FacetSelection,
    GenerationRequest,
    MediaKind,
    SceneDescriptor,
    SceneType,
    StoryboardFacets,
)

logger = logging.getLogger(__name__)

SEPARATOR = ", "

NEGATIVE_PROMPT = (
    "blurry, distorted face, extra limbs, unnatural pose, overexposed, underexposed, pixelated"
)

# Vertical 9:16 for social feeds
VIDEO_ASPECT_RATIO = "9:16"
VIDEO_WIDTH = 768
VIDEO_HEIGHT = 1344

MASTER_ASPECT_RATIO = "1:1"
MASTER_SIZE = 1024

# Niche action preferred for each scene; anything else looks for a smile/gesture
SCENE_ACTION_KEYWORDS = {
    SceneType.HOOK: ("holding",),
    SceneType.BENEFIT: ("showing", "reading"),
    SceneType.DEMO: ("applying", "demonstrating"),
}
DEFAULT_ACTION_KEYWORDS = ("smile", "gesture")


@dataclass(frozen=True)
class ResolvedFacets:
    """Catalog entries for one composition, already looked up."""
    scene_type: SceneType
    persona: dict
    background: str
    niche: dict
    scene: dict
    style: dict
    product_name: str
    action_override: Optional[str] = None


def resolve(selection: FacetSelection) -> ResolvedFacets:
    """Look up every facet id. Raises CompositionError on the first unknown id."""
    return ResolvedFacets(
        scene_type=SceneType(selection.scene_type),
        persona=facets.get_persona(selection.persona),
        background=facets.get_background(selection.background),
        niche=facets.get_niche(selection.niche),
        scene=facets.get_scene(selection.scene_type),
        style=facets.get_style(selection.style),
        product_name=selection.product_name,
        action_override=selection.action_override,
    )


def pick_niche_action(niche: dict, scene_type: SceneType) -> str:
    """First niche action matching the scene keyword filter, else the niche's first action."""
    keywords = SCENE_ACTION_KEYWORDS.get(scene_type, DEFAULT_ACTION_KEYWORDS)
    for action in niche["actions"]:
        if any(word in action for word in keywords):
            return action
    return niche["actions"][0]


# ── Fragment steps ───────────────────────────────────────────────────────────

def subject_fragment(f: ResolvedFacets) -> str:
    return f"{f.persona['subject']}, {f.persona['consistency']}"


def environment_fragment(f: ResolvedFacets) -> str:
    return f"in {f.background}"


def action_fragment(f: ResolvedFacets) -> str:
    action = f.action_override or f.scene["actions"][0]
    return f"{action}, {pick_niche_action(f.niche, f.scene_type)}"


def product_fragment(f: ResolvedFacets) -> str:
    return f"holding {f.product_name}, {f.niche['product_focus']}"


def expression_fragment(f: ResolvedFacets) -> str:
    return f"{f.niche['expressions']}, {f.niche['atmosphere']}"


def camera_fragment(f: ResolvedFacets) -> str:
    cam = f.scene["camera_work"]
    return f"{cam['movement']}, {cam['composition']}, {cam['angle']}"


def style_fragment(f: ResolvedFacets) -> str:
    return f"{f.style['camera']}, {f.style['lighting']}"


def grading_fragment(f: ResolvedFacets) -> str:
    return f"{f.niche['color_grading']}, {f.persona['lighting']}, {f.persona['quality']}"


def purpose_fragment(f: ResolvedFacets) -> str:
    return f.scene["prompt_suffix"]


PROMPT_STEPS: tuple[tuple[str, Callable[[ResolvedFacets], str]], ...] = (
    ("subject", subject_fragment),
    ("environment", environment_fragment),
    ("action", action_fragment),
    ("product", product_fragment),
    ("expression", expression_fragment),
    ("camera", camera_fragment),
    ("style", style_fragment),
    ("grading", grading_fragment),
    ("purpose", purpose_fragment),
)


def build_prompt(resolved: ResolvedFacets) -> str:
    return SEPARATOR.join(step(resolved) for _, step in PROMPT_STEPS)


# ── Public API ───────────────────────────────────────────────────────────────

def compose(selection: FacetSelection, scene_number: Optional[int] = None) -> SceneDescriptor:
    """
    Compose one scene.

    Args:
        selection:    Facet ids, product name and optional action override.
        scene_number: Position in the storyboard; defaults to the scene type's
                      slot in HOOK, BENEFIT, DEMO, CTA.

    Returns:
        SceneDescriptor whose request carries the prompt, the shared negative
        prompt and the scene's fixed duration.

    Raises:
        CompositionError: if any facet id is not in its catalog.
    """
    resolved = resolve(selection)
    if scene_number is None:
        scene_number = SCENE_ORDER.index(resolved.scene_type) + 1

    request = GenerationRequest(
        prompt=build_prompt(resolved),
        negative_prompt=NEGATIVE_PROMPT,
        media_kind=MediaKind.VIDEO,
        aspect_ratio=VIDEO_ASPECT_RATIO,
        duration_seconds=resolved.scene["duration"],
        width=VIDEO_WIDTH,
        height=VIDEO_HEIGHT,
    )
    return SceneDescriptor(
        scene_number=scene_number,
        scene_type=resolved.scene_type,
        request=request,
    )


def build_storyboard(shared: StoryboardFacets) -> tuple[SceneDescriptor, ...]:
    """One scene per SceneType in narrative order, numbered 1..4, same cast and set."""
    scenes = tuple(
        compose(
            FacetSelection(
                persona=shared.persona,
                background=shared.background,
                niche=shared.niche,
                style=shared.style,
                product_name=shared.product_name,
                scene_type=scene_type,
            ),
            scene_number=index + 1,
        )
        for index, scene_type in enumerate(SCENE_ORDER)
    )
    logger.info(
        f"Storyboard composed: persona={shared.persona}, niche={shared.niche}, "
        f"style={shared.style}, scenes={len(scenes)}"
    )
    return scenes


def compose_master_image(
    product_name: str,
    background: str,
    style: str,
    seed: Optional[int] = None,
) -> GenerationRequest:
    """The square product shot generated before the storyboard is animated."""
    background_text = facets.get_background(background)
    facets.get_style(style)
    prompt = (
        f"Professional product photography of {product_name}, {background_text}, "
        f"{style} style, high quality, 4k, photorealistic"
    )
    return GenerationRequest(
        prompt=prompt,
        negative_prompt=NEGATIVE_PROMPT,
        media_kind=MediaKind.IMAGE,
        aspect_ratio=MASTER_ASPECT_RATIO,
        width=MASTER_SIZE,
        height=MASTER_SIZE,
        seed=seed,
    )


def new_seed() -> int:
    """Six-digit seed for an explicit regenerate."""
    return random.randint(100000, 999999)
