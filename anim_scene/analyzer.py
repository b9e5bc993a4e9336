"""Deterministic scene classification.

Every classified field is resolved either by an ordered rule chain
(``first_match``) or by a small additive score. Absence of signal never
raises; it drives each field to its lowest-confidence default.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import structlog
from pydantic import ValidationError

from anim_sdk.errors import MalformedInput
from anim_sdk.models import ShotGrammar
from anim_sdk.registry import Registry
from anim_sdk.scene import Layer, Scene, SceneMetadata

from .color import extract_hex_colors, hex_to_luminance
from .rules import Classification, Rule, always, first_match

logger = structlog.get_logger(__name__)

SceneLike = Union[Scene, Mapping[str, Any]]

CONTENT_TYPES = (
    "portrait",
    "ui_screenshot",
    "typography",
    "brand_mark",
    "data_visualization",
    "moodboard",
    "product_shot",
    "notification",
    "device_mockup",
    "split_panel",
    "collage",
)
VISUAL_WEIGHTS = ("light", "dark", "mixed")
MOTION_ENERGIES = ("static", "subtle", "moderate", "high")
INTENT_TAGS = ("opening", "hero", "detail", "closing", "transition", "emotional", "informational")

ANIMATION_SCORES = {"word-reveal": 2, "scale-cascade": 6, "weight-morph": 2}

_PORTRAIT_RE = re.compile(r"portrait|face|person|headshot", re.IGNORECASE)
_BRAND_RE = re.compile(r"brand|logo", re.IGNORECASE)
_NOTIF_RE = re.compile(r"notif", re.IGNORECASE)
_DATAVIZ_RE = re.compile(r"chart|graph|dataviz|data-viz|metric", re.IGNORECASE)
_UI_RE = re.compile(r"ui|dashboard|screenshot|interface", re.IGNORECASE)


@dataclass(frozen=True)
class SceneView:
    """Precomputed facts about a scene that rule predicates read."""

    scene_id: str
    template: Optional[str]
    layout_config: Mapping[str, Any]
    fg: Tuple[Layer, ...]
    bg: Tuple[Layer, ...]
    layers: Tuple[Layer, ...]
    content_type: Optional[str] = None
    intent_tags: Tuple[str, ...] = ()

    @classmethod
    def of(cls, scene: Scene) -> "SceneView":
        return cls(
            scene_id=scene.scene_id,
            template=scene.template,
            layout_config=scene.layout.config if scene.layout else {},
            fg=tuple(scene.foreground()),
            bg=tuple(scene.background()),
            layers=tuple(scene.layers),
        )

    def fg_types(self) -> List[str]:
        return [layer.type for layer in self.fg]

    def has_video_bg(self) -> bool:
        return any(layer.type == "video" for layer in self.bg)

    def has_fg_text_or_html(self) -> bool:
        return any(layer.type in ("text", "html") for layer in self.fg)

    def image_count(self) -> int:
        return sum(1 for layer in self.layers if layer.type == "image")


# content_type predicates


def is_device_mockup(view: SceneView) -> bool:
    return view.template == "device-mockup"


def is_split_panel(view: SceneView) -> bool:
    return view.template == "split-panel"


def is_masonry_collage(view: SceneView) -> bool:
    if view.template != "masonry-grid":
        return False
    cells = [layer for layer in view.layers if (layer.slot or "").startswith("cell-")]
    return len(cells) >= 4


def is_masonry(view: SceneView) -> bool:
    return view.template == "masonry-grid"


def is_full_bleed(view: SceneView) -> bool:
    return view.template == "full-bleed"


def is_hero_center(view: SceneView) -> bool:
    return view.template == "hero-center"


def is_all_text(view: SceneView) -> bool:
    if not view.fg or any(kind != "text" for kind in view.fg_types()):
        return False
    return len(view.bg) <= 1 and all(layer.type in ("html", "video") for layer in view.bg)


def is_portrait(view: SceneView) -> bool:
    return view.has_video_bg() and view.has_fg_text_or_html() and bool(_PORTRAIT_RE.search(view.scene_id))


def _single_fg_html(view: SceneView) -> bool:
    return len(view.fg) == 1 and view.fg[0].type == "html"


def is_brand_html(view: SceneView) -> bool:
    return _single_fg_html(view) and bool(_BRAND_RE.search(view.scene_id))


def is_notification_html(view: SceneView) -> bool:
    return _single_fg_html(view) and bool(_NOTIF_RE.search(view.scene_id))


def is_data_visualization(view: SceneView) -> bool:
    return bool(view.layers) and bool(_DATAVIZ_RE.search(view.scene_id))


def is_ui_capture(view: SceneView) -> bool:
    return view.image_count() > 0 and bool(_UI_RE.search(view.scene_id))


def is_image_board(view: SceneView) -> bool:
    return view.image_count() >= 2 and not any(layer.type == "text" for layer in view.layers)


def is_video_with_overlay(view: SceneView) -> bool:
    return view.has_video_bg() and view.has_fg_text_or_html()


CONTENT_TYPE_RULES: Tuple[Rule[SceneView], ...] = (
    Rule("layout:device-mockup", is_device_mockup, "device_mockup", 0.95),
    Rule("layout:split-panel", is_split_panel, "split_panel", 0.95),
    Rule("layout:masonry-cells", is_masonry_collage, "collage", 0.90),
    Rule("layout:masonry-grid", is_masonry, "moodboard", 0.85),
    Rule("layout:full-bleed", is_full_bleed, "product_shot", 0.85),
    Rule("layout:hero-center", is_hero_center, "brand_mark", 0.80),
    Rule("layers:all-text", is_all_text, "typography", 0.90),
    Rule("layers:portrait", is_portrait, "portrait", 0.75),
    Rule("layers:brand-html", is_brand_html, "brand_mark", 0.80),
    Rule("layers:notification-html", is_notification_html, "notification", 0.80),
    Rule("layers:data-visualization", is_data_visualization, "data_visualization", 0.70),
    Rule("layers:ui-capture", is_ui_capture, "ui_screenshot", 0.70),
    Rule("layers:image-board", is_image_board, "moodboard", 0.65),
    Rule("layers:video-overlay", is_video_with_overlay, "product_shot", 0.50),
    Rule("default", always, "ui_screenshot", 0.20),
)


# shot grammar predicates


def is_wide_template(view: SceneView) -> bool:
    return view.template in ("masonry-grid", "split-panel")


def is_hero_single_text(view: SceneView) -> bool:
    return view.template == "hero-center" and len(view.fg) == 1 and view.fg[0].type == "text"


def has_many_fg(view: SceneView) -> bool:
    return len(view.fg) >= 4


def has_single_fg(view: SceneView) -> bool:
    return len(view.fg) == 1


def is_hero_or_opening(view: SceneView) -> bool:
    return "hero" in view.intent_tags or "opening" in view.intent_tags


def is_informational_or_detail(view: SceneView) -> bool:
    return "informational" in view.intent_tags or "detail" in view.intent_tags


def is_portrait_content(view: SceneView) -> bool:
    return view.content_type == "portrait"


def is_dataviz_content(view: SceneView) -> bool:
    return view.content_type == "data_visualization"


def is_device_left(view: SceneView) -> bool:
    return view.template == "device-mockup" and view.layout_config.get("deviceSide", "right") == "left"


def _affinity_rules(registry: Registry) -> List[Rule[SceneView]]:
    rules: List[Rule[SceneView]] = []
    for content_type, size in registry.shot_grammar.affinity_table().items():
        rules.append(
            Rule(
                f"affinity:{content_type}",
                lambda view, ct=content_type: view.content_type == ct,
                size,
                0.75,
            )
        )
    return rules


def shot_size_rules(registry: Registry) -> List[Rule[SceneView]]:
    return [
        Rule("layout:wide-template", is_wide_template, "wide", 0.90),
        Rule("layout:device-mockup", is_device_mockup, "medium", 0.90),
        Rule("layout:hero-single-text", is_hero_single_text, "close_up", 0.85),
        Rule("layout:hero-center", is_hero_center, "medium", 0.80),
        Rule("layout:full-bleed", is_full_bleed, "medium", 0.80),
        *_affinity_rules(registry),
        Rule("layers:many-fg", has_many_fg, "wide", 0.55),
        Rule("layers:single-fg", has_single_fg, "close_up", 0.55),
        Rule("default", always, "medium", 0.50),
    ]


ANGLE_RULES: Tuple[Rule[SceneView], ...] = (
    Rule("intent:hero-opening", is_hero_or_opening, "low", 0.75),
    Rule("intent:informational-detail", is_informational_or_detail, "high", 0.70),
    Rule("content:portrait", is_portrait_content, "eye_level", 0.85),
    Rule("content:data-visualization", is_dataviz_content, "high", 0.75),
    Rule("default", always, "eye_level", 0.60),
)

FRAMING_RULES: Tuple[Rule[SceneView], ...] = (
    Rule("layout:split-panel", is_split_panel, "rule_of_thirds_left", 0.85),
    Rule("layout:device-left", is_device_left, "rule_of_thirds_left", 0.85),
    Rule("layout:device-mockup", is_device_mockup, "rule_of_thirds_right", 0.85),
    Rule("intent:hero-opening", is_hero_or_opening, "center", 0.80),
    Rule("default", always, "center", 0.60),
)


# scored classifiers


def classify_visual_weight(scene: Scene) -> Classification:
    """Vote on light/dark from text colours (inverted) and inline HTML colours."""

    samples: List[float] = []
    for layer in scene.layers:
        lum = hex_to_luminance(layer.style.get("color"))
        if lum is not None:
            samples.append(1.0 - lum)
        if layer.type == "html":
            for color in extract_hex_colors(layer.content):
                html_lum = hex_to_luminance(color)
                if html_lum is not None:
                    samples.append(html_lum)

    if not samples:
        return Classification("mixed", 0.30, "no-colors")
    total = len(samples)
    dark_ratio = sum(1 for lum in samples if lum < 0.25) / total
    light_ratio = sum(1 for lum in samples if lum > 0.6) / total
    if dark_ratio > 0.7:
        return Classification("dark", round(0.70 + dark_ratio * 0.25, 4), "dark-majority")
    if light_ratio > 0.7:
        return Classification("light", round(0.70 + light_ratio * 0.25, 4), "light-majority")
    return Classification("mixed", 0.60, "mixed-colors")


def motion_score(scene: Scene) -> int:
    score = 0
    camera = scene.camera
    if camera is not None and camera.move != "static":
        intensity = 0.5 if camera.intensity is None else camera.intensity
        if intensity < 0.2:
            score += 1
        elif intensity <= 0.5:
            score += 2
        else:
            score += 3

    for layer in scene.layers:
        score += ANIMATION_SCORES.get(layer.animation or "", 0)

    entrances = [layer for layer in scene.layers if layer.entrance and layer.entrance.primitive]
    if len(entrances) >= 3:
        score += 3
    elif entrances:
        score += 1

    delays = {layer.entrance.delay_ms for layer in scene.layers if layer.entrance and layer.entrance.delay_ms > 0}
    if len(delays) >= 3:
        score += 2
    elif len(delays) == 2:
        score += 1

    if any(layer.type == "video" for layer in scene.layers):
        score += 1
    return score


def classify_motion_energy(scene: Scene) -> Classification:
    score = motion_score(scene)
    if score == 0:
        return Classification("static", 0.90, "score:0")
    if score <= 1:
        value = "subtle"
    elif score <= 5:
        value = "moderate"
    else:
        value = "high"
    return Classification(value, round(min(0.50 + score * 0.08, 0.95), 4), f"score:{score}")


def infer_intent_tags(scene: Scene, content_type: Optional[str], motion_energy: str) -> Tuple[List[str], float]:
    tags: List[str] = []
    fg = scene.foreground()

    if content_type == "brand_mark":
        tags.append("hero")
        if len(fg) <= 1:
            tags.append("opening")
    elif content_type == "typography":
        text_layers = [layer for layer in fg if layer.type == "text"]
        if len(text_layers) == 1:
            if motion_energy == "high":
                tags.append("hero")
            elif text_layers[0].animation == "word-reveal":
                tags.append("opening")
            else:
                tags.append("detail")
    elif content_type in ("ui_screenshot", "device_mockup"):
        tags.append("detail")
    elif content_type == "data_visualization":
        tags.extend(["detail", "informational"])
    elif content_type == "portrait":
        tags.append("emotional")
    elif content_type in ("collage", "moodboard", "split_panel"):
        tags.append("informational")

    has_video_bg = any(layer.type == "video" for layer in scene.background())
    if has_video_bg and any(layer.type == "text" for layer in fg) and "emotional" not in tags:
        tags.append("emotional")
    if scene.duration_s <= 1.5 and len(scene.layers) <= 2:
        tags.append("transition")

    confidence = 0.30 if not tags else round(min(0.55 + len(tags) * 0.10, 0.90), 4)
    return tags, confidence


# entry points


@dataclass(frozen=True)
class Analysis:
    """Classified metadata plus per-field confidence and the rules that fired."""

    metadata: SceneMetadata
    confidence: Dict[str, float]
    low_confidence: List[str] = field(default_factory=list)
    rules: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": self.metadata.model_dump(mode="json"),
            "confidence": dict(self.confidence),
            "low_confidence": list(self.low_confidence),
            "rules": dict(self.rules),
        }


def coerce_scene(scene: SceneLike) -> Scene:
    """Return ``scene`` as a :class:`Scene`, raising MalformedInput on bad shape."""

    if isinstance(scene, Scene):
        return scene
    if not isinstance(scene, Mapping):
        raise MalformedInput(f"scene must be a mapping, got {type(scene).__name__}")
    try:
        return Scene.model_validate(dict(scene))
    except ValidationError as exc:
        raise MalformedInput(f"scene failed shape checks: {exc}") from exc


def classify_shot_grammar(
    scene: Scene,
    registry: Registry,
    content_type: Optional[str] = None,
    intent_tags: Sequence[str] = (),
) -> Tuple[ShotGrammar, Dict[str, Classification]]:
    """Classify size, angle and framing from layout, content and intent."""

    view = replace(SceneView.of(scene), content_type=content_type, intent_tags=tuple(intent_tags))
    results = {
        "shot_size": first_match(shot_size_rules(registry), view),
        "angle": first_match(ANGLE_RULES, view),
        "framing": first_match(FRAMING_RULES, view),
    }
    grammar = ShotGrammar(**{axis: result.value for axis, result in results.items()})
    return grammar, results


def analyze_scene(scene: SceneLike, registry: Registry) -> Analysis:
    """Classify a scene into metadata and shot grammar with confidences."""

    model = coerce_scene(scene)
    view = SceneView.of(model)

    content = first_match(CONTENT_TYPE_RULES, view)
    weight = classify_visual_weight(model)
    energy = classify_motion_energy(model)
    # a defaulted content type does not feed tags or grammar
    known = content.value if content.rule != "default" else None
    tags, tags_confidence = infer_intent_tags(model, known, energy.value)
    grammar, grammar_results = classify_shot_grammar(model, registry, known, tags)

    confidence: Dict[str, float] = {
        "content_type": content.confidence,
        "visual_weight": weight.confidence,
        "motion_energy": energy.confidence,
        "intent_tags": tags_confidence,
    }
    rules = {
        "content_type": content.rule,
        "visual_weight": weight.rule,
        "motion_energy": energy.rule,
    }
    for axis, result in grammar_results.items():
        confidence[axis] = result.confidence
        rules[axis] = result.rule

    threshold = registry.config.analysis.low_confidence_threshold
    low = [name for name, value in confidence.items() if value < threshold]
    metadata = SceneMetadata(
        content_type=content.value,
        visual_weight=weight.value,
        motion_energy=energy.value,
        intent_tags=tags,
        shot_grammar=grammar,
        confidence=confidence,
    )
    if low:
        logger.info("scene.analysis.low_confidence", scene_id=model.scene_id, fields=low)
    return Analysis(metadata=metadata, confidence=confidence, low_confidence=low, rules=rules)


def enrich_scene(scene: SceneLike, registry: Registry) -> Scene:
    """Return a copy of ``scene`` with analyzed metadata attached."""

    model = coerce_scene(scene)
    analysis = analyze_scene(model, registry)
    return model.model_copy(update={"metadata": analysis.metadata})


__all__ = [
    "ANGLE_RULES",
    "CONTENT_TYPES",
    "CONTENT_TYPE_RULES",
    "FRAMING_RULES",
    "INTENT_TAGS",
    "MOTION_ENERGIES",
    "VISUAL_WEIGHTS",
    "Analysis",
    "SceneView",
    "analyze_scene",
    "classify_motion_energy",
    "classify_shot_grammar",
    "classify_visual_weight",
    "coerce_scene",
    "enrich_scene",
    "infer_intent_tags",
    "motion_score",
    "shot_size_rules",
]
