"""Time-varying camera moves and their composition with static framing."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

from anim_sdk.scene import CameraMove

from .grammar import ShotCSS

EasingFn = Callable[[float], float]
CameraLike = Union[CameraMove, Mapping[str, Any], None]

SCALE_FACTOR = 0.08
PAN_MAX_PX = 80.0
DRIFT_AMPLITUDE = 3.0
DRIFT_Y_RATIO = 0.6
DEFAULT_INTENSITY = 0.5


def linear(t: float) -> float:
    return t


def ease_out(t: float) -> float:
    return 1.0 - (1.0 - t) ** 3


def cinematic_scurve(t: float) -> float:
    # cubic ease-in-out
    if t < 0.5:
        return 4.0 * t ** 3
    return 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0


EASINGS: Dict[str, EasingFn] = {
    "linear": linear,
    "ease_out": ease_out,
    "cinematic_scurve": cinematic_scurve,
}
DEFAULT_EASING = "cinematic_scurve"


def get_easing(name: Optional[str]) -> EasingFn:
    """Return the easing curve for ``name``; unknown names use the s-curve."""

    return EASINGS.get(name or DEFAULT_EASING, EASINGS[DEFAULT_EASING])


@dataclass(frozen=True)
class CameraValues:
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0


@dataclass(frozen=True)
class ComposedTransform:
    transform: str
    transform_origin: str
    perspective_origin: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "transform": self.transform,
            "transformOrigin": self.transform_origin,
            "perspectiveOrigin": self.perspective_origin,
        }


def _coerce_camera(camera: CameraLike) -> Optional[CameraMove]:
    if camera is None or isinstance(camera, CameraMove):
        return camera
    return CameraMove.model_validate(dict(camera))


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def camera_values(camera: CameraLike, progress: float, easing: Optional[EasingFn] = None) -> CameraValues:
    """Sample a camera move at ``progress`` in [0, 1].

    Drift runs on raw progress so the loop stays sinusoidal; every other move
    is eased. Static and unknown moves return the identity.
    """

    move = _coerce_camera(camera)
    if move is None or move.move == "static":
        return CameraValues()

    p = _clamp(progress)
    intensity = DEFAULT_INTENSITY if move.intensity is None else move.intensity
    eased = (easing or get_easing(move.easing))(p)

    if move.move == "push_in":
        return CameraValues(scale=1.0 + eased * intensity * SCALE_FACTOR)
    if move.move == "pull_out":
        start = 1.0 + intensity * SCALE_FACTOR
        return CameraValues(scale=start - eased * intensity * SCALE_FACTOR)
    if move.move == "pan_left":
        return CameraValues(translate_x=-eased * intensity * PAN_MAX_PX)
    if move.move == "pan_right":
        return CameraValues(translate_x=eased * intensity * PAN_MAX_PX)
    if move.move == "drift":
        amplitude = intensity * DRIFT_AMPLITUDE
        return CameraValues(
            translate_x=math.sin(p * math.pi * 2) * amplitude,
            translate_y=math.cos(p * math.pi * 1.5) * amplitude * DRIFT_Y_RATIO,
        )
    return CameraValues()


def _num(value: float) -> str:
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def compose(
    static_css: ShotCSS,
    camera: CameraLike,
    progress: float,
    easing: Optional[EasingFn] = None,
) -> ComposedTransform:
    """Combine static shot framing with a sampled camera move.

    Scale multiplies, rotation comes only from the static framing, translation
    only from the camera, and both origins from the static framing. Functions
    are always emitted as scale, rotateX, rotateZ, translate.
    """

    dynamic = camera_values(camera, progress, easing)
    scale = static_css.scale * dynamic.scale
    transform = (
        f"scale({_num(scale)}) "
        f"rotateX({_num(static_css.rotate_x)}deg) "
        f"rotateZ({_num(static_css.rotate_z)}deg) "
        f"translate({_num(dynamic.translate_x)}px, {_num(dynamic.translate_y)}px)"
    )
    return ComposedTransform(
        transform=transform,
        transform_origin=static_css.transform_origin,
        perspective_origin=static_css.perspective_origin,
    )


__all__ = [
    "DEFAULT_INTENSITY",
    "DRIFT_AMPLITUDE",
    "DRIFT_Y_RATIO",
    "EASINGS",
    "PAN_MAX_PX",
    "SCALE_FACTOR",
    "CameraValues",
    "ComposedTransform",
    "camera_values",
    "compose",
    "get_easing",
]
