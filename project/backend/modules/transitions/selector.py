"""
Context-aware transition selection.

Pure, deterministic rules over two scenes' mood, sound context, environment and
time-of-day tags. Rules are checked in order; the first match wins.
"""

from typing import Optional, Sequence

from shared.models.scene import SceneDescriptor
from shared.models.transition import Easing, TransitionDescriptor, TransitionType

DAY_TIMES = frozenset({"morning", "afternoon"})
NIGHT_TIMES = frozenset({"night", "evening"})

ENVIRONMENT_TRANSITIONS = {
    ("indoor", "outdoor"): TransitionDescriptor(type=TransitionType.SLIDEUP, duration_seconds=0.7, easing=Easing.OUT),
    ("outdoor", "indoor"): TransitionDescriptor(type=TransitionType.SLIDEDOWN, duration_seconds=0.7, easing=Easing.IN),
    ("urban", "nature"): TransitionDescriptor(type=TransitionType.DISSOLVE, duration_seconds=0.9, easing=Easing.INOUT),
    ("nature", "urban"): TransitionDescriptor(type=TransitionType.WIPERIGHT, duration_seconds=0.6, easing=Easing.IN),
}

MOOD_SHIFT_TRANSITIONS = {
    ("sad", "happy"): TransitionDescriptor(type=TransitionType.SLIDEUP, duration_seconds=0.8, easing=Easing.OUT),
    ("happy", "sad"): TransitionDescriptor(type=TransitionType.SLIDEDOWN, duration_seconds=1.0, easing=Easing.IN),
    ("peaceful", "exciting"): TransitionDescriptor(type=TransitionType.WIPELEFT, duration_seconds=0.4, easing=Easing.OUT),
    ("exciting", "peaceful"): TransitionDescriptor(type=TransitionType.DISSOLVE, duration_seconds=1.2, easing=Easing.IN),
}

SUSPENSE = TransitionDescriptor(type=TransitionType.FADEBLACK, duration_seconds=1.2, easing=Easing.IN)
ACTION_FROM_CALM = TransitionDescriptor(type=TransitionType.SLIDERIGHT, duration_seconds=0.4, easing=Easing.OUT)
ACTION = TransitionDescriptor(type=TransitionType.WIPELEFT, duration_seconds=0.3, easing=Easing.OUT)
MAGICAL = TransitionDescriptor(type=TransitionType.CIRCLECROP, duration_seconds=1.0, easing=Easing.INOUT)
DAY_TO_NIGHT = TransitionDescriptor(type=TransitionType.FADEBLACK, duration_seconds=1.5, easing=Easing.IN)
NIGHT_TO_DAY = TransitionDescriptor(type=TransitionType.FADEWHITE, duration_seconds=1.0, easing=Easing.OUT)
MORNING_TO_AFTERNOON = TransitionDescriptor(type=TransitionType.FADE, duration_seconds=0.5, easing=Easing.LINEAR)
BUILDING_SUSPENSE = TransitionDescriptor(type=TransitionType.FADEBLACK, duration_seconds=1.0, easing=Easing.IN)
GENTLE = TransitionDescriptor(type=TransitionType.FADE, duration_seconds=0.8, easing=Easing.INOUT)
DEFAULT = TransitionDescriptor(type=TransitionType.FADE, duration_seconds=0.6, easing=Easing.INOUT)


def _tag(scene: Optional[SceneDescriptor], name: str) -> str:
    if scene is None:
        return ""
    return (getattr(scene, name, None) or "").strip().lower()


def select_transition(
    from_scene: Optional[SceneDescriptor],
    to_scene: SceneDescriptor
) -> TransitionDescriptor:
    """
    Pick the transition leading into `to_scene`.

    Depends only on the two scenes' tags, never on position or previous calls.
    A missing `from_scene` behaves like a scene with no tags.

    Args:
        from_scene: Outgoing scene, or None at the start of a sequence
        to_scene: Incoming scene

    Returns:
        TransitionDescriptor
    """
    from_mood = _tag(from_scene, "mood")
    to_mood = _tag(to_scene, "mood")
    to_context = _tag(to_scene, "sound_context")
    from_env = _tag(from_scene, "environment")
    to_env = _tag(to_scene, "environment")
    from_time = _tag(from_scene, "time_of_day")
    to_time = _tag(to_scene, "time_of_day")

    if to_mood == "scary" or to_context == "horror":
        return SUSPENSE

    if to_mood == "exciting" or to_context == "action":
        return ACTION_FROM_CALM if from_mood == "peaceful" else ACTION

    if to_mood == "magical" or from_mood == "magical":
        return MAGICAL

    if from_env != to_env and (from_env, to_env) in ENVIRONMENT_TRANSITIONS:
        return ENVIRONMENT_TRANSITIONS[(from_env, to_env)]

    if from_time != to_time:
        if from_time in DAY_TIMES and to_time in NIGHT_TIMES:
            return DAY_TO_NIGHT
        if from_time in NIGHT_TIMES and to_time in DAY_TIMES:
            return NIGHT_TO_DAY
        if from_time == "morning" and to_time == "afternoon":
            return MORNING_TO_AFTERNOON

    if from_mood != to_mood:
        if (from_mood, to_mood) in MOOD_SHIFT_TRANSITIONS:
            return MOOD_SHIFT_TRANSITIONS[(from_mood, to_mood)]
        # Shadowed by the suspense rule above: scary targets never get here.
        if to_mood == "scary":
            return BUILDING_SUSPENSE

    if to_mood == "peaceful" or from_mood == "peaceful":
        return GENTLE

    return DEFAULT


def transition_after(scenes: Sequence[SceneDescriptor], position: int) -> Optional[TransitionDescriptor]:
    """
    Transition between scenes[position] and the scene that follows it.

    Returns:
        TransitionDescriptor, or None for the last scene
    """
    if position + 1 >= len(scenes):
        return None
    return select_transition(scenes[position], scenes[position + 1])
