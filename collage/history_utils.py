"""
Undo/redo over the action log.

The log is never rewritten while editing; only undo compacts it, dropping
actions that left the canvas unchanged so every undo visibly reverts
something. History is linear: pushing a new action discards the redo stack.
"""

from typing import List, Optional, Sequence, Tuple

from collage.actions import Action
from collage.sprite_utils import apply_action

History = Tuple[List[Action], List[Action]]


def meaningful_actions(actions: Sequence[Action]) -> List[Action]:
    """Actions that change the derived sprites relative to the prefix before them."""
    sprites = []
    kept = []
    for action in actions:
        next_sprites = apply_action(action, sprites)
        # Exact comparison: absolute actions reproduce identical floats on no-op
        if next_sprites != sprites:
            kept.append(action)
            sprites = next_sprites
    return kept


def push_action(actions: Sequence[Action], redo_stack: Sequence[Action], action: Action) -> History:
    return list(actions) + [action], []


def undo(actions: Sequence[Action], redo_stack: Sequence[Action]) -> Optional[History]:
    compacted = meaningful_actions(actions)
    if not compacted:
        return None
    return compacted[:-1], list(redo_stack) + [compacted[-1]]


def redo(actions: Sequence[Action], redo_stack: Sequence[Action]) -> Optional[History]:
    if not redo_stack:
        return None
    return list(actions) + [redo_stack[-1]], list(redo_stack[:-1])


def can_undo(actions: Sequence[Action]) -> bool:
    return bool(meaningful_actions(actions))
