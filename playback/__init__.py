"""
Playback: virtual-clock frames, timers and tweens.

Provides frame timelines, a wall-clock player, snapshots and rollback.
"""

from .config import PlayerConfig, load_config, save_config, setup_logging
from .easing import EASING_FUNCTIONS, get_easing
from .events import Event, EventDispatcher
from .frame import Frame
from .logging_config import configure_logging
from .models import DataObject, Model, ModelSet
from .player import Player, PlayerState
from .snapshot import Snapshot, clone_model
from .timer import INDEFINITE, Timer
from .tween import Tween

__version__ = "0.1.0"

__all__ = [
    'DataObject',
    'EASING_FUNCTIONS',
    'Event',
    'EventDispatcher',
    'Frame',
    'INDEFINITE',
    'Model',
    'ModelSet',
    'Player',
    'PlayerConfig',
    'PlayerState',
    'Snapshot',
    'Timer',
    'Tween',
    'clone_model',
    'configure_logging',
    'get_easing',
    'load_config',
    'save_config',
    'setup_logging',
]
