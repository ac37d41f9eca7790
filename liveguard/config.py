# config.py - Configuration and constants for the liveness / attendance core

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Liveness thresholds
# NOTE: empirical values carried over from the first deployment; calibrate
# against recorded sessions before tightening them.
EAR_BLINK_THRESHOLD = float(os.getenv('EAR_BLINK_THRESHOLD', '0.25'))
BLINK_DEBOUNCE_FRAMES = max(1, int(os.getenv('BLINK_DEBOUNCE_FRAMES', '5')))
HEAD_MOVEMENT_THRESHOLD = float(os.getenv('HEAD_MOVEMENT_THRESHOLD', '10'))
MAX_FRAMES = max(1, int(os.getenv('MAX_FRAMES', '300')))  # ~10s at 30 fps
REQUIRED_BLINKS = max(1, int(os.getenv('REQUIRED_BLINKS', '2')))
SESSION_MAX_SECONDS = float(os.getenv('SESSION_MAX_SECONDS', '0'))  # 0 = frame-bounded only

# Anti-spoofing heuristic
SPOOF_MIN_FACE_RATIO = float(os.getenv('SPOOF_MIN_FACE_RATIO', '0.05'))
SPOOF_MAX_FACE_RATIO = float(os.getenv('SPOOF_MAX_FACE_RATIO', '0.4'))
SPOOF_MIN_MOVEMENT = float(os.getenv('SPOOF_MIN_MOVEMENT', '5'))
SPOOF_MAX_MOVEMENT = float(os.getenv('SPOOF_MAX_MOVEMENT', '50'))
SPOOF_THRESHOLD = float(os.getenv('SPOOF_THRESHOLD', '0.5'))
SPOOF_FRAME_RATIO = float(os.getenv('SPOOF_FRAME_RATIO', '0.5'))

# Identity matching
MATCH_THRESHOLD = float(os.getenv('MATCH_THRESHOLD', '0.6'))
EMBEDDING_SIZE = int(os.getenv('EMBEDDING_SIZE', '128'))

# Camera configuration
CAMERA_INDEX = int(os.getenv('CAMERA_INDEX', '0'))
CAMERA_WIDTH = int(os.getenv('CAMERA_WIDTH', '720'))
CAMERA_HEIGHT = int(os.getenv('CAMERA_HEIGHT', '560'))
CAMERA_WARMUP_FRAMES = int(os.getenv('CAMERA_WARMUP_FRAMES', '3'))
CAMERA_BUFFER_SIZE = int(os.getenv('CAMERA_BUFFER_SIZE', '2'))

# Storage
DATA_DIR = Path(os.getenv('DATA_DIR', 'data'))
DATABASE_PATH = os.getenv('DATABASE_PATH', str(DATA_DIR / 'liveguard.db'))

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_DIR = Path(os.getenv('LOG_DIR', 'logs'))
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5

# Flask
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB


def build_spoof_config():
    """SpoofConfig populated from the environment."""
    from liveguard.vision.spoof import SpoofConfig

    return SpoofConfig(
        min_face_ratio=SPOOF_MIN_FACE_RATIO,
        max_face_ratio=SPOOF_MAX_FACE_RATIO,
        min_movement=SPOOF_MIN_MOVEMENT,
        max_movement=SPOOF_MAX_MOVEMENT,
        spoof_threshold=SPOOF_THRESHOLD,
    )


def build_liveness_config():
    """LivenessConfig populated from the environment."""
    from liveguard.vision.liveness import LivenessConfig

    return LivenessConfig(
        max_frames=MAX_FRAMES,
        required_blinks=REQUIRED_BLINKS,
        ear_threshold=EAR_BLINK_THRESHOLD,
        blink_debounce_frames=BLINK_DEBOUNCE_FRAMES,
        head_movement_threshold=HEAD_MOVEMENT_THRESHOLD,
    )


def build_camera_config():
    """CameraConfig populated from the environment."""
    from liveguard.vision.frame_source import CameraConfig

    return CameraConfig(
        index=CAMERA_INDEX,
        width=CAMERA_WIDTH,
        height=CAMERA_HEIGHT,
        warmup_frames=CAMERA_WARMUP_FRAMES,
        buffer_size=CAMERA_BUFFER_SIZE,
    )
