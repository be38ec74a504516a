"""
HeadGaze - Model-free head and gaze pointing.

Turns a webcam feed into a pointing signal: locates face and eyes with
colour/brightness heuristics, calibrates gaze against five screen targets,
fuses head displacement with eye gaze into one cursor position and maps
cursor velocity to discrete control events.

Privacy First:
- All processing happens locally
- No trained model, no face recognition
- No video recording
- Minimal data storage (numeric calibration parameters only)

Architecture:
- One TrackingContext, one on_frame() tick
- Thresholds in configuration dataclasses
- Camera and pointer are thin adapters outside the core
"""

__version__ = "0.1.0"
__author__ = "HeadGaze Team"
__license__ = "MIT"
