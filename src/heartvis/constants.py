# --- Configuration Constants ---
DEFAULT_FPS = 60
DEFAULT_RESOLUTION = (1280, 720)
WINDOW_NAME = "heartvis"

# Colour mode is HSB with these channel maxima (hue, saturation, brightness, alpha)
HUE_MAX = 360
CHANNEL_MAX = 255

# Microphone level -> pulse mapping
LEVEL_IN_MIN = 0.0
LEVEL_IN_MAX = 0.2
PULSE_MIN = 0.3
PULSE_MAX = 1.8
PULSE_SMOOTHING = 0.15  # 1.0 = snap to target, 0.0 = frozen
INITIAL_PULSE = 0.0

# Heart curve and glow halo
GLOW_LAYERS = 4
GLOW_SCALE_BASE = 10
GLOW_SCALE_STEP = 6
GLOW_ALPHA_BASE = 120
GLOW_ALPHA_STEP = 30
GLOW_HUE_STEP = 15
HEART_ANGLE_STEP = 2  # degrees between sampled vertices
HEART_SCALE = 0.6
SHAPE_SIZE = 300  # bounding box edge at pulse 1.0

# User image stamp
IMAGE_HUE_OFFSET = 30
IMAGE_ALPHA = 220

# Hue strategies
HUE_FRAME_STEP = 2
BASS_HUE = 240  # blue
TREBLE_HUE = 0  # red
BALANCE_LOW_BAND = (60, 400)  # bass -> lower mids
BALANCE_HIGH_BAND = (1500, 10000)  # upper mids -> treble

# Motion effects
ROTATION_STEP = 1  # degrees per frame
BOUNCE_SPEED_MIN = 3
BOUNCE_SPEED_MAX = 6

# Particle ring
RING_PARTICLES = 100
RING_RADIUS_MIN = 100
RING_RADIUS_MAX = 300
RING_WOBBLE = 50
RING_WOBBLE_PHASE = 10  # degrees of wobble phase between neighbours
RING_SPIN = 0.5  # degrees per frame
RING_ALPHA = 150
RING_PARTICLE_MIN = 5
RING_PARTICLE_MAX = 20

# Trail effect (alpha of the black wash drawn every frame)
TRAIL_ALPHA = 25
TRAIL_ALPHA_SOFT = 20

# Audio analysis
SAMPLE_RATE = 44100
N_FFT = 2048
HOP_LENGTH = 512
FFT_SMOOTHING = 0.5  # temporal smoothing of live spectrum magnitudes
MIN_DB = -100.0
MAX_DB = -30.0
FREQUENCY_BANDS = {
    "bass": (20, 140),
    "lowMid": (140, 400),
    "mid": (400, 2600),
    "highMid": (2600, 5200),
    "treble": (5200, 14000),
}

# On-screen overlay
INSTRUCTIONS = (
    "Upload a PNG image to replace the heart (press U).\n"
    "Press ENTER to keep the heart.\n"
    "Press R to toggle rotation.\n"
    "Press B to toggle bouncing.\n"
    "Press E to hide/show instructions and upload button.\n"
    "Press Q or ESC to quit.\n"
    "Press any other key for fullscreen."
)
INSTRUCTIONS_MARGIN = 20
INSTRUCTIONS_OFFSET = 150  # distance of the first line from the bottom edge
TEXT_LINE_HEIGHT = 20
TEXT_SCALE = 0.5
UPLOAD_WARNING = "Please upload a PNG image!"
WARNING_FRAMES = 180  # how long a warning stays on screen
