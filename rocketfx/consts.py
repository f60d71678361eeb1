# ==================== CONFIGURATION ====================
# Adjust these values to tune motion and gesture sensitivity

# Session modes
MODE_HANDS = "hands"
MODE_POSE = "pose"

# Landmark Follower (spring-damper)
SPRING_FACTOR = 0.1                 # Pull toward the target per tick (higher = snappier)
DAMPING = 0.8                       # Velocity kept per tick (lower = more friction)

# Tracked points
LANDMARKS_PER_HAND = 21
MAX_HANDS = 2
POSE_LANDMARKS = 33

# Scene mapping
DEPTH_SCALE = 100                   # Scene units per unit of normalized depth
DEFAULT_FRAME_WIDTH = 640
DEFAULT_FRAME_HEIGHT = 480

# Closed-hand edge trigger
CLOSED_FINGER_TIPS = (8, 12, 16, 20)        # Index, middle, ring, pinky tips
CLOSED_FINGER_KNUCKLES = (6, 10, 14, 18)    # Matching middle joints
CLOSED_MIN_FINGERS = 3              # Curled fingers needed to call the hand closed
HAND_LAUNCH_FACTOR = 400            # Launch speed for an opened hand

# Fling-and-stop
FLING_MOVING_THRESHOLD = 900        # Speed (scene units/s) that arms the fling
FLING_STOPPED_THRESHOLD = 180       # Speed that counts as stopped once armed
FLING_LAUNCH_FACTOR = 20            # Launch speed after a fling

# Projectiles
PROJECTILE_DT = 0.016               # Fixed 60 Hz integration step
PROJECTILE_BOUND_X = 320            # Projectile explodes past |x| > bound
PROJECTILE_BOUND_Y = 240            # Projectile explodes past |y| > bound
TRAIL_LENGTH = 40                   # Positions kept in a trail

# Explosion bursts
BURST_SPARKS = 24
BURST_TICKS = 28                    # Frames until the burst fades out
BURST_MIN_SPEED = 6.0
BURST_MAX_SPEED = 9.0

# Frame driver
RENDER_FPS = 60

# Scene server
SCENE_SERVER_HOST = "localhost"
SCENE_SERVER_PORT = 3000

# Landmark models
HAND_MODEL_URL = ("https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
                  "hand_landmarker/float16/1/hand_landmarker.task")
POSE_MODEL_URL = ("https://storage.googleapis.com/mediapipe-models/pose_landmarker/"
                  "pose_landmarker_lite/float16/1/pose_landmarker_lite.task")
MIN_DETECTION_CONFIDENCE = 0.5
MIN_TRACKING_CONFIDENCE = 0.5

# Landmark indices
WRIST = 0
INDEX_MCP = 5
MIDDLE_PIP = 10
PINKY_MCP = 17
POSE_LEFT_WRIST = 15
POSE_RIGHT_WRIST = 16

# Identities
HAND_LEFT = "Left"
HAND_RIGHT = "Right"
WRIST_LEFT = "left"
WRIST_RIGHT = "right"
