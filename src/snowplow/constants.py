PLAYFIELD_WIDTH = 72
PLAYFIELD_HEIGHT = 128

# Each playfield cell is drawn as a DISPLAY_SCALE x DISPLAY_SCALE block.
DISPLAY_SCALE = 10
UPDATE_RATE = 1 / 60

# Number of display callbacks per simulation step (1 = step on every tick).
SKIP_FRAMES = 1

# Linear memory shared with the simulation module: 256 pages of 64 KiB.
MEMORY_PAGE_SIZE = 64 * 1024
MEMORY_PAGES = 256
MEMORY_BYTES = MEMORY_PAGE_SIZE * MEMORY_PAGES
HEAP_BASE = 1024

# Session storage slot holding the base64 playfield blob.
STORAGE_KEY = "flakefield"

# Pointer pressure must exceed this to paint.
PRESSURE_THRESHOLD = 0.25

# Wall color the simulation paints into the two edge columns on generation 0.
FRAME_COLOR = 0xFF444444
