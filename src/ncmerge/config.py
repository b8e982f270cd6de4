# src/ncmerge/config.py

NC_EXTENSIONS = {".nc", ".ngc", ".tap", ".gcode", ".cnc", ".txt"}

IGNORE_FILENAME = ".ncignore"

DEFAULT_IGNORE_PATTERNS = [
    "# Default ignore patterns",
    ".git/",
    "__pycache__/",
    ".venv/",
    "venv/",
    "backup/",
    "*.bak",
    "*.tmp",
    ".DS_Store",
    "merged*.nc",
]

DEFAULT_OUTPUT_NAME = "merged.nc"

BANNER_RULE = "(====================================)"

# Preview estimate overhead when comments are enabled
PREVIEW_LINES_PER_FILE = 6
PREVIEW_HEADER_LINES = 10

TEMPLATE_DIR_ENV = "NCMERGE_TEMPLATE_DIR"

BUILTIN_TEMPLATES = {
    "fanuc-mill": {
        "description": "Fanuc mill safe start / return home",
        "header": "(SAFE START)\nG21 G17 G40 G49 G80 G90",
        "footer": "G91 G28 Z0\nG28 X0 Y0\nG90",
    },
    "haas-mill": {
        "description": "Haas mill safe start / return home",
        "header": "(SAFE START)\nG00 G17 G40 G49 G80 G90\nG54",
        "footer": "M05\nM09\nG91 G28 Z0\nG28 Y0\nG90",
    },
    "lathe": {
        "description": "Generic lathe safe start / return home",
        "header": "(SAFE START)\nG21 G40 G99\nG28 U0 W0",
        "footer": "M05\nM09\nG28 U0 W0",
    },
}
