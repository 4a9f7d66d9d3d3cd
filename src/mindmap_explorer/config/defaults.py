"""Default configuration values for mindmap-explorer."""

from pathlib import Path

# Branch colours, cycled by first-generation sibling index
DEFAULT_PALETTE: tuple[str, ...] = (
    "#58a6ff",  # Blue
    "#bc8cff",  # Purple
    "#ffa657",  # Orange
    "#7ee787",  # Green
    "#ff7b72",  # Red
    "#39c5cf",  # Teal
    "#ff9bce",  # Pink
    "#d29922",  # Yellow
)

DEFAULT_ROOT_COLOR = "#c9d1d9"

# Node styling (collapsed nodes are filled with their branch colour)
EXPANDED_FILL = "#1f2428"
COLLAPSED_TEXT_COLOR = "#0d1117"
EXPANDED_TEXT_COLOR = "#c9d1d9"
COLLAPSED_ICON_COLOR = "#0d1117"
EXPANDED_ICON_COLOR = "#8b949e"

# Node metrics (pixels)
DEFAULT_NODE_WIDTH = 220
DEFAULT_BASE_HEIGHT = 60
LABEL_CHARS_PER_LINE = 28
LABEL_LINE_HEIGHT = 18
LABEL_PADDING = 20

# Layout spacing (pixels)
DEFAULT_LEVEL_SPACING = 300
DEFAULT_SIBLING_SPACING = 40
ORIENTATIONS = ("horizontal", "vertical")

# Viewport
DEFAULT_VIEWPORT_WIDTH = 1200
DEFAULT_VIEWPORT_HEIGHT = 800
DEFAULT_SCALE_EXTENT = (0.1, 4.0)
DEFAULT_DURATION = 0.5  # seconds

# Datasets
DEFAULT_DATASET = "Steuern_in_der_Schweiz"
DATASET_EXTENSIONS = (".json", ".xml")
ENV_PREFIX = "MINDMAP_"


def get_default_data_dir(base: Path | None = None) -> Path:
    """Directory holding dataset files (``<base>/data``)."""
    return (base or Path.cwd()) / "data"
