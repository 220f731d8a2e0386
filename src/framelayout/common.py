"""framelayout.common — helpers shared by the manifest loader and preview.

Contains: color parsing, ${var} path substitution, font loading and
label drawing.
"""

import re
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont


# ── Font paths ─────────────────────────────────────────────────────
# Inter preferred, DejaVu Sans as fallback.

FONT_PATHS = [
    Path.home() / ".local/share/fonts/Inter.ttc",
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
]

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


# ── Color utilities ────────────────────────────────────────────────

def parse_hex_color(value) -> tuple[int, int, int]:
    """Convert '#RRGGBB', 'RRGGBB', '#RGB' or an [R, G, B] list to a tuple."""
    if isinstance(value, (list, tuple)):
        if len(value) != 3 or not all(isinstance(c, int) and 0 <= c <= 255 for c in value):
            raise ValueError(f"Invalid color: {value!r}. Expected [R, G, B] with 0-255 values.")
        return tuple(value)

    match = _HEX_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid color: '{value}'. Expected '#RRGGBB'.")
    hex_str = match.group(1)
    if len(hex_str) == 3:
        hex_str = "".join(c * 2 for c in hex_str)
    return (int(hex_str[0:2], 16), int(hex_str[2:4], 16), int(hex_str[4:6], 16))


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return str(paths[key])
    return re.sub(r"\$\{(\w+)\}", _replace, text)


# ── Font loading ───────────────────────────────────────────────────

def load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load Inter (or fallback) at the given size."""
    for font_path in FONT_PATHS:
        if font_path.exists():
            try:
                return ImageFont.truetype(str(font_path), size=size, index=0)
            except (OSError, IndexError):
                continue
    # Last resort: Pillow default bitmap font.
    return ImageFont.load_default()


# ── Label drawing ──────────────────────────────────────────────────

def draw_label(
    img: Image.Image,
    text: str,
    position: tuple[int, int],
    font: ImageFont.FreeTypeFont,
    color: tuple[int, int, int],
    max_width: int | None = None,
) -> int:
    """Draw a single-line label and return its height in pixels.

    Labels wider than max_width are shortened with an ellipsis.
    """
    draw = ImageDraw.Draw(img)

    if max_width:
        bbox = draw.textbbox((0, 0), text, font=font)
        while (bbox[2] - bbox[0]) > max_width and len(text) > 4:
            text = text[:-4] + "..."
            bbox = draw.textbbox((0, 0), text, font=font)

    draw.text(position, text, fill=color, font=font)
    bbox = draw.textbbox((0, 0), text, font=font)
    return bbox[3] - bbox[1]
