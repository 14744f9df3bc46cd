"""Screenshot capture.

Full-page PNGs are written to the screenshots directory and downscaled to
fit inside MAX_DIMENSION x MAX_DIMENSION so they stay usable as model input.
"""

import io
from datetime import datetime, timezone
from pathlib import Path

from PIL import Image
from playwright.async_api import Page

MAX_DIMENSION = 2000


def fit_within(png_bytes: bytes, max_dimension: int = MAX_DIMENSION) -> bytes:
    """Downscale a PNG so neither side exceeds ``max_dimension``.

    Images already within bounds are returned unchanged; aspect ratio is
    preserved and images are never enlarged.
    """
    with Image.open(io.BytesIO(png_bytes)) as image:
        if image.width <= max_dimension and image.height <= max_dimension:
            return png_bytes
        image.thumbnail((max_dimension, max_dimension))
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()


async def capture_screenshot(page: Page, screenshots_dir: Path | str) -> Path:
    """Capture the full page into a timestamped PNG.

    Args:
        page: The Playwright page.
        screenshots_dir: Directory to save into (created if missing).

    Returns:
        Path to the saved screenshot.
    """
    directory = Path(screenshots_dir)
    directory.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
    output_path = directory / f"screenshot-{timestamp}.png"

    png_bytes = await page.screenshot(full_page=True, type="png")
    output_path.write_bytes(fit_within(png_bytes))
    return output_path
