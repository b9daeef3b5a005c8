"""Extract the palette and save it as a swatch PNG.

Runs the same pipeline as `extract`, then draws one vertical band per
colour, band width proportional to the colour's share. Saves to
<tmp_dir>/<image_stem>_palette.png.

Example:
    uv run palette-tool swatch ./tmp photo.jpg --seed 7
"""

import os

from PIL import Image, ImageDraw

from palette_tool.core.pipeline import run_extraction
from palette_tool.core.types import ImageJob, PaletteEntry, Report, Technique

technique = Technique(
    name='swatch',
    help='Extract the palette and save it as a PNG swatch strip in tmp_dir.',
)

SWATCH_WIDTH = 600
SWATCH_HEIGHT = 120


def render_swatch(palette: tuple[PaletteEntry, ...], width: int = SWATCH_WIDTH, height: int = SWATCH_HEIGHT) -> Image.Image:
    image = Image.new('RGB', (width, height), (255, 255, 255))
    draw = ImageDraw.Draw(image)
    x = 0
    for i, entry in enumerate(palette):
        # Last band absorbs rounding so the strip is always filled
        x_end = width if i == len(palette) - 1 else x + round(entry.share * width)
        if x_end > x:
            draw.rectangle((x, 0, x_end - 1, height - 1), fill=entry.rgb)
        x = x_end
    return image


@technique.run
def run(job: ImageJob, report: Report, args) -> None:
    result = run_extraction(job.buffer, args.config)
    if not result.ok:
        report.add('swatch', {'error': result.error.message, 'kind': result.error.kind})
        report.record_error('swatch', result.error)
        return

    os.makedirs(args.tmp_dir, exist_ok=True)
    stem = os.path.splitext(os.path.basename(job.path))[0]
    path = os.path.join(args.tmp_dir, f'{stem}_palette.png')
    render_swatch(result.palette).save(path)
    report.add('swatch', {'file': path, 'colours': [e.hex for e in result.palette]})
