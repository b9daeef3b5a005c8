"""Report builder — text and JSON output for palette-tool results."""

import json
from typing import Any

from palette_tool.core.types import Report


def _format_palette(data: dict[str, Any]) -> list[str]:
    lines = []
    for i, entry in enumerate(data.get('palette', []), start=1):
        lines.append(f'  {i:>2}. {entry["hex"]}  {entry["css"]:<20} {entry["pct"]:5.1f}%')
    return lines


def format_text(report: Report) -> str:
    """Format report as human-readable text."""
    lines = []
    dim = f'{report.image_width}×{report.image_height}'
    header = f'palette-tool: {report.image_path} ({dim})'
    if report.original_size and tuple(report.original_size) != (report.image_width, report.image_height):
        w, h = report.original_size
        header += f' — downscaled from {w}×{h}'
    lines.append(header)
    lines.append('')

    for tech_name, tech_data in report.techniques.items():
        lines.append(f'── {tech_name}')
        if 'error' in tech_data:
            lines.append(f'  error: {tech_data["error"]}')
        elif tech_name == 'extract':
            lines.extend(_format_palette(tech_data))
        elif tech_name == 'background':
            if tech_data.get('detected'):
                lines.append(f'  background: {tech_data["hex"]} ({tech_data["border_pixels"]} border pixels)')
            else:
                lines.append(f'  background: none ({tech_data["border_pixels"]} border pixels)')
        elif tech_name == 'sample':
            lines.append(
                f'  stride {tech_data["stride"]}: {tech_data["kept"]}/{tech_data["visited"]} pixels kept, '
                f'{tech_data["unique"]} unique after quantization'
            )
        elif tech_name == 'swatch':
            lines.append(f'  swatch: {tech_data["file"]}')
        else:
            # Generic fallback
            for k, v in tech_data.items():
                lines.append(f'  {tech_name}.{k}: {v}')
        lines.append('')

    if report.errors:
        lines.append(f'FAIL {len(report.errors)} technique(s)')
    return '\n'.join(lines)


def format_json(report: Report) -> str:
    """Format report as JSON."""
    obj: dict[str, Any] = {
        'image': report.image_path,
        'dimensions': {'width': report.image_width, 'height': report.image_height},
    }
    if report.original_size:
        obj['original_dimensions'] = {'width': report.original_size[0], 'height': report.original_size[1]}
    obj['techniques'] = report.techniques
    obj['errors'] = report.errors
    return json.dumps(obj, indent=2)
