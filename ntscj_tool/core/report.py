"""Report builder — text and JSON output for ntscj-tool conversions."""

import json
import os
from typing import Any

from ntscj_tool.core.types import ConversionReport


def format_text(report: ConversionReport) -> str:
    """Format report as human-readable text."""
    lines = []
    dim = f'{report.width}×{report.height}'
    lines.append(f'ntscj-tool: {os.path.basename(report.input_path)} ({dim}) → {report.output_path}')
    lines.append('')
    lines.append(f'  mode:    {report.direction}')
    lines.append(f'  dither:  {report.dither}')
    lines.append(f'  curve:   {report.curve}')
    if report.workers > 1:
        lines.append(f'  workers: {report.workers}')

    total = report.pixel_count
    pct = report.changed_pixels / total * 100.0 if total else 0.0
    r, g, b = report.mean_delta
    lines.append('')
    lines.append(f'  changed: {report.changed_pixels}/{total} pixels ({pct:.1f}%)')
    lines.append(f'  mean Δ: R={r} G={g} B={b}')
    lines.append(f'  time:    {report.elapsed:.3f}s')
    return '\n'.join(lines)


def format_json(report: ConversionReport) -> str:
    """Format report as JSON."""
    total = report.pixel_count
    obj: dict[str, Any] = {
        'input': report.input_path,
        'output': report.output_path,
        'dimensions': {'width': report.width, 'height': report.height},
        'mode': report.direction,
        'dither': report.dither,
        'curve': report.curve,
        'workers': report.workers,
        'elapsed': report.elapsed,
    }
    obj['summary'] = {
        'pixels': total,
        'changed': report.changed_pixels,
        'mean_delta': {'r': report.mean_delta[0], 'g': report.mean_delta[1], 'b': report.mean_delta[2]},
    }
    return json.dumps(obj, indent=2)
