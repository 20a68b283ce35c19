"""
CLI Utilities
=============

Console output, GPU status and JSON summaries shared by the
kpm-transport commands.
"""

import typer
import numpy as np
import json
from pathlib import Path
from typing import Any, Dict, Optional

from .. import __version__


SECTION_WIDTH = 50
KEY_WIDTH = 18


def print_banner():
    """Print welcome banner."""
    typer.echo(f"""
╔═══════════════════════════════════════════════════════════════╗
║         Linear-Scaling Quantum Transport (KPM)                ║
║                  kpm-transport v{__version__:<10}                    ║
║       ~ DOS / Velocity Autocorrelation / MSD ~                ║
╚═══════════════════════════════════════════════════════════════╝
    """)


def print_section(title: str, emoji: str = "📦"):
    """Section header underlined to SECTION_WIDTH."""
    typer.secho(f"\n{emoji} {title}", bold=True)
    typer.echo("─" * SECTION_WIDTH)


def print_key_value(key: str, value: Any):
    """Aligned 'key: value' line; floats get 6 significant digits."""
    if isinstance(value, (float, np.floating)):
        value = f"{value:.6g}"
    typer.echo(f"  {key + ':':<{KEY_WIDTH}} {value}")


def gpu_status() -> Dict[str, Any]:
    """
    CuPy / CUDA details for the info command.

    Keys: 'available' (bool) and, when CuPy imports, 'cupy' (version).
    With a usable device also 'device', 'cuda_runtime' and 'memory_gb'.
    """
    try:
        import cupy as cp
    except ImportError:
        return {'available': False, 'reason': 'CuPy not installed'}

    status = {'available': False, 'cupy': cp.__version__}
    try:
        if not cp.cuda.is_available():
            status['reason'] = 'no CUDA device'
            return status
        device_id = cp.cuda.Device().id
        props = cp.cuda.runtime.getDeviceProperties(device_id)
        name = props.get('name', f'GPU {device_id}')
        if isinstance(name, bytes):
            name = name.decode()
        # runtime version is encoded as 1000 * major + 10 * minor
        runtime = cp.cuda.runtime.runtimeGetVersion()
        status.update(
            available=True,
            device=name,
            cuda_runtime=f"{runtime // 1000}.{(runtime % 1000) // 10}",
            memory_gb=props.get('totalGlobalMem', 0) / 1024 ** 3,
        )
    except cp.cuda.runtime.CUDARuntimeError as e:
        status['reason'] = f"CUDA error: {e}"
    return status


def check_gpu() -> str:
    """One-line GPU status."""
    status = gpu_status()
    if status['available']:
        return (f"✅ {status['device']} ({status['memory_gb']:.1f} GB, "
                f"CuPy {status['cupy']}, CUDA {status['cuda_runtime']})")
    if 'cupy' in status:
        return f"❌ {status['reason']} (CuPy {status['cupy']}, CPU mode)"
    return f"❌ {status['reason']} (CPU mode)"


def to_serializable(x):
    """JSON fallback for numpy values."""
    if isinstance(x, np.ndarray):
        return x.tolist()
    if isinstance(x, np.floating):
        return float(x)
    if isinstance(x, np.integer):
        return int(x)
    raise TypeError(f"Not JSON serializable: {type(x).__name__}")


def save_json(data: dict, output: Path):
    """Write a JSON summary; numpy arrays become lists."""
    try:
        output.write_text(json.dumps(data, indent=2, default=to_serializable))
    except OSError as e:
        error_exit(f"Cannot write {output}: {e}")
    typer.echo(f"\n💾 Summary written to {output}")


def error_exit(message: str, hint: Optional[str] = None, code: int = 1):
    """Report an error on stderr and leave with a non-zero exit code."""
    typer.secho(f"❌ {message}", fg=typer.colors.RED, err=True)
    if hint:
        typer.echo(f"   💡 {hint}", err=True)
    raise typer.Exit(code)


def result_summary(result) -> dict:
    """Averaged curves of a TransportResult as plain lists."""
    data = {'wall_time': result.wall_time, 'n_vectors': result.summary()}
    for name in ('dos', 'vac', 'msd'):
        mean = result.mean(name)
        if mean is None:
            continue
        data[name] = {
            'energies': mean.energies,
            'times': mean.times,
            'values': mean.values,
        }
    return data
