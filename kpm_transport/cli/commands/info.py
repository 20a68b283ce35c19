"""
Info Command
============

Show version and backend information.

Usage:
    kpm-transport info
"""

import typer
from ..utils import print_banner, print_section, print_key_value, check_gpu
from ... import __version__


def info():
    """Show version and backend information."""
    print_banner()

    print_section("Package Information", "📦")
    print_key_value("Version", __version__)
    print_key_value("Package", "kpm-transport")

    print_section("Observables", "📈")
    print_key_value("DOS", "density of states        -> dos.out")
    print_key_value("VAC", "velocity autocorrelation -> vac.out")
    print_key_value("MSD", "mean-square displacement -> msd.out")

    print_section("Method", "💡")
    typer.echo("  Chebyshev moments + Jackson kernel (KPM)")
    typer.echo("  U(t) = Σ c_m(t) T_m(H),  c_m ∝ i^m J_m(t E_max)")
    typer.echo("  Series truncated once |J_m| < 1e-15")

    print_section("GPU Status", "🖥️")
    typer.echo(f"  {check_gpu()}")
