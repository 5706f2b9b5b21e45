"""
Docking Control CLI
===================

Inspect vehicle configurations and run headless scripted sessions.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from docking_control.config.io import ConfigIO
from docking_control.config.simulation_config import SimulationConfig
from docking_control.core.exceptions import ConfigurationError
from docking_control.core.momentum_control import ControlMode
from docking_control.core.session import SimulationSession
from docking_control.core.thruster_binding import ControlChannel, parse_channel_label
from docking_control.utils.logging_config import setup_logging

app = typer.Typer(
    help="Docking Control - attitude and propulsion control core CLI",
    add_completion=False,
)
console = Console()


class FrameClock:
    """Deterministic time source advanced by the run loop."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float) -> None:
        self.now += dt


def _load_config(
    config_file: Optional[Path], initial_position: Optional[Path]
) -> SimulationConfig:
    try:
        if config_file is None:
            config = SimulationConfig.create_default()
            if initial_position is not None:
                config.app_config.docking = ConfigIO.load_initial_position(
                    initial_position, base=config.app_config.docking
                )
            return config
        return ConfigIO.load_simulation_config(config_file, initial_position)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(code=1)


def _channel_table(session: SimulationSession) -> Table:
    table = Table(title="Control Channels")
    table.add_column("Channel")
    table.add_column("Key", justify="center")
    table.add_column("Thrusters")
    for channel in ControlChannel:
        indices = session.channel_map.get(channel, [])
        labels = ", ".join(session.vehicle.thrusters[i].label for i in indices) or "-"
        table.add_row(channel.name, channel.value, labels)
    return table


def _actuator_table(session: SimulationSession) -> Table:
    status = session.get_actuator_status()
    table = Table(title=f"Momentum Actuators (mode: {status.mode.display_name})")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Momentum", justify="right")
    table.add_column("Capacity", justify="right")
    table.add_column("Fill %", justify="right")
    for wheel in status.reaction_wheels:
        table.add_row(
            wheel.name,
            "wheel",
            f"{wheel.momentum:.3f}",
            f"{wheel.max_momentum:.1f}",
            f"{wheel.percentage:.1f}",
        )
    for cmg in status.cmgs:
        table.add_row(
            cmg.name,
            "CMG",
            f"{cmg.momentum:.3f}",
            f"{cmg.max_momentum:.1f}",
            f"{cmg.percentage:.1f}",
        )
    return table


def _status_table(session: SimulationSession) -> Table:
    docking = session.docking.compute_status(session.body)
    fuel = session.get_fuel_status()
    table = Table(title="Session Status", show_header=False)
    table.add_column("Field")
    table.add_column("Value", justify="right")
    table.add_row("Docking state", session.docking.state.value.upper())
    table.add_row("Elapsed", session.formatted_elapsed())
    table.add_row("Distance [m]", f"{docking.distance:.3f}")
    table.add_row("Angle error [deg]", f"{docking.angle_error_deg:.2f}")
    table.add_row("Lateral speed [m/s]", f"{docking.lateral_speed:.3f}")
    table.add_row("Axial speed [m/s]", f"{docking.axial_speed:.3f}")
    table.add_row("Angular speed [deg/s]", f"{docking.angular_speed:.3f}")
    table.add_row("Fuel [kg]", f"{fuel.fuel_mass:.4f} ({fuel.percentage:.1f}%)")
    table.add_row("Total mass [kg]", f"{fuel.total_mass:.4f}")
    return table


@app.command()
def inspect(
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Vehicle configuration (JSON/YAML)"
    ),
):
    """
    Show the channel map and actuator banks of a vehicle configuration.
    """
    config = _load_config(config_file, None)
    session = SimulationSession(config)

    console.print(
        Panel.fit(
            f"{len(session.vehicle.thrusters)} thrusters, "
            f"{len(session.vehicle.reaction_wheels)} reaction wheels, "
            f"{len(session.vehicle.cmgs)} CMGs",
            title="Vehicle",
            style="bold blue",
        )
    )
    console.print(_channel_table(session))
    console.print(_actuator_table(session))


@app.command()
def run(
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Vehicle configuration (JSON/YAML)"
    ),
    initial_position: Optional[Path] = typer.Option(
        None, "--initial-position", "-p", help="Docking reference file (JSON/YAML)"
    ),
    channels: List[str] = typer.Option(
        [], "--channel", "-k", help="Channel to engage during the burn (name or key, repeatable)"
    ),
    mode: str = typer.Option(
        "thrusters", "--mode", "-m", help="thrusters, reactionwheels or cmgs"
    ),
    burn: float = typer.Option(1.0, "--burn", help="Burn duration [s]"),
    coast: float = typer.Option(0.0, "--coast", help="Coast duration after the burn [s]"),
    frame_dt: float = typer.Option(1.0 / 60.0, "--frame-dt", help="Frame duration [s]"),
    torque_percentage: Optional[int] = typer.Option(
        None, "--torque-percentage", help="Momentum-mode torque request [1-100 %]"
    ),
    desaturate: bool = typer.Option(
        False, "--desaturate", help="Trigger momentum desaturation after the burn"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """
    Run a headless scripted session: undock, burn, coast, report.
    """
    setup_logging("docking_control", level=logging.DEBUG if verbose else logging.WARNING)

    if frame_dt <= 0:
        console.print("[red]--frame-dt must be positive[/red]")
        raise typer.Exit(code=1)

    engaged = []
    for label in channels:
        channel = parse_channel_label(label)
        if channel is None:
            console.print(f"[red]Unknown channel: {label}[/red]")
            raise typer.Exit(code=1)
        engaged.append(channel)

    try:
        target_mode = ControlMode(mode.lower())
    except ValueError:
        console.print(f"[red]Unknown mode: {mode}[/red]")
        raise typer.Exit(code=1)

    config = _load_config(config_file, initial_position)
    clock = FrameClock()
    session = SimulationSession(config, time_source=clock)
    if torque_percentage is not None:
        session.set_torque_percentage(torque_percentage)

    for _ in range(3):
        if session.mode == target_mode:
            break
        session.toggle_mode()
    if session.mode != target_mode:
        console.print(f"[red]Mode {target_mode.value} is not available for this vehicle[/red]")
        raise typer.Exit(code=1)

    console.print(
        Panel.fit(
            f"mode: {session.mode.display_name}, channels: "
            f"{', '.join(c.name for c in engaged) or 'none'}",
            title="Docking Control Run",
            style="bold blue",
        )
    )

    session.toggle_pause()

    def advance(seconds: float) -> None:
        for _ in range(int(round(seconds / frame_dt))):
            clock.advance(frame_dt)
            context = session.step(frame_dt)
            if context.error:
                console.print(f"[red]Step {context.step_number} failed[/red]")
            if session.docking.is_docked:
                console.print("[green]Docked.[/green]")
                return

    for channel in engaged:
        session.press_channel(channel)
    advance(burn)
    for channel in engaged:
        session.release_channel(channel)

    if desaturate:
        result = session.desaturate(frame_dt)
        if not result.active:
            console.print("[yellow]Desaturation not needed or unavailable[/yellow]")

    advance(coast)

    console.print(_status_table(session))
    console.print(_actuator_table(session))


@app.command("export-config")
def export_config(
    output: Path = typer.Argument(..., help="Output path (.json, .yaml or .yml)"),
):
    """
    Write the built-in default vehicle configuration to a file.
    """
    try:
        ConfigIO.save(SimulationConfig.create_default(), output)
    except ConfigurationError as e:
        console.print(f"[bold red]Export failed:[/bold red] {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]Default configuration written to {output}[/green]")


if __name__ == "__main__":
    app()
