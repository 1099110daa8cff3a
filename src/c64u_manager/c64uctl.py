"""C64 Ultimate control CLI entrypoint."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Callable, NoReturn, Optional

import typer
from typing_extensions import Annotated

from . import commands
from .client import C64UClient
from .commands_model import ApiRequest
from .config import Settings, create_default_config, load_settings
from .const import D71_TRACKS, D81_TRACKS, LOG_LEVEL_ENV, VERSION, StreamType
from .exception import C64UError, TransportError
from .memory import format_address, format_dump, parse_address
from .output import Formatter
from .response import ApiResponse

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
USAGE_ERROR_EXIT_CODE = 2

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="CLI tool for controlling the Commodore C64 Ultimate.",
    no_args_is_help=True,
)
machine_app = typer.Typer(
    help="Machine control and memory operations.", no_args_is_help=True
)
drives_app = typer.Typer(
    help="Floppy drive and disk image management.", no_args_is_help=True
)
runners_app = typer.Typer(
    help="Play SID/MOD files and run programs or cartridges.",
    no_args_is_help=True,
)
streams_app = typer.Typer(
    help="Video, audio and debug streams (Ultimate 64 only).",
    no_args_is_help=True,
)
files_app = typer.Typer(
    help="File information and disk image creation.", no_args_is_help=True
)
config_app = typer.Typer(help="Manage c64u configuration.", no_args_is_help=True)

app.add_typer(machine_app, name="machine")
app.add_typer(drives_app, name="drives")
app.add_typer(runners_app, name="runners")
app.add_typer(streams_app, name="streams")
app.add_typer(files_app, name="files")
app.add_typer(config_app, name="config")


@dataclass
class AppContext:
    """Per-invocation state handed to every command through ``ctx.obj``."""

    settings: Settings
    client: C64UClient
    formatter: Formatter


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("c64u_manager").setLevel(level)
    # httpx logs every request at INFO; only show it when asked to.
    transport_level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("httpx").setLevel(transport_level)
    logging.getLogger("httpcore").setLevel(transport_level)


@app.callback()
def main(
    ctx: typer.Context,
    host: Annotated[
        Optional[str],
        typer.Option("--host", help="C64 Ultimate hostname or IP address"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", min=1, max=65535, help="HTTP port (default: 80)"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Enable verbose output")
    ] = False,
    json_output: Annotated[
        bool, typer.Option("--json", help="Output in JSON format")
    ] = False,
    no_color: Annotated[
        bool, typer.Option("--no-color", help="Disable colored output")
    ] = False,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", help="Read settings from this TOML file"),
    ] = None,
) -> None:
    """Control a C64 Ultimate through its REST API.

    Settings are resolved from CLI flags, then C64U_* environment variables,
    then ~/.config/c64u/config.toml (or ./config.toml), then defaults.
    """
    overrides = {
        "host": host,
        "port": port,
        "verbose": True if verbose else None,
        "json_output": True if json_output else None,
        "no_color": True if no_color else None,
    }
    try:
        settings = load_settings(overrides, config_file=config_file)
    except C64UError as exc:
        Formatter(json_mode=json_output, no_color=no_color).error(
            "Error loading config", [exc.message, *exc.details]
        )
        raise typer.Exit(code=1) from exc

    _configure_logging(settings.verbose)
    logger.debug("Using device at %s:%d", settings.host, settings.port)
    ctx.obj = AppContext(
        settings=settings,
        client=C64UClient(settings.host, settings.port, settings.timeout),
        formatter=Formatter(
            json_mode=settings.json_output, no_color=settings.no_color
        ),
    )


def _state(ctx: typer.Context) -> AppContext:
    return ctx.obj


def _fail(state: AppContext, failure: str, exc: C64UError) -> NoReturn:
    """Report an error and leave with exit code 1."""
    if isinstance(exc, TransportError):
        state.formatter.error(failure, [exc.message, *exc.details])
    else:
        state.formatter.error(exc.message, exc.details)
    raise typer.Exit(code=1) from exc


def _call(
    ctx: typer.Context, build: Callable[[], ApiRequest], failure: str
) -> ApiResponse:
    """Build and send a request; any error ends the command."""
    state = _state(ctx)
    try:
        return state.client.call(build())
    except C64UError as exc:
        _fail(state, failure, exc)


def _device_name(path: str) -> str:
    return PurePosixPath(path).name or path


def _with_name(data: dict[str, Any], name: str) -> dict[str, Any]:
    if name:
        data["name"] = name
    return data


# Top level
@app.command()
def version(ctx: typer.Context) -> None:
    """Show version information."""
    state = _state(ctx)
    if state.formatter.json_mode:
        state.formatter.print_data({"version": VERSION})
        return
    state.formatter.print_text(f"c64u version {VERSION}\n")


@app.command()
def about(ctx: typer.Context) -> None:
    """Get the C64 Ultimate REST API version."""
    state = _state(ctx)
    resp = _call(ctx, commands.version, "Failed to get API version")
    if state.formatter.json_mode:
        state.formatter.print_data(resp.payload)
        return
    try:
        api_version = resp.get_str("version")
    except C64UError as exc:
        _fail(state, "Failed to get API version", exc)
    if api_version:
        state.formatter.print_text(f"C64 Ultimate API version: {api_version}\n")
    else:
        state.formatter.print_data(resp.payload)


_INFO_FIELDS = (
    ("product", "Product"),
    ("firmware_version", "Firmware Version"),
    ("fpga_version", "FPGA Version"),
    ("core_version", "Core Version"),
    ("hostname", "Hostname"),
    ("unique_id", "Unique ID"),
)


@app.command()
def info(ctx: typer.Context) -> None:
    """Get device information: product, firmware versions and hostname."""
    state = _state(ctx)
    resp = _call(ctx, commands.info, "Failed to get device info")
    if state.formatter.json_mode:
        state.formatter.print_data(resp.payload)
        return
    try:
        values = [(label, resp.get_str(key)) for key, label in _INFO_FIELDS]
    except C64UError as exc:
        _fail(state, "Failed to get device info", exc)
    state.formatter.print_header("C64 Ultimate Device Information")
    state.formatter.blank_line()
    for label, value in values:
        if value:
            state.formatter.print_key_value(label, value)


# Config
@config_app.command("init")
def config_init(
    ctx: typer.Context,
    path: Annotated[
        Optional[Path],
        typer.Option(
            "--path", help="Write here instead of ~/.config/c64u/config.toml"
        ),
    ] = None,
) -> None:
    """Create the default configuration file."""
    state = _state(ctx)
    try:
        written = create_default_config(path)
    except C64UError as exc:
        _fail(state, "Failed to create config file", exc)
    state.formatter.success("Configuration file created", {"path": str(written)})


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the configuration in effect."""
    state = _state(ctx)
    data = state.settings.as_display_dict()
    if state.formatter.json_mode:
        state.formatter.print_data(data)
        return
    state.formatter.print_header("Current Configuration:")
    state.formatter.print_key_value("Host", state.settings.host)
    state.formatter.print_key_value("Port", state.settings.port)
    state.formatter.print_key_value("Verbose", state.settings.verbose)
    state.formatter.print_key_value("Timeout", f"{state.settings.timeout:g}s")
    if state.settings.config_file is not None:
        state.formatter.print_key_value("Config File", state.settings.config_file)


# Machine
@machine_app.command("reset")
def machine_reset(ctx: typer.Context) -> None:
    """Reset the machine without changing its configuration."""
    _call(ctx, commands.machine_reset, "Failed to reset machine")
    _state(ctx).formatter.success("Machine reset successfully")


@machine_app.command("reboot")
def machine_reboot(ctx: typer.Context) -> None:
    """Restart the machine with cartridge reinitialization."""
    _call(ctx, commands.machine_reboot, "Failed to reboot machine")
    _state(ctx).formatter.success("Machine rebooted successfully")


@machine_app.command("pause")
def machine_pause(ctx: typer.Context) -> None:
    """Pause the machine by pulling the DMA line low."""
    _call(ctx, commands.machine_pause, "Failed to pause machine")
    _state(ctx).formatter.success("Machine paused")


@machine_app.command("resume")
def machine_resume(ctx: typer.Context) -> None:
    """Resume a paused machine."""
    _call(ctx, commands.machine_resume, "Failed to resume machine")
    _state(ctx).formatter.success("Machine resumed")


@machine_app.command("poweroff")
def machine_poweroff(ctx: typer.Context) -> None:
    """Power off the machine (Ultimate 64 only)."""
    _call(ctx, commands.machine_poweroff, "Failed to power off machine")
    _state(ctx).formatter.success("Machine powered off")


@machine_app.command("menu-button")
def machine_menu_button(ctx: typer.Context) -> None:
    """Press the Menu button."""
    _call(ctx, commands.machine_menu_button, "Failed to activate menu button")
    _state(ctx).formatter.success("Menu button activated")


@machine_app.command("write-mem")
def machine_write_mem(
    ctx: typer.Context,
    address: Annotated[str, typer.Argument(help="Hex address, e.g. 0400")],
    data: Annotated[str, typer.Argument(help="Hex bytes, e.g. 01020304")],
) -> None:
    """Write up to 128 bytes via DMA, e.g. `write-mem d020 00`."""
    _call(
        ctx,
        lambda: commands.machine_write_mem(address, data),
        "Failed to write memory",
    )
    _state(ctx).formatter.success(f"Wrote data to address ${address}")


@machine_app.command("write-mem-file")
def machine_write_mem_file(
    ctx: typer.Context,
    address: Annotated[str, typer.Argument(help="Hex start address")],
    file: Annotated[Path, typer.Argument(help="Local binary file")],
) -> None:
    """Write the contents of a local binary file to memory via DMA."""
    _call(
        ctx,
        lambda: commands.machine_write_mem_file(address, file),
        "Failed to write memory from file",
    )
    _state(ctx).formatter.success(
        "Wrote file to memory",
        {"address": f"${address}", "file": str(file), "size": file.stat().st_size},
    )


@machine_app.command("read-mem")
def machine_read_mem(
    ctx: typer.Context,
    address: Annotated[str, typer.Argument(help="Hex start address")],
    length: Annotated[
        int, typer.Option("--length", min=0, help="Number of bytes to read")
    ] = 256,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the raw bytes to this file"),
    ] = None,
) -> None:
    """Read memory via DMA and show it as a hex dump."""
    state = _state(ctx)
    resp = _call(
        ctx,
        lambda: commands.machine_read_mem(address, length),
        "Failed to read memory",
    )
    start = parse_address(address)
    data = resp.raw_body
    label = f"${format_address(start)}"
    if length and len(data) < length and not state.formatter.json_mode:
        state.formatter.warning(
            f"Requested {length} bytes from {label}, device returned {len(data)}"
        )

    if output is not None:
        try:
            output.write_bytes(data)
        except OSError as exc:
            state.formatter.error("Failed to write file", [f"{output}: {exc}"])
            raise typer.Exit(code=1) from exc
        state.formatter.success(
            "Memory saved", {"address": label, "file": str(output), "size": len(data)}
        )
        return

    if state.formatter.json_mode:
        state.formatter.print_data(
            {"address": label, "length": len(data), "data": data.hex()}
        )
        return
    state.formatter.print_header(f"Memory dump from {label} ({len(data)} bytes)")
    state.formatter.blank_line()
    state.formatter.print_text(format_dump(data, start))


@machine_app.command("debug-reg")
def machine_debug_reg(ctx: typer.Context) -> None:
    """Read the $D7FF debug register (Ultimate 64 only)."""
    state = _state(ctx)
    resp = _call(ctx, commands.machine_debug_reg, "Failed to read debug register")
    if state.formatter.json_mode:
        state.formatter.print_data(resp.payload)
        return
    state.formatter.success("Debug register read", resp.payload)


@machine_app.command("debug-reg-set")
def machine_debug_reg_set(
    ctx: typer.Context,
    value: Annotated[str, typer.Argument(help="Hex byte, e.g. FF")],
) -> None:
    """Write the $D7FF debug register (Ultimate 64 only)."""
    _call(
        ctx,
        lambda: commands.machine_debug_reg_set(value),
        "Failed to write debug register",
    )
    _state(ctx).formatter.success(f"Debug register set to ${value}")


# Drives
def _render_drive(formatter: Formatter, name: str, details: dict) -> None:
    enabled = details.get("enabled") is True
    formatter.print_header(f"{name} ({'Enabled ✓' if enabled else 'Disabled ✗'})")
    formatter.blank_line()
    bus_id = details.get("bus_id")
    if isinstance(bus_id, (int, float)) and not isinstance(bus_id, bool):
        formatter.print_key_value("Bus ID", int(bus_id))
    for key, label in (("type", "Type"), ("rom", "ROM")):
        if details.get(key):
            formatter.print_key_value(label, details[key])
    if details.get("image_file"):
        formatter.print_key_value("Image", details["image_file"])
        if details.get("image_path"):
            formatter.print_key_value("Path", details["image_path"])
    else:
        formatter.print_text("  No disk mounted\n")

    partitions = [
        part
        for part in details.get("partitions") or []
        if isinstance(part, dict) and "id" in part and part.get("path")
    ]
    if partitions:
        formatter.blank_line()
        formatter.print_table(
            ["id", "path"], [(part["id"], part["path"]) for part in partitions]
        )
    if details.get("last_error"):
        formatter.blank_line()
        formatter.print_key_value("Last Error", details["last_error"])
    formatter.blank_line()


@drives_app.command("list")
def drives_list(ctx: typer.Context) -> None:
    """List all drives and their mounted images."""
    state = _state(ctx)
    resp = _call(ctx, commands.drives_list, "Failed to list drives")
    if state.formatter.json_mode:
        state.formatter.print_data(resp.payload)
        return
    try:
        drives = resp.get_list("drives", [])
    except C64UError as exc:
        _fail(state, "Failed to list drives", exc)
    if not drives:
        state.formatter.info("No drives found")
        return
    state.formatter.print_header("C64 Ultimate Drives")
    state.formatter.blank_line()
    # Each entry is a single-key object: {"a": {...}}
    for entry in drives:
        if not isinstance(entry, dict):
            continue
        for name, details in entry.items():
            if isinstance(details, dict):
                _render_drive(state.formatter, name, details)


@drives_app.command("mount")
def drives_mount(
    ctx: typer.Context,
    drive: Annotated[str, typer.Argument(help="Drive: a, b or bus id 8-11")],
    image: Annotated[str, typer.Argument(help="Image path on the device")],
    image_type: Annotated[
        Optional[str],
        typer.Option("--type", help="Image type (d64, g64, d71, g71, d81)"),
    ] = None,
    mode: Annotated[
        Optional[str],
        typer.Option("--mode", help="Mount mode (readwrite, readonly, unlinked)"),
    ] = None,
) -> None:
    """Mount a disk image that is already on the device's filesystem."""
    _call(
        ctx,
        lambda: commands.drives_mount(drive, image, image_type, mode),
        "Failed to mount image",
    )
    data: dict[str, Any] = {"drive": drive, "image": _device_name(image)}
    if mode:
        data["mode"] = mode
    _state(ctx).formatter.success("Disk image mounted", data)


@drives_app.command("mount-upload")
def drives_mount_upload(
    ctx: typer.Context,
    drive: Annotated[str, typer.Argument(help="Drive: a, b or bus id 8-11")],
    local_file: Annotated[Path, typer.Argument(help="Local disk image")],
    image_type: Annotated[
        Optional[str],
        typer.Option("--type", help="Image type (d64, g64, d71, g71, d81)"),
    ] = None,
    mode: Annotated[
        Optional[str],
        typer.Option("--mode", help="Mount mode (readwrite, readonly, unlinked)"),
    ] = None,
) -> None:
    """Upload a local disk image and mount it."""
    _call(
        ctx,
        lambda: commands.drives_mount_upload(drive, local_file, image_type, mode),
        "Failed to upload and mount image",
    )
    data: dict[str, Any] = {"drive": drive, "image": local_file.name}
    if mode:
        data["mode"] = mode
    _state(ctx).formatter.success("Disk image uploaded and mounted", data)


@drives_app.command("unmount")
def drives_unmount(
    ctx: typer.Context, drive: Annotated[str, typer.Argument()]
) -> None:
    """Remove the mounted image from a drive."""
    _call(ctx, lambda: commands.drives_remove(drive), "Failed to unmount disk")
    _state(ctx).formatter.success(f"Disk unmounted from drive {drive}")


@drives_app.command("reset")
def drives_reset(ctx: typer.Context, drive: Annotated[str, typer.Argument()]) -> None:
    """Reset a drive."""
    _call(ctx, lambda: commands.drives_reset(drive), "Failed to reset drive")
    _state(ctx).formatter.success(f"Drive {drive} reset")


@drives_app.command("on")
def drives_on(ctx: typer.Context, drive: Annotated[str, typer.Argument()]) -> None:
    """Turn a drive on."""
    _call(ctx, lambda: commands.drives_on(drive), "Failed to enable drive")
    _state(ctx).formatter.success(f"Drive {drive} enabled")


@drives_app.command("off")
def drives_off(ctx: typer.Context, drive: Annotated[str, typer.Argument()]) -> None:
    """Turn a drive off."""
    _call(ctx, lambda: commands.drives_off(drive), "Failed to disable drive")
    _state(ctx).formatter.success(f"Drive {drive} disabled")


@drives_app.command("load-rom")
def drives_load_rom(
    ctx: typer.Context,
    drive: Annotated[str, typer.Argument()],
    file: Annotated[str, typer.Argument(help="ROM path on the device")],
) -> None:
    """Temporarily load a 16K/32K drive ROM from the device's filesystem."""
    _call(
        ctx, lambda: commands.drives_load_rom(drive, file), "Failed to load ROM"
    )
    _state(ctx).formatter.success(
        "Custom ROM loaded", {"drive": drive, "rom": _device_name(file)}
    )


@drives_app.command("load-rom-upload")
def drives_load_rom_upload(
    ctx: typer.Context,
    drive: Annotated[str, typer.Argument()],
    local_file: Annotated[Path, typer.Argument(help="Local ROM file")],
) -> None:
    """Upload a local drive ROM and load it temporarily."""
    _call(
        ctx,
        lambda: commands.drives_load_rom_upload(drive, local_file),
        "Failed to upload and load ROM",
    )
    _state(ctx).formatter.success(
        "Custom ROM uploaded and loaded", {"drive": drive, "rom": local_file.name}
    )


@drives_app.command("set-mode")
def drives_set_mode(
    ctx: typer.Context,
    drive: Annotated[str, typer.Argument()],
    mode: Annotated[str, typer.Argument(help="1541, 1571 or 1581")],
) -> None:
    """Change the drive emulation mode."""
    _call(
        ctx,
        lambda: commands.drives_set_mode(drive, mode),
        "Failed to set drive mode",
    )
    _state(ctx).formatter.success(
        "Drive mode changed", {"drive": drive, "mode": mode}
    )


# Runners
def _song_suffix(song: int) -> str:
    return f" (song {song})" if song > 0 else ""


@runners_app.command("sidplay")
def runners_sidplay(
    ctx: typer.Context,
    file: Annotated[str, typer.Argument(help="SID path on the device")],
    song: Annotated[
        int, typer.Option("--song", help="Song number to play (0 = default)")
    ] = 0,
) -> None:
    """Play a SID file from the device's filesystem."""
    _call(ctx, lambda: commands.sid_play(file, song), "Failed to play SID file")
    _state(ctx).formatter.success(
        f"Playing SID file: {_device_name(file)}{_song_suffix(song)}"
    )


@runners_app.command("sidplay-upload")
def runners_sidplay_upload(
    ctx: typer.Context,
    local_file: Annotated[Path, typer.Argument(help="Local SID file")],
    song: Annotated[
        int, typer.Option("--song", help="Song number to play (0 = default)")
    ] = 0,
) -> None:
    """Upload a local SID file and play it."""
    _call(
        ctx,
        lambda: commands.sid_play_upload(local_file, song),
        "Failed to upload and play SID file",
    )
    _state(ctx).formatter.success(
        f"Uploaded and playing: {local_file.name}{_song_suffix(song)}"
    )


@runners_app.command("modplay")
def runners_modplay(
    ctx: typer.Context,
    file: Annotated[str, typer.Argument(help="MOD path on the device")],
) -> None:
    """Play an Amiga MOD file from the device's filesystem."""
    _call(ctx, lambda: commands.mod_play(file), "Failed to play MOD file")
    _state(ctx).formatter.success(f"Playing MOD file: {_device_name(file)}")


@runners_app.command("modplay-upload")
def runners_modplay_upload(
    ctx: typer.Context,
    local_file: Annotated[Path, typer.Argument(help="Local MOD file")],
) -> None:
    """Upload a local MOD file and play it."""
    _call(
        ctx,
        lambda: commands.mod_play_upload(local_file),
        "Failed to upload and play MOD file",
    )
    _state(ctx).formatter.success(f"Uploaded and playing: {local_file.name}")


@runners_app.command("load-prg")
def runners_load_prg(
    ctx: typer.Context,
    file: Annotated[str, typer.Argument(help="PRG path on the device")],
) -> None:
    """Load a program via DMA without running it."""
    _call(ctx, lambda: commands.load_prg(file), "Failed to load PRG file")
    _state(ctx).formatter.success(f"Loaded PRG file: {_device_name(file)}")


@runners_app.command("load-prg-upload")
def runners_load_prg_upload(
    ctx: typer.Context,
    local_file: Annotated[Path, typer.Argument(help="Local PRG file")],
) -> None:
    """Upload a local program and load it without running it."""
    _call(
        ctx,
        lambda: commands.load_prg_upload(local_file),
        "Failed to upload and load PRG file",
    )
    _state(ctx).formatter.success(f"Uploaded and loaded: {local_file.name}")


@runners_app.command("run-prg")
def runners_run_prg(
    ctx: typer.Context,
    file: Annotated[str, typer.Argument(help="PRG path on the device")],
) -> None:
    """Load a program via DMA and run it."""
    _call(ctx, lambda: commands.run_prg(file), "Failed to run PRG file")
    _state(ctx).formatter.success(f"Running PRG file: {_device_name(file)}")


@runners_app.command("run-prg-upload")
def runners_run_prg_upload(
    ctx: typer.Context,
    local_file: Annotated[Path, typer.Argument(help="Local PRG file")],
) -> None:
    """Upload a local program and run it."""
    _call(
        ctx,
        lambda: commands.run_prg_upload(local_file),
        "Failed to upload and run PRG file",
    )
    _state(ctx).formatter.success(f"Uploaded and running: {local_file.name}")


@runners_app.command("run-crt")
def runners_run_crt(
    ctx: typer.Context,
    file: Annotated[str, typer.Argument(help="CRT path on the device")],
) -> None:
    """Start a cartridge image with a reset."""
    _call(ctx, lambda: commands.run_crt(file), "Failed to start cartridge")
    _state(ctx).formatter.success(f"Starting cartridge: {_device_name(file)}")


@runners_app.command("run-crt-upload")
def runners_run_crt_upload(
    ctx: typer.Context,
    local_file: Annotated[Path, typer.Argument(help="Local CRT file")],
) -> None:
    """Upload a local cartridge image and start it."""
    _call(
        ctx,
        lambda: commands.run_crt_upload(local_file),
        "Failed to upload and start cartridge",
    )
    _state(ctx).formatter.success(f"Uploaded and starting: {local_file.name}")


# Streams
@streams_app.command("start")
def streams_start(
    ctx: typer.Context,
    stream: Annotated[str, typer.Argument(help="video, audio or debug")],
    ip: Annotated[str, typer.Argument(help="Destination IP address")],
) -> None:
    """Start a stream towards an IP address."""
    _call(ctx, lambda: commands.streams_start(stream, ip), "Failed to start stream")
    stream_type = StreamType(stream.strip().lower())
    _state(ctx).formatter.success(
        "Stream started",
        {
            "stream": stream_type.value,
            "destination": f"{ip.strip()}:{stream_type.default_port}",
        },
    )


@streams_app.command("stop")
def streams_stop(
    ctx: typer.Context,
    stream: Annotated[str, typer.Argument(help="video, audio or debug")],
) -> None:
    """Stop a running stream."""
    _call(ctx, lambda: commands.streams_stop(stream), "Failed to stop stream")
    _state(ctx).formatter.success(f"Stream '{stream}' stopped")


# Files
@files_app.command("info")
def files_info(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Path on the device; wildcards allowed")],
) -> None:
    """Show size and type of files on the device."""
    state = _state(ctx)
    resp = _call(ctx, lambda: commands.files_info(path), "Failed to get file info")
    if state.formatter.json_mode:
        state.formatter.print_data(resp.payload)
        return
    try:
        files = resp.get_list("files", [])
    except C64UError as exc:
        _fail(state, "Failed to get file info", exc)
    if not files:
        state.formatter.info("No files found")
        return
    state.formatter.print_header(f"File Information: {path}")
    state.formatter.blank_line()
    for entry in files:
        if not isinstance(entry, dict):
            continue
        for name, details in entry.items():
            if not isinstance(details, dict):
                continue
            state.formatter.print_header(name)
            size = details.get("size")
            if isinstance(size, (int, float)) and not isinstance(size, bool):
                state.formatter.print_key_value("Size", f"{int(size)} bytes")
            if details.get("extension"):
                state.formatter.print_key_value("Type", details["extension"])
            state.formatter.blank_line()


@files_app.command("create-d64")
def files_create_d64(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Image path on the device")],
    tracks: Annotated[
        int, typer.Option("--tracks", help="Number of tracks (35 or 40)")
    ] = 35,
    name: Annotated[str, typer.Option("--name", help="Disk name")] = "",
) -> None:
    """Create a D64 disk image on the device."""
    _call(
        ctx,
        lambda: commands.files_create_d64(path, tracks, name),
        "Failed to create D64 image",
    )
    _state(ctx).formatter.success(
        "D64 image created", _with_name({"path": path, "tracks": tracks}, name)
    )


@files_app.command("create-d71")
def files_create_d71(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Image path on the device")],
    name: Annotated[str, typer.Option("--name", help="Disk name")] = "",
) -> None:
    """Create a D71 disk image (70 tracks) on the device."""
    _call(
        ctx,
        lambda: commands.files_create_d71(path, name),
        "Failed to create D71 image",
    )
    _state(ctx).formatter.success(
        "D71 image created", _with_name({"path": path, "tracks": D71_TRACKS}, name)
    )


@files_app.command("create-d81")
def files_create_d81(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Image path on the device")],
    name: Annotated[str, typer.Option("--name", help="Disk name")] = "",
) -> None:
    """Create a D81 disk image (160 tracks) on the device."""
    _call(
        ctx,
        lambda: commands.files_create_d81(path, name),
        "Failed to create D81 image",
    )
    _state(ctx).formatter.success(
        "D81 image created", _with_name({"path": path, "tracks": D81_TRACKS}, name)
    )


@files_app.command("create-dnp")
def files_create_dnp(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Image path on the device")],
    tracks: Annotated[
        int, typer.Option("--tracks", help="Number of tracks (1-255, required)")
    ] = 0,
    name: Annotated[str, typer.Option("--name", help="Disk name")] = "",
) -> None:
    """Create a DNP disk image on the device."""
    _call(
        ctx,
        lambda: commands.files_create_dnp(path, tracks, name),
        "Failed to create DNP image",
    )
    _state(ctx).formatter.success(
        "DNP image created", _with_name({"path": path, "tracks": tracks}, name)
    )


def run() -> None:
    """Console script entry point.

    Click reports usage errors (bad values, missing arguments) with status 2.
    They are remapped so every failure exits with 1.
    """
    try:
        app(prog_name="c64u")
    except SystemExit as exc:
        if exc.code == USAGE_ERROR_EXIT_CODE:
            raise SystemExit(1) from exc
        raise


if __name__ == "__main__":
    run()
