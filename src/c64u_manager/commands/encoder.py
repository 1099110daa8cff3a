"""Request builders for the C64 Ultimate REST API.

Every public function returns an ``ApiRequest`` and performs all argument
validation up front, so a ``CommandValidationError`` is raised before any
network activity. Paths use the device's ``resource:verb`` convention, e.g.
``/v1/machine:reset`` or ``/v1/drives/8:mount``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from ..commands_model import (
    OPERATIONS,
    ApiRequest,
    BodyKind,
    D64Args,
    DebugRegisterArgs,
    DnpArgs,
    DriveModeArgs,
    MountArgs,
    Operation,
    ReadMemArgs,
    SidPlayArgs,
    StreamArgs,
    WriteMemArgs,
    validate_args,
)
from ..const import D64_DEFAULT_TRACKS, DriveMode, StreamType
from ..exception import CommandValidationError
from ..memory import bytes_to_hex, format_address, parse_address

logger = logging.getLogger(__name__)


def build_request(
    operation: Operation,
    params: Optional[Dict[str, Any]] = None,
    upload_path: Optional[Path] = None,
    **path_args: str,
) -> ApiRequest:
    """Assemble a request from the operation table.

    Parameters whose value is ``None``, ``""`` or ``0`` are dropped, so an
    unset optional never reaches the device as an explicit zero.

    Args:
        operation: Operation to build
        params: Query parameters, filtered against the operation table
        upload_path: Local file to stream for upload operations
        **path_args: Values substituted into the path template

    Raises:
        CommandValidationError: If a required parameter or path value is missing
    """
    entry = OPERATIONS[operation]

    for name, value in path_args.items():
        if not str(value).strip():
            raise CommandValidationError(
                f"Missing {name} for '{operation.value}'",
                [f"{name} must not be empty"],
            )
    # "?" and "#" must not end the path; "/" and "*" stay literal.
    encoded = {
        name: quote(str(value), safe="/*") for name, value in path_args.items()
    }
    try:
        path = entry.path_template.format(**encoded)
    except KeyError as exc:
        raise CommandValidationError(
            f"Missing {exc.args[0]} for '{operation.value}'"
        ) from exc

    query: Dict[str, str] = {}
    for name, value in (params or {}).items():
        if name not in entry.params:
            raise ValueError(
                f"Operation '{operation.value}' does not accept parameter '{name}'"
            )
        if value is None or value == "" or value == 0:
            continue
        query[name] = str(value)

    missing = [name for name in entry.required if name not in query]
    if missing:
        raise CommandValidationError(
            f"Missing required parameters for '{operation.value}'",
            [f"{name} is required" for name in missing],
        )

    if entry.body_kind is BodyKind.RAW_FILE_STREAM:
        if upload_path is None:
            raise CommandValidationError(
                f"Operation '{operation.value}' requires a local file"
            )
        body_kind = BodyKind.RAW_FILE_STREAM
    else:
        body_kind = (
            BodyKind.FORM_PARAMS_AS_QUERY if query else BodyKind.NONE
        )

    request = ApiRequest(
        operation=operation,
        method=entry.method,
        path=path,
        params=query,
        body_kind=body_kind,
        upload_path=Path(upload_path) if upload_path is not None else None,
    )
    logger.debug("Built request %s", request.describe())
    return request


# Top level
def version() -> ApiRequest:
    return build_request(Operation.VERSION)


def info() -> ApiRequest:
    return build_request(Operation.INFO)


# Machine
def machine_reset() -> ApiRequest:
    """Reset without changing the configuration."""
    return build_request(Operation.MACHINE_RESET)


def machine_reboot() -> ApiRequest:
    """Restart with cartridge reinitialization."""
    return build_request(Operation.MACHINE_REBOOT)


def machine_pause() -> ApiRequest:
    """Pause the machine by pulling the DMA line low."""
    return build_request(Operation.MACHINE_PAUSE)


def machine_resume() -> ApiRequest:
    return build_request(Operation.MACHINE_RESUME)


def machine_poweroff() -> ApiRequest:
    """Power off (Ultimate 64 only)."""
    return build_request(Operation.MACHINE_POWEROFF)


def machine_menu_button() -> ApiRequest:
    return build_request(Operation.MACHINE_MENU_BUTTON)


def machine_write_mem(address: str, data: str) -> ApiRequest:
    """Write up to 128 bytes via DMA starting at ``address``.

    Args:
        address: Hex address, e.g. ``0400``, ``$d020`` or ``0x0400``
        data: Even-length hex byte string, e.g. ``01020304``
    """
    args = validate_args(WriteMemArgs, "write-mem", address=address, data=data)
    return build_request(
        Operation.MACHINE_WRITEMEM,
        {
            "address": format_address(args.address),
            "data": bytes_to_hex(args.data),
        },
    )


def machine_write_mem_file(address: str, local_file: Path) -> ApiRequest:
    """Write the contents of a local binary file starting at ``address``."""
    start = parse_address(address)
    return build_request(
        Operation.MACHINE_WRITEMEM_UPLOAD,
        {"address": format_address(start)},
        upload_path=local_file,
    )


def machine_read_mem(address: str, length: int = 0) -> ApiRequest:
    """Read memory via DMA; a zero length leaves the size to the device."""
    args = validate_args(ReadMemArgs, "read-mem", address=address, length=length)
    return build_request(
        Operation.MACHINE_READMEM,
        {"address": format_address(args.address), "length": args.length},
    )


def machine_debug_reg() -> ApiRequest:
    """Read the $D7FF debug register (Ultimate 64 only)."""
    return build_request(Operation.MACHINE_DEBUGREG)


def machine_debug_reg_set(value: str) -> ApiRequest:
    args = validate_args(DebugRegisterArgs, "debug-reg-set", value=value)
    return build_request(Operation.MACHINE_DEBUGREG_SET, {"value": args.value})


# Drives
def drives_list() -> ApiRequest:
    return build_request(Operation.DRIVES_LIST)


def drives_mount(
    drive: str,
    image: str,
    image_type: Optional[str] = None,
    mode: Optional[str] = None,
) -> ApiRequest:
    """Mount an image that already lives on the device's filesystem."""
    args = validate_args(MountArgs, "mount", image_type=image_type, mode=mode)
    return build_request(
        Operation.DRIVES_MOUNT,
        {
            "image": image,
            "type": args.image_type.value if args.image_type else None,
            "mode": args.mode.value if args.mode else None,
        },
        drive=drive,
    )


def drives_mount_upload(
    drive: str,
    local_file: Path,
    image_type: Optional[str] = None,
    mode: Optional[str] = None,
) -> ApiRequest:
    """Upload a local image and mount it."""
    args = validate_args(MountArgs, "mount-upload", image_type=image_type, mode=mode)
    return build_request(
        Operation.DRIVES_MOUNT_UPLOAD,
        {
            "type": args.image_type.value if args.image_type else None,
            "mode": args.mode.value if args.mode else None,
        },
        upload_path=local_file,
        drive=drive,
    )


def drives_reset(drive: str) -> ApiRequest:
    return build_request(Operation.DRIVES_RESET, drive=drive)


def drives_remove(drive: str) -> ApiRequest:
    """Unmount the image from ``drive``."""
    return build_request(Operation.DRIVES_REMOVE, drive=drive)


def drives_on(drive: str) -> ApiRequest:
    return build_request(Operation.DRIVES_ON, drive=drive)


def drives_off(drive: str) -> ApiRequest:
    return build_request(Operation.DRIVES_OFF, drive=drive)


def drives_load_rom(drive: str, file: str) -> ApiRequest:
    """Temporarily load a 16K/32K drive ROM from the device's filesystem."""
    return build_request(Operation.DRIVES_LOAD_ROM, {"file": file}, drive=drive)


def drives_load_rom_upload(drive: str, local_file: Path) -> ApiRequest:
    return build_request(
        Operation.DRIVES_LOAD_ROM_UPLOAD, upload_path=local_file, drive=drive
    )


def drives_set_mode(drive: str, mode: str) -> ApiRequest:
    """Switch drive emulation to 1541, 1571 or 1581."""
    try:
        args = validate_args(DriveModeArgs, "set-mode", mode=str(mode).strip())
    except CommandValidationError as exc:
        valid = ", ".join(member.value for member in DriveMode)
        raise CommandValidationError(
            "Invalid mode",
            [f"Mode '{mode}' is not valid", f"Valid modes: {valid}"],
        ) from exc
    return build_request(
        Operation.DRIVES_SET_MODE, {"mode": args.mode.value}, drive=drive
    )


# Runners
def sid_play(file: str, song: int = 0) -> ApiRequest:
    """Play a SID file; song 0 lets the player pick its default tune."""
    args = validate_args(SidPlayArgs, "sidplay", song=song)
    return build_request(
        Operation.RUNNERS_SIDPLAY, {"file": file, "songnr": args.song}
    )


def sid_play_upload(local_file: Path, song: int = 0) -> ApiRequest:
    args = validate_args(SidPlayArgs, "sidplay-upload", song=song)
    return build_request(
        Operation.RUNNERS_SIDPLAY_UPLOAD,
        {"songnr": args.song},
        upload_path=local_file,
    )


def mod_play(file: str) -> ApiRequest:
    return build_request(Operation.RUNNERS_MODPLAY, {"file": file})


def mod_play_upload(local_file: Path) -> ApiRequest:
    return build_request(Operation.RUNNERS_MODPLAY_UPLOAD, upload_path=local_file)


def load_prg(file: str) -> ApiRequest:
    """Load a program via DMA without starting it."""
    return build_request(Operation.RUNNERS_LOAD_PRG, {"file": file})


def load_prg_upload(local_file: Path) -> ApiRequest:
    return build_request(Operation.RUNNERS_LOAD_PRG_UPLOAD, upload_path=local_file)


def run_prg(file: str) -> ApiRequest:
    """Load a program and run it."""
    return build_request(Operation.RUNNERS_RUN_PRG, {"file": file})


def run_prg_upload(local_file: Path) -> ApiRequest:
    return build_request(Operation.RUNNERS_RUN_PRG_UPLOAD, upload_path=local_file)


def run_crt(file: str) -> ApiRequest:
    """Start a cartridge image with a reset."""
    return build_request(Operation.RUNNERS_RUN_CRT, {"file": file})


def run_crt_upload(local_file: Path) -> ApiRequest:
    return build_request(Operation.RUNNERS_RUN_CRT_UPLOAD, upload_path=local_file)


# Streams
def _stream_type(stream: str, action: str) -> StreamType:
    try:
        return validate_args(StreamArgs, action, stream=stream).stream
    except CommandValidationError as exc:
        valid = ", ".join(member.value for member in StreamType)
        raise CommandValidationError(
            "Invalid stream type",
            [f"Stream '{stream}' is not valid", f"Valid streams: {valid}"],
        ) from exc


def streams_start(stream: str, ip: str) -> ApiRequest:
    """Start a video, audio or debug stream towards ``ip``.

    The device chooses the destination port: 11000 for video, 11001 for
    audio and 11002 for debug.
    """
    stream_type = _stream_type(stream, "streams start")
    return build_request(
        Operation.STREAMS_START, {"ip": ip.strip()}, stream=stream_type.value
    )


def streams_stop(stream: str) -> ApiRequest:
    stream_type = _stream_type(stream, "streams stop")
    return build_request(Operation.STREAMS_STOP, stream=stream_type.value)


# Files
def files_info(path: str) -> ApiRequest:
    """Return size and extension of a file; wildcards are allowed."""
    return build_request(Operation.FILES_INFO, path=path)


def files_create_d64(
    path: str, tracks: int = 0, disk_name: str = ""
) -> ApiRequest:
    """Create a D64 image with 35 (default) or 40 tracks."""
    args = validate_args(
        D64Args,
        "create-d64",
        tracks=tracks or D64_DEFAULT_TRACKS,
        disk_name=disk_name,
    )
    return build_request(
        Operation.FILES_CREATE_D64,
        {"tracks": args.tracks, "diskname": args.disk_name},
        path=path,
    )


def files_create_d71(path: str, disk_name: str = "") -> ApiRequest:
    return build_request(
        Operation.FILES_CREATE_D71, {"diskname": disk_name}, path=path
    )


def files_create_d81(path: str, disk_name: str = "") -> ApiRequest:
    return build_request(
        Operation.FILES_CREATE_D81, {"diskname": disk_name}, path=path
    )


def files_create_dnp(
    path: str, tracks: Optional[int], disk_name: str = ""
) -> ApiRequest:
    """Create a DNP image; the track count (1-255) has no default."""
    if not tracks:
        raise CommandValidationError(
            "Missing required flag", ["--tracks is required for DNP images"]
        )
    args = validate_args(DnpArgs, "create-dnp", tracks=tracks, disk_name=disk_name)
    return build_request(
        Operation.FILES_CREATE_DNP,
        {"tracks": args.tracks, "diskname": args.disk_name},
        path=path,
    )
