"""Operation table, request model and argument schemas for device commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .const import (
    API_PREFIX,
    D64_DEFAULT_TRACKS,
    DNP_MAX_TRACKS,
    MAX_READ_MEM_LENGTH,
    MAX_WRITE_MEM_BYTES,
    DriveMode,
    ImageType,
    MountMode,
    StreamType,
)
from .exception import CommandValidationError
from .memory import parse_address, parse_byte_string

HttpMethod = Literal["GET", "PUT", "POST"]


class BodyKind(str, Enum):
    """How a request carries its arguments."""

    NONE = "none"
    FORM_PARAMS_AS_QUERY = "form_params_as_query"
    RAW_FILE_STREAM = "raw_file_stream"


class Operation(str, Enum):
    """Every operation the client can send to the device."""

    VERSION = "version"
    INFO = "info"

    MACHINE_RESET = "machine_reset"
    MACHINE_REBOOT = "machine_reboot"
    MACHINE_PAUSE = "machine_pause"
    MACHINE_RESUME = "machine_resume"
    MACHINE_POWEROFF = "machine_poweroff"
    MACHINE_MENU_BUTTON = "machine_menu_button"
    MACHINE_WRITEMEM = "machine_writemem"
    MACHINE_WRITEMEM_UPLOAD = "machine_writemem_upload"
    MACHINE_READMEM = "machine_readmem"
    MACHINE_DEBUGREG = "machine_debugreg"
    MACHINE_DEBUGREG_SET = "machine_debugreg_set"

    DRIVES_LIST = "drives_list"
    DRIVES_MOUNT = "drives_mount"
    DRIVES_MOUNT_UPLOAD = "drives_mount_upload"
    DRIVES_RESET = "drives_reset"
    DRIVES_REMOVE = "drives_remove"
    DRIVES_ON = "drives_on"
    DRIVES_OFF = "drives_off"
    DRIVES_LOAD_ROM = "drives_load_rom"
    DRIVES_LOAD_ROM_UPLOAD = "drives_load_rom_upload"
    DRIVES_SET_MODE = "drives_set_mode"

    RUNNERS_SIDPLAY = "runners_sidplay"
    RUNNERS_SIDPLAY_UPLOAD = "runners_sidplay_upload"
    RUNNERS_MODPLAY = "runners_modplay"
    RUNNERS_MODPLAY_UPLOAD = "runners_modplay_upload"
    RUNNERS_LOAD_PRG = "runners_load_prg"
    RUNNERS_LOAD_PRG_UPLOAD = "runners_load_prg_upload"
    RUNNERS_RUN_PRG = "runners_run_prg"
    RUNNERS_RUN_PRG_UPLOAD = "runners_run_prg_upload"
    RUNNERS_RUN_CRT = "runners_run_crt"
    RUNNERS_RUN_CRT_UPLOAD = "runners_run_crt_upload"

    STREAMS_START = "streams_start"
    STREAMS_STOP = "streams_stop"

    FILES_INFO = "files_info"
    FILES_CREATE_D64 = "files_create_d64"
    FILES_CREATE_D71 = "files_create_d71"
    FILES_CREATE_D81 = "files_create_d81"
    FILES_CREATE_DNP = "files_create_dnp"


@dataclass(frozen=True, slots=True)
class OperationSpec:
    """Method, path template and accepted query parameters of an operation."""

    method: HttpMethod
    path_template: str
    body_kind: BodyKind = BodyKind.NONE
    params: tuple[str, ...] = ()
    required: tuple[str, ...] = ()


def _put(path: str, *params: str, required: tuple[str, ...] = ()) -> OperationSpec:
    return OperationSpec("PUT", path, BodyKind.NONE, params, required)


def _upload(path: str, *params: str) -> OperationSpec:
    return OperationSpec("POST", path, BodyKind.RAW_FILE_STREAM, params)


def _get(path: str, *params: str, required: tuple[str, ...] = ()) -> OperationSpec:
    return OperationSpec("GET", path, BodyKind.NONE, params, required)


_MACHINE = f"{API_PREFIX}/machine"
_DRIVE = f"{API_PREFIX}/drives/{{drive}}"
_RUNNERS = f"{API_PREFIX}/runners"
_STREAM = f"{API_PREFIX}/streams/{{stream}}"
_FILE = f"{API_PREFIX}/files/{{path}}"

OPERATIONS: Dict[Operation, OperationSpec] = {
    Operation.VERSION: _get(f"{API_PREFIX}/version"),
    Operation.INFO: _get(f"{API_PREFIX}/info"),
    Operation.MACHINE_RESET: _put(f"{_MACHINE}:reset"),
    Operation.MACHINE_REBOOT: _put(f"{_MACHINE}:reboot"),
    Operation.MACHINE_PAUSE: _put(f"{_MACHINE}:pause"),
    Operation.MACHINE_RESUME: _put(f"{_MACHINE}:resume"),
    Operation.MACHINE_POWEROFF: _put(f"{_MACHINE}:poweroff"),
    Operation.MACHINE_MENU_BUTTON: _put(f"{_MACHINE}:menu_button"),
    Operation.MACHINE_WRITEMEM: _put(
        f"{_MACHINE}:writemem", "address", "data", required=("address", "data")
    ),
    Operation.MACHINE_WRITEMEM_UPLOAD: _upload(
        f"{_MACHINE}:writemem", "address"
    ),
    Operation.MACHINE_READMEM: _get(
        f"{_MACHINE}:readmem", "address", "length", required=("address",)
    ),
    Operation.MACHINE_DEBUGREG: _get(f"{_MACHINE}:debugreg"),
    Operation.MACHINE_DEBUGREG_SET: _put(
        f"{_MACHINE}:debugreg", "value", required=("value",)
    ),
    Operation.DRIVES_LIST: _get(f"{API_PREFIX}/drives"),
    Operation.DRIVES_MOUNT: _put(
        f"{_DRIVE}:mount", "image", "type", "mode", required=("image",)
    ),
    Operation.DRIVES_MOUNT_UPLOAD: _upload(f"{_DRIVE}:mount", "type", "mode"),
    Operation.DRIVES_RESET: _put(f"{_DRIVE}:reset"),
    Operation.DRIVES_REMOVE: _put(f"{_DRIVE}:remove"),
    Operation.DRIVES_ON: _put(f"{_DRIVE}:on"),
    Operation.DRIVES_OFF: _put(f"{_DRIVE}:off"),
    Operation.DRIVES_LOAD_ROM: _put(
        f"{_DRIVE}:load_rom", "file", required=("file",)
    ),
    Operation.DRIVES_LOAD_ROM_UPLOAD: _upload(f"{_DRIVE}:load_rom"),
    Operation.DRIVES_SET_MODE: _put(
        f"{_DRIVE}:set_mode", "mode", required=("mode",)
    ),
    Operation.RUNNERS_SIDPLAY: _put(
        f"{_RUNNERS}:sidplay", "file", "songnr", required=("file",)
    ),
    Operation.RUNNERS_SIDPLAY_UPLOAD: _upload(f"{_RUNNERS}:sidplay", "songnr"),
    Operation.RUNNERS_MODPLAY: _put(
        f"{_RUNNERS}:modplay", "file", required=("file",)
    ),
    Operation.RUNNERS_MODPLAY_UPLOAD: _upload(f"{_RUNNERS}:modplay"),
    Operation.RUNNERS_LOAD_PRG: _put(
        f"{_RUNNERS}:load_prg", "file", required=("file",)
    ),
    Operation.RUNNERS_LOAD_PRG_UPLOAD: _upload(f"{_RUNNERS}:load_prg"),
    Operation.RUNNERS_RUN_PRG: _put(
        f"{_RUNNERS}:run_prg", "file", required=("file",)
    ),
    Operation.RUNNERS_RUN_PRG_UPLOAD: _upload(f"{_RUNNERS}:run_prg"),
    Operation.RUNNERS_RUN_CRT: _put(
        f"{_RUNNERS}:run_crt", "file", required=("file",)
    ),
    Operation.RUNNERS_RUN_CRT_UPLOAD: _upload(f"{_RUNNERS}:run_crt"),
    Operation.STREAMS_START: _put(f"{_STREAM}:start", "ip", required=("ip",)),
    Operation.STREAMS_STOP: _put(f"{_STREAM}:stop"),
    Operation.FILES_INFO: _get(f"{_FILE}:info"),
    Operation.FILES_CREATE_D64: _put(
        f"{_FILE}:create_d64", "tracks", "diskname"
    ),
    Operation.FILES_CREATE_D71: _put(f"{_FILE}:create_d71", "diskname"),
    Operation.FILES_CREATE_D81: _put(f"{_FILE}:create_d81", "diskname"),
    Operation.FILES_CREATE_DNP: _put(
        f"{_FILE}:create_dnp", "tracks", "diskname", required=("tracks",)
    ),
}


@dataclass
class ApiRequest:
    """A fully built request, ready for the transport."""

    operation: Operation
    method: HttpMethod
    path: str
    params: Dict[str, str] = field(default_factory=dict)
    body_kind: BodyKind = BodyKind.NONE
    upload_path: Optional[Path] = None

    def describe(self) -> str:
        """Return ``METHOD path?query`` for logging."""
        if not self.params:
            return f"{self.method} {self.path}"
        query = "&".join(f"{key}={value}" for key, value in self.params.items())
        return f"{self.method} {self.path}?{query}"


# Argument schemas, validated before a request is built
class WriteMemArgs(BaseModel):
    """Arguments for the write-mem command."""

    address: int
    data: bytes

    @field_validator("address", mode="before")
    def _parse_address(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_address(value)
        return value

    @field_validator("data", mode="before")
    def _parse_data(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = parse_byte_string(value)
        if not value:
            raise ValueError("Data must contain at least one byte")
        if len(value) > MAX_WRITE_MEM_BYTES:
            raise ValueError(
                f"Data is {len(value)} bytes; the device accepts at most "
                f"{MAX_WRITE_MEM_BYTES} bytes per write"
            )
        return value


class ReadMemArgs(BaseModel):
    """Arguments for the read-mem command."""

    address: int
    length: int = Field(0, ge=0, le=MAX_READ_MEM_LENGTH)

    @field_validator("address", mode="before")
    def _parse_address(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_address(value)
        return value


class DebugRegisterArgs(BaseModel):
    """Arguments for writing the $D7FF debug register."""

    value: str

    @field_validator("value", mode="before")
    def _validate_value(cls, value: Any) -> Any:
        text = str(value).strip()
        if text[:2] in ("0x", "0X"):
            text = text[2:]
        elif text.startswith("$"):
            text = text[1:]
        if len(text) == 1:
            text = "0" + text
        if len(parse_byte_string(text)) != 1:
            raise ValueError("Debug register value must be a single hex byte")
        return text.upper()


class MountArgs(BaseModel):
    """Optional arguments shared by mount and mount-upload."""

    image_type: Optional[ImageType] = None
    mode: Optional[MountMode] = None

    @field_validator("image_type", "mode", mode="before")
    def _empty_is_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value


class DriveModeArgs(BaseModel):
    """Arguments for set-mode."""

    mode: DriveMode


class StreamArgs(BaseModel):
    """Arguments for starting or stopping a data stream."""

    stream: StreamType
    ip: Optional[str] = None

    @field_validator("stream", mode="before")
    def _normalize_stream(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class SidPlayArgs(BaseModel):
    """Arguments for the sidplay runner."""

    song: int = Field(0, ge=0, le=255)


class D64Args(BaseModel):
    """Arguments for creating a D64 image."""

    tracks: Literal[35, 40] = D64_DEFAULT_TRACKS
    disk_name: str = ""


class DnpArgs(BaseModel):
    """Arguments for creating a DNP image."""

    tracks: int = Field(..., ge=1, le=DNP_MAX_TRACKS)
    disk_name: str = ""


def validate_args(schema: type[BaseModel], action: str, **kwargs: Any) -> Any:
    """Validate keyword arguments against a schema.

    Raises:
        CommandValidationError: With one detail line per failing field
    """
    try:
        return schema(**kwargs)
    except CommandValidationError:
        raise
    except ValidationError as exc:
        details = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            message = error["msg"]
            if message.startswith("Value error, "):
                message = message[len("Value error, ") :]
            details.append(f"{location}: {message}" if location else message)
        raise CommandValidationError(
            f"Invalid arguments for '{action}'", details
        ) from exc
