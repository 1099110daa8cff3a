"""Constants for the C64 Ultimate REST API."""

from enum import Enum

VERSION = "0.1.0"

API_PREFIX = "/v1"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 80
DEFAULT_TIMEOUT_SECONDS = 30.0

ENV_PREFIX = "C64U_"
LOG_LEVEL_ENV = "C64U_LOG_LEVEL"

# The device refuses DMA writes larger than this in a single request.
MAX_WRITE_MEM_BYTES = 128
MAX_ADDRESS = 0xFFFF
MAX_READ_MEM_LENGTH = 0x10000

D64_DEFAULT_TRACKS = 35
D71_TRACKS = 70
D81_TRACKS = 160
DNP_MAX_TRACKS = 255

OCTET_STREAM = "application/octet-stream"


class StreamType(str, Enum):
    """Data streams offered by the Ultimate 64."""

    VIDEO = "video"
    AUDIO = "audio"
    DEBUG = "debug"

    @property
    def default_port(self) -> int:
        return STREAM_DEFAULT_PORTS[self]


STREAM_DEFAULT_PORTS = {
    StreamType.VIDEO: 11000,
    StreamType.AUDIO: 11001,
    StreamType.DEBUG: 11002,
}


class DriveMode(str, Enum):
    """Drive emulation modes accepted by ``set_mode``."""

    MODE_1541 = "1541"
    MODE_1571 = "1571"
    MODE_1581 = "1581"


class ImageType(str, Enum):
    """Disk image types accepted by ``mount``."""

    D64 = "d64"
    G64 = "g64"
    D71 = "d71"
    G71 = "g71"
    D81 = "d81"


class MountMode(str, Enum):
    """Mount modes accepted by ``mount``."""

    READWRITE = "readwrite"
    READONLY = "readonly"
    UNLINKED = "unlinked"
