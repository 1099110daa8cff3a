"""Tests for request builders and the operation table."""

from pathlib import Path

import httpx
import pytest

from c64u_manager import commands
from c64u_manager.client import C64UClient
from c64u_manager.commands_model import OPERATIONS, BodyKind, Operation
from c64u_manager.exception import (
    CommandValidationError,
    InvalidAddress,
    InvalidHexDigit,
    InvalidHexLength,
)


def test_every_operation_has_a_table_entry():
    """The operation table covers the whole enum."""
    assert set(OPERATIONS) == set(Operation)


def test_upload_operations_are_posts():
    """Upload variants stream a body and never take a file parameter."""
    for operation, entry in OPERATIONS.items():
        if entry.body_kind is BodyKind.RAW_FILE_STREAM:
            assert entry.method == "POST", operation
            assert "file" not in entry.params, operation
            assert "image" not in entry.params, operation


class TestSimpleCommands:
    """Test commands without arguments."""

    @pytest.mark.parametrize(
        ("builder", "method", "path"),
        [
            (commands.version, "GET", "/v1/version"),
            (commands.info, "GET", "/v1/info"),
            (commands.machine_reset, "PUT", "/v1/machine:reset"),
            (commands.machine_reboot, "PUT", "/v1/machine:reboot"),
            (commands.machine_pause, "PUT", "/v1/machine:pause"),
            (commands.machine_resume, "PUT", "/v1/machine:resume"),
            (commands.machine_poweroff, "PUT", "/v1/machine:poweroff"),
            (commands.machine_menu_button, "PUT", "/v1/machine:menu_button"),
            (commands.machine_debug_reg, "GET", "/v1/machine:debugreg"),
            (commands.drives_list, "GET", "/v1/drives"),
        ],
    )
    def test_method_and_path(self, builder, method, path):
        request = builder()
        assert request.method == method
        assert request.path == path
        assert request.params == {}
        assert request.body_kind is BodyKind.NONE


class TestMemoryCommands:
    """Test DMA read and write builders."""

    def test_write_mem(self):
        request = commands.machine_write_mem("$d020", "00")
        assert request.method == "PUT"
        assert request.path == "/v1/machine:writemem"
        assert request.params == {"address": "D020", "data": "00"}
        assert request.body_kind is BodyKind.FORM_PARAMS_AS_QUERY

    def test_write_mem_normalizes_data_to_lowercase(self):
        request = commands.machine_write_mem("400", "0A0B0C")
        assert request.params == {"address": "0400", "data": "0a0b0c"}

    def test_write_mem_limit(self):
        """128 bytes are accepted, 129 are not."""
        commands.machine_write_mem("0400", "00" * 128)
        with pytest.raises(CommandValidationError) as exc_info:
            commands.machine_write_mem("0400", "00" * 129)
        assert "at most 128 bytes" in exc_info.value.details[0]

    def test_write_mem_requires_data(self):
        with pytest.raises(CommandValidationError):
            commands.machine_write_mem("0400", "")

    def test_write_mem_bad_hex(self):
        """Codec errors surface with their own type."""
        with pytest.raises(InvalidHexLength):
            commands.machine_write_mem("0400", "123")
        with pytest.raises(InvalidHexDigit):
            commands.machine_write_mem("0400", "zz")
        with pytest.raises(InvalidAddress):
            commands.machine_write_mem("12345", "00")

    def test_write_mem_file(self, tmp_path: Path):
        local = tmp_path / "screen.bin"
        request = commands.machine_write_mem_file("0400", local)
        assert request.method == "POST"
        assert request.path == "/v1/machine:writemem"
        assert request.params == {"address": "0400"}
        assert request.body_kind is BodyKind.RAW_FILE_STREAM
        assert request.upload_path == local

    def test_read_mem(self):
        request = commands.machine_read_mem("0x0400", 256)
        assert request.method == "GET"
        assert request.path == "/v1/machine:readmem"
        assert request.params == {"address": "0400", "length": "256"}

    def test_read_mem_zero_length_is_omitted(self):
        """A zero length leaves the size to the device."""
        request = commands.machine_read_mem("0400")
        assert request.params == {"address": "0400"}

    def test_read_mem_length_range(self):
        commands.machine_read_mem("0000", 65536)
        with pytest.raises(CommandValidationError):
            commands.machine_read_mem("0000", 65537)
        with pytest.raises(CommandValidationError):
            commands.machine_read_mem("0000", -1)

    @pytest.mark.parametrize(
        ("value", "expected"), [("ff", "FF"), ("$7", "07"), ("0x1a", "1A")]
    )
    def test_debug_reg_set(self, value, expected):
        request = commands.machine_debug_reg_set(value)
        assert request.method == "PUT"
        assert request.path == "/v1/machine:debugreg"
        assert request.params == {"value": expected}

    @pytest.mark.parametrize("value", ["", "100", "gg"])
    def test_debug_reg_set_rejects_non_byte(self, value):
        with pytest.raises(CommandValidationError):
            commands.machine_debug_reg_set(value)


class TestDriveCommands:
    """Test drive builders."""

    def test_mount_with_options(self):
        request = commands.drives_mount("8", "/usb0/games.d64", "D64", "readonly")
        assert request.method == "PUT"
        assert request.path == "/v1/drives/8:mount"
        assert request.params == {
            "image": "/usb0/games.d64",
            "type": "d64",
            "mode": "readonly",
        }

    def test_mount_omits_unset_options(self):
        request = commands.drives_mount("a", "/usb0/games.d64", "", None)
        assert request.params == {"image": "/usb0/games.d64"}

    def test_mount_rejects_unknown_type(self):
        with pytest.raises(CommandValidationError):
            commands.drives_mount("8", "/usb0/x.d64", image_type="tap")
        with pytest.raises(CommandValidationError):
            commands.drives_mount("8", "/usb0/x.d64", mode="writeonly")

    def test_mount_upload(self, tmp_path: Path):
        local = tmp_path / "games.d64"
        request = commands.drives_mount_upload("8", local, mode="readwrite")
        assert request.method == "POST"
        assert request.path == "/v1/drives/8:mount"
        assert request.params == {"mode": "readwrite"}
        assert request.body_kind is BodyKind.RAW_FILE_STREAM
        assert request.upload_path == local

    @pytest.mark.parametrize(
        ("builder", "verb"),
        [
            (commands.drives_reset, "reset"),
            (commands.drives_remove, "remove"),
            (commands.drives_on, "on"),
            (commands.drives_off, "off"),
        ],
    )
    def test_drive_verbs(self, builder, verb):
        request = builder("9")
        assert request.method == "PUT"
        assert request.path == f"/v1/drives/9:{verb}"

    def test_empty_drive_id(self):
        with pytest.raises(CommandValidationError, match="Missing drive"):
            commands.drives_reset("  ")

    def test_load_rom(self, tmp_path: Path):
        request = commands.drives_load_rom("8", "/usb0/speeddos.rom")
        assert request.path == "/v1/drives/8:load_rom"
        assert request.params == {"file": "/usb0/speeddos.rom"}
        upload = commands.drives_load_rom_upload("8", tmp_path / "speeddos.rom")
        assert upload.method == "POST"
        assert upload.params == {}

    def test_set_mode(self):
        request = commands.drives_set_mode("8", "1571")
        assert request.path == "/v1/drives/8:set_mode"
        assert request.params == {"mode": "1571"}

    def test_set_mode_invalid(self):
        with pytest.raises(CommandValidationError, match="Invalid mode") as exc_info:
            commands.drives_set_mode("8", "1570")
        assert exc_info.value.details == [
            "Mode '1570' is not valid",
            "Valid modes: 1541, 1571, 1581",
        ]


class TestRunnerCommands:
    """Test runner builders."""

    def test_sidplay_song_omitted_when_zero(self):
        request = commands.sid_play("/usb0/music.sid")
        assert request.path == "/v1/runners:sidplay"
        assert request.params == {"file": "/usb0/music.sid"}

    def test_sidplay_song(self):
        request = commands.sid_play("/usb0/music.sid", 3)
        assert request.params == {"file": "/usb0/music.sid", "songnr": "3"}

    def test_sidplay_upload(self, tmp_path: Path):
        request = commands.sid_play_upload(tmp_path / "music.sid", 2)
        assert request.method == "POST"
        assert request.params == {"songnr": "2"}
        assert "file" not in request.params

    @pytest.mark.parametrize(
        ("builder", "upload", "verb"),
        [
            (commands.mod_play, commands.mod_play_upload, "modplay"),
            (commands.load_prg, commands.load_prg_upload, "load_prg"),
            (commands.run_prg, commands.run_prg_upload, "run_prg"),
            (commands.run_crt, commands.run_crt_upload, "run_crt"),
        ],
    )
    def test_file_and_upload_variants(self, tmp_path: Path, builder, upload, verb):
        request = builder("/usb0/thing")
        assert request.method == "PUT"
        assert request.path == f"/v1/runners:{verb}"
        assert request.params == {"file": "/usb0/thing"}

        uploaded = upload(tmp_path / "thing")
        assert uploaded.method == "POST"
        assert uploaded.path == f"/v1/runners:{verb}"
        assert uploaded.params == {}
        assert uploaded.body_kind is BodyKind.RAW_FILE_STREAM

    def test_runner_requires_file(self):
        with pytest.raises(CommandValidationError, match="Missing required"):
            commands.run_prg("")


class TestStreamCommands:
    """Test stream builders."""

    def test_start_video(self):
        request = commands.streams_start("video", "1.2.3.4")
        assert request.method == "PUT"
        assert request.path == "/v1/streams/video:start"
        assert request.params == {"ip": "1.2.3.4"}

    def test_stream_name_is_case_insensitive(self):
        request = commands.streams_stop("Audio")
        assert request.path == "/v1/streams/audio:stop"

    def test_unknown_stream(self):
        """Invalid stream names fail before a request exists."""
        with pytest.raises(CommandValidationError, match="Invalid stream type") as exc_info:
            commands.streams_start("laser", "1.2.3.4")
        assert exc_info.value.details[0] == "Stream 'laser' is not valid"

    def test_start_requires_ip(self):
        with pytest.raises(CommandValidationError):
            commands.streams_start("debug", " ")


class TestFileCommands:
    """Test file info and image creation builders."""

    def test_info_keeps_path_verbatim(self):
        request = commands.files_info("/usb0/*.d64")
        assert request.method == "GET"
        assert request.path == "/v1/files//usb0/*.d64:info"

    def test_create_d64_defaults_to_35_tracks(self):
        request = commands.files_create_d64("/usb0/new.d64")
        assert request.path == "/v1/files//usb0/new.d64:create_d64"
        assert request.params == {"tracks": "35"}

    def test_create_d64_40_tracks_with_name(self):
        request = commands.files_create_d64("/usb0/new.d64", 40, "MY DISK")
        assert request.params == {"tracks": "40", "diskname": "MY DISK"}

    def test_create_d64_rejects_other_track_counts(self):
        with pytest.raises(CommandValidationError):
            commands.files_create_d64("/usb0/new.d64", 36)

    def test_create_d71_and_d81(self):
        d71 = commands.files_create_d71("/usb0/new.d71")
        assert d71.path == "/v1/files//usb0/new.d71:create_d71"
        assert d71.params == {}
        d81 = commands.files_create_d81("/usb0/new.d81", "DISK")
        assert d81.path == "/v1/files//usb0/new.d81:create_d81"
        assert d81.params == {"diskname": "DISK"}

    def test_create_dnp_requires_tracks(self):
        with pytest.raises(CommandValidationError, match="Missing required flag"):
            commands.files_create_dnp("/usb0/big.dnp", None)
        with pytest.raises(CommandValidationError, match="Missing required flag"):
            commands.files_create_dnp("/usb0/big.dnp", 0)

    def test_create_dnp_rejects_more_than_255_tracks(self):
        with pytest.raises(CommandValidationError):
            commands.files_create_dnp("/usb0/big.dnp", 300)

    def test_create_dnp(self):
        request = commands.files_create_dnp("/usb0/big.dnp", 200, "BIG DISK")
        assert request.method == "PUT"
        assert request.path == "/v1/files//usb0/big.dnp:create_dnp"
        assert request.params == {"tracks": "200", "diskname": "BIG DISK"}

    def test_path_characters_are_percent_encoded(self):
        """Query and fragment delimiters stay inside the path segment."""
        request = commands.files_info("/usb0/game?.d64")
        assert request.path == "/v1/files//usb0/game%3F.d64:info"
        request = commands.files_create_d64("/usb0/new#1 a.d64")
        assert request.path == "/v1/files//usb0/new%231%20a.d64:create_d64"

    def test_drive_id_cannot_rewrite_the_endpoint(self):
        request = commands.drives_reset("8:mount?x=")
        assert request.path == "/v1/drives/8%3Amount%3Fx%3D:reset"

    @pytest.mark.parametrize(
        ("request_", "verb", "device_path"),
        [
            (
                commands.files_info("/usb0/game?.d64"),
                ":info",
                "/v1/files//usb0/game?.d64:info",
            ),
            (
                commands.files_create_d64("/usb0/new#1.d64"),
                ":create_d64",
                "/v1/files//usb0/new#1.d64:create_d64",
            ),
            (
                commands.files_info("/usb0/my games/*.d64"),
                ":info",
                "/v1/files//usb0/my games/*.d64:info",
            ),
        ],
    )
    def test_verb_survives_the_wire(self, request_, verb, device_path):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200, json={"errors": []})

        C64UClient("c64u", transport=httpx.MockTransport(handler)).execute(request_)
        assert sent[0].url.path.endswith(verb)
        assert sent[0].url.path == device_path
        assert sent[0].url.fragment == ""
        assert dict(sent[0].url.params) == request_.params


class TestBuildRequest:
    """Test the generic request assembly."""

    def test_unknown_parameter(self):
        with pytest.raises(ValueError, match="does not accept parameter"):
            commands.build_request(Operation.MACHINE_RESET, {"address": "0400"})

    def test_upload_needs_a_file(self):
        with pytest.raises(CommandValidationError, match="requires a local file"):
            commands.build_request(Operation.RUNNERS_RUN_PRG_UPLOAD)

    def test_describe(self):
        request = commands.machine_read_mem("0400", 16)
        assert request.describe() == "GET /v1/machine:readmem?address=0400&length=16"
