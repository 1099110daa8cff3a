"""Commands package: request builders for every device operation."""

from .encoder import (
    build_request,
    drives_list,
    drives_load_rom,
    drives_load_rom_upload,
    drives_mount,
    drives_mount_upload,
    drives_off,
    drives_on,
    drives_remove,
    drives_reset,
    drives_set_mode,
    files_create_d64,
    files_create_d71,
    files_create_d81,
    files_create_dnp,
    files_info,
    info,
    load_prg,
    load_prg_upload,
    machine_debug_reg,
    machine_debug_reg_set,
    machine_menu_button,
    machine_pause,
    machine_poweroff,
    machine_read_mem,
    machine_reboot,
    machine_reset,
    machine_resume,
    machine_write_mem,
    machine_write_mem_file,
    mod_play,
    mod_play_upload,
    run_crt,
    run_crt_upload,
    run_prg,
    run_prg_upload,
    sid_play,
    sid_play_upload,
    streams_start,
    streams_stop,
    version,
)

__all__ = [
    "build_request",
    "drives_list",
    "drives_load_rom",
    "drives_load_rom_upload",
    "drives_mount",
    "drives_mount_upload",
    "drives_off",
    "drives_on",
    "drives_remove",
    "drives_reset",
    "drives_set_mode",
    "files_create_d64",
    "files_create_d71",
    "files_create_d81",
    "files_create_dnp",
    "files_info",
    "info",
    "load_prg",
    "load_prg_upload",
    "machine_debug_reg",
    "machine_debug_reg_set",
    "machine_menu_button",
    "machine_pause",
    "machine_poweroff",
    "machine_read_mem",
    "machine_reboot",
    "machine_reset",
    "machine_resume",
    "machine_write_mem",
    "machine_write_mem_file",
    "mod_play",
    "mod_play_upload",
    "run_crt",
    "run_crt_upload",
    "run_prg",
    "run_prg_upload",
    "sid_play",
    "sid_play_upload",
    "streams_start",
    "streams_stop",
    "version",
]
