from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

from nmsmodmanager import (
    InstallReport,
    ModManager,
    ModManagerError,
    export_report,
    load_program_config,
    print_install_report,
)
from nmsmodmanager.logging_utils import log_error, log_info, log_ok, log_warn, set_log_level


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Manage No Man's Sky mods: edit GCMODSETTINGS.MXML "
            "and install mods from .zip, .rar and .7z archives."
        )
    )
    parser.add_argument(
        "--config-path",
        type=Path,
        default=Path("config.toml"),
        help="Path to the program configuration TOML file.",
    )
    parser.add_argument(
        "--game",
        type=Path,
        default=None,
        help="Game install folder. Found through Steam/GOG when omitted.",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Settings file to edit instead of the game's GCMODSETTINGS.MXML.",
    )
    parser.add_argument(
        "--mods-dir",
        type=Path,
        default=None,
        help="Mods folder to install into instead of GAMEDATA/MODS.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Print debug messages.",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="Show registered mods by priority.")
    enable = commands.add_parser("enable", help="Enable one mod.")
    enable.add_argument("name")
    disable = commands.add_parser("disable", help="Disable one mod.")
    disable.add_argument("name")
    commands.add_parser("enable-all", help="Enable every registered mod.")
    commands.add_parser("disable-all", help="Disable every registered mod.")
    toggle = commands.add_parser("disable-mods", help="Set the game's DisableAllMods switch.")
    toggle.add_argument("state", choices=["on", "off"])
    reorder = commands.add_parser("reorder", help="Assign priorities in the given order.")
    reorder.add_argument("names", nargs="+")
    install = commands.add_parser("install", help="Install mods from archives.")
    install.add_argument("archives", nargs="+", type=Path)
    decision = install.add_mutually_exclusive_group()
    decision.add_argument("--replace", action="store_true", help="Replace installed mods without asking.")
    decision.add_argument("--keep", action="store_true", help="Keep installed mods without asking.")
    install.add_argument("--name", default=None, help="Folder name for archives without a mod folder.")
    install.add_argument("--export-path", type=Path, default=None, help="Save the install outcomes to an Excel workbook.")
    remove = commands.add_parser("remove", help="Delete a mod folder and its entry.")
    remove.add_argument("name")
    updates = commands.add_parser("check-updates", help="Compare installed versions with the mod database.")
    updates.add_argument("--offline", action="store_true", help="Only use the cached database.")
    export = commands.add_parser("export", help="Export the mod list to an Excel workbook.")
    export.add_argument("path", type=Path)
    commands.add_parser("reset-settings", help="Delete GCMODSETTINGS.MXML so the game rebuilds it.")
    commands.add_parser("open-folder", help="Open the mods folder.")
    return parser.parse_args()


def _ask(question: str) -> bool:
    answer = input(f"{question} [y/N] ").strip().lower()
    return answer in {"y", "yes"}


def _install(manager: ModManager, args: argparse.Namespace) -> List[InstallReport]:
    reports: List[InstallReport] = []
    for archive in args.archives:
        log_info(f"Installing from {archive.name}")
        try:
            report = manager.install_mod_from_archive(archive.expanduser())
        except ModManagerError as exc:
            log_error(str(exc), indent=2)
            continue
        reports.append(report)
        print_install_report(report)

        if report.messy_path is not None:
            name = args.name or input(
                f"No valid mod folder was found in {archive.name}. "
                "Enter a name for this mod (blank to cancel): "
            )
            if name and name.strip():
                try:
                    manager.finalize_mod_installation(report.messy_path, name.strip())
                except ModManagerError as exc:
                    log_error(str(exc), indent=2)
                    manager.cleanup_temp_folder(report.messy_path)
            else:
                manager.cleanup_temp_folder(report.messy_path)
                log_warn(f"Installation from {archive.name} was cancelled.", indent=2)

        for conflict in report.conflicts:
            if args.replace or args.keep:
                replace = args.replace
            else:
                replace = _ask(f'A mod named "{conflict.name}" is already installed. Replace it?')
            try:
                manager.resolve_conflict(conflict.name, conflict.staged_path, replace)
            except ModManagerError as exc:
                log_error(f"{conflict.name}: {exc}", indent=2)
                manager.cleanup_temp_folder(conflict.staged_path)
    return reports


def main() -> None:
    args = parse_args()
    config = load_program_config(args.config_path.expanduser())
    set_log_level("debug" if args.verbose else config.log_level)
    if args.game is not None:
        config.game_path = args.game.expanduser().resolve()
    if args.settings is not None:
        config.settings_file = args.settings.expanduser().resolve()
    if args.mods_dir is not None:
        config.mods_dir = args.mods_dir.expanduser().resolve()

    manager = ModManager(config)
    try:
        if args.command == "reset-settings":
            manager.delete_settings_file()
            return
        if args.command == "open-folder":
            manager.open_mods_folder()
            return
        if args.command == "check-updates":
            for update in manager.check_for_updates(offline=args.offline):
                log_info(f"{update.name}: {update.installed} -> {update.latest}", indent=2)
            return

        manager.load_settings()
        registry = manager.registry
        if args.command == "list":
            state = "disabled" if registry.is_globally_disabled() else "enabled"
            log_info(f"{len(registry)} mod(s); all mods {state}.")
            for entry in registry.list():
                flag = "x" if entry.enabled else " "
                log_info(f"[{flag}] {entry.priority:>3}  {entry.name}", indent=2)
        elif args.command in {"enable", "disable"}:
            if not manager.set_enabled(args.name, args.command == "enable"):
                log_warn(f"Mod '{args.name}' is not registered.")
        elif args.command in {"enable-all", "disable-all"}:
            count = manager.set_all_enabled(args.command == "enable-all")
            log_ok(f"Updated {count} mod(s).")
        elif args.command == "disable-mods":
            manager.set_global_disable(args.state == "on")
        elif args.command == "reorder":
            manager.begin_reorder()
            manager.finish_reorder(args.names)
            log_ok("Load order saved.")
        elif args.command == "install":
            reports = _install(manager, args)
            if args.export_path is not None:
                export_report(output_path=args.export_path, entries=registry.list(), reports=reports)
                log_info(f"Report saved to {args.export_path}")
        elif args.command == "remove":
            manager.delete_mod(args.name)
            log_ok(f"Mod '{args.name}' was deleted.")
        elif args.command == "export":
            export_path = args.path
            if export_path.suffix.lower() != ".xlsx":
                export_path = export_path / "mod_report.xlsx"
            export_report(output_path=export_path, entries=registry.list())
            log_info(f"Report saved to {export_path}")
    except ModManagerError as exc:
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
