"""
Main commands for the Twintag CLI.
"""
import argparse
import json
import os
import sys
import logging

from typing import Optional, List

import httpx

from twintag.cli.common import LIST_COLUMNS, PROFILE_ENV_VAR, TOKEN_ENV_VAR
from twintag.cli.utils import format_size, format_table, print_colored
from twintag.config.environment import Environment, LOG_LEVELS
from twintag.config.manager import ConfigManager
from twintag.core.common import VERSION, TwintagError
from twintag.core.project import Project
from twintag.core.view import View, create_bag
from twintag.network.client import Client
from twintag.utils.logging import enable_transport_logging
from twintag.utils.serializer import serialize_to_json

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="twintag", description="Twintag SDK CLI")
    parser.add_argument("--version", action="store_true", help="Show SDK version")
    parser.add_argument("--host", help="Twintag API host")
    parser.add_argument("--admin-host", help="Twintag admin API host")
    parser.add_argument("--caching-host", help="Twintag caching host")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Transport log level")
    parser.add_argument("--profile", help="Stored profile to use")
    parser.add_argument("--token", help="Bearer token (view token or project API key)")

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("create-bag", help="Create a bag and print its view qid")

    list_parser = subparsers.add_parser("list", help="List the files of a bag")
    list_parser.add_argument("view", help="View qid")
    list_parser.add_argument("folder", nargs="?", help="Qid of the folder to list")

    download_parser = subparsers.add_parser("download", help="Download a file from a bag")
    download_parser.add_argument("view", help="View qid")
    download_parser.add_argument("name", help="File name")
    download_parser.add_argument("-o", "--output", help="File to write to (stdout if omitted)")

    upload_parser = subparsers.add_parser("upload", help="Upload a file into a bag")
    upload_parser.add_argument("view", help="View qid")
    upload_parser.add_argument("file", help="Path of the file to upload")
    upload_parser.add_argument("--name", help="Name to store the file under")
    upload_parser.add_argument("--parent", help="Qid of the folder to upload into")

    metadata_parser = subparsers.add_parser("metadata", help="Show the metadata of a bag")
    metadata_parser.add_argument("view", help="View qid")
    metadata_parser.add_argument("--lang", help="Language, 'all' for every language")

    delete_parser = subparsers.add_parser("delete-bag", help="Delete a bag")
    delete_parser.add_argument("view", help="View qid")

    profile_parser = subparsers.add_parser("profile", help="Manage stored profiles")
    profile_sub = profile_parser.add_subparsers(dest="profile_command")
    save_parser = profile_sub.add_parser("save", help="Save the global options as a profile")
    save_parser.add_argument("name", help="Profile name")
    profile_sub.add_parser("list", help="List stored profiles")
    remove_parser = profile_sub.add_parser("remove", help="Remove a profile")
    remove_parser.add_argument("name", help="Profile name")

    return parser


def build_environment(args: argparse.Namespace):
    """
    Resolve the environment and token from variables, profile and options,
    in increasing order of precedence.
    """
    environment = Environment.from_env()
    token = os.environ.get(TOKEN_ENV_VAR) or None

    profile = args.profile or os.environ.get(PROFILE_ENV_VAR)
    if profile:
        token = ConfigManager().apply_profile(profile, environment) or token

    if args.host:
        environment.host = args.host
    if args.admin_host:
        environment.admin_host = args.admin_host
    if args.caching_host:
        environment.caching_host = args.caching_host
    if args.log_level:
        environment.set_log_level(args.log_level)
    if args.token:
        token = args.token
    return environment, token


def _view(args: argparse.Namespace, environment: Environment, token: Optional[str]) -> View:
    return View(args.view, client=Client(token, environment=environment))


def cmd_create_bag(args, environment, token) -> int:
    if token:
        view = Project(token, environment=environment).create_bag()
    else:
        view = create_bag(environment=environment)
    print(view.qid)
    return 0


def cmd_list(args, environment, token) -> int:
    files = _view(args, environment, token).list(args.folder)
    rows = [
        {"name": fi.name, "type": "folder" if fi.is_folder else "file",
         "size": "" if fi.is_folder else format_size(fi.size), "qid": fi.file_qid}
        for fi in files
    ]
    print(format_table(rows, LIST_COLUMNS, numeric=["size"]))
    return 0


def cmd_download(args, environment, token) -> int:
    stream = _view(args, environment, token).download(args.name)
    if args.output:
        with open(args.output, "wb") as f:
            if stream is not None:
                with stream:
                    for chunk in stream:
                        f.write(chunk)
        print_colored(f"Downloaded {args.name} to {args.output}", "green")
    elif stream is not None:
        with stream:
            out = sys.stdout.buffer
            for chunk in stream:
                out.write(chunk)
            out.flush()
    return 0


def cmd_upload(args, environment, token) -> int:
    info = _view(args, environment, token).upload(args.file, name=args.name, parent=args.parent)
    print_colored(f"Uploaded {info.name} ({info.size} bytes) as {info.file_qid}", "green")
    return 0


def cmd_metadata(args, environment, token) -> int:
    metadata = _view(args, environment, token).get_metadata(args.lang)
    print(json.dumps(json.loads(serialize_to_json(metadata)), indent=2))
    return 0


def cmd_delete_bag(args, environment, token) -> int:
    _view(args, environment, token).delete_bag()
    print_colored(f"Deleted bag {args.view}", "green")
    return 0


def cmd_profile(args, parser: argparse.ArgumentParser) -> int:
    manager = ConfigManager()
    if args.profile_command == "save":
        manager.add_profile(args.name, {
            "host": args.host,
            "admin_host": args.admin_host,
            "caching_host": args.caching_host,
            "log_level": args.log_level,
            "token": args.token,
        })
        print_colored(f"Profile saved: {args.name}", "green")
        return 0
    if args.profile_command == "list":
        names = manager.list_profiles()
        if not names:
            print_colored("No profiles stored", "yellow")
        for name in names:
            print(name)
        return 0
    if args.profile_command == "remove":
        if manager.remove_profile(args.name):
            print_colored(f"Profile removed: {args.name}", "green")
            return 0
        print_colored(f"Profile not found: {args.name}", "yellow")
        return 1
    parser.print_help()
    return 1


COMMANDS = {
    "create-bag": cmd_create_bag,
    "list": cmd_list,
    "download": cmd_download,
    "upload": cmd_upload,
    "metadata": cmd_metadata,
    "delete-bag": cmd_delete_bag,
}


def main_cli(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the Twintag CLI.

    Args:
        argv: List of command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"Twintag SDK version {VERSION}")
        return 0

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "profile":
            return cmd_profile(args, parser)

        environment, token = build_environment(args)
        if environment.log_level != "none":
            enable_transport_logging()
        return COMMANDS[args.command](args, environment, token)
    except TwintagError as e:
        print_colored(f"Error: {e}", "red")
        logger.debug(repr(e))
        return 1
    except httpx.HTTPError as e:
        print_colored(f"Connection error: {e}", "red")
        return 1
    except (OSError, ValueError, KeyError) as e:
        print_colored(f"Error: {e}", "red")
        return 1
