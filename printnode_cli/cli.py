"""
printnode - command-line interface for the PrintNode API.

Every command goes through PrintNodeClient. Output depends on where stdout
points: a terminal gets short tables, a pipe gets the complete result as
JSON. Failures are printed as a JSON error object with exit status 1.
"""

import argparse
import json
import os
import sys
from typing import Any

from printnode_cli.core.entity import Entity
from printnode_cli.core.errors import PrintNodeError
from printnode_cli.core.types import PrintJob
from printnode_cli.log_setup import setup_logging
from printnode_cli.sdk import PrintNodeClient

# =============================================================================
# Output Helpers
# =============================================================================


HUMAN_LIMIT = 20  # Rows shown per table on a terminal


def is_tty() -> bool:
    """True when a person is reading stdout."""
    return sys.stdout.isatty()


def _plain(data: Any) -> Any:
    if isinstance(data, Entity):
        return data.to_dict()
    if isinstance(data, list):
        return [_plain(item) for item in data]
    if isinstance(data, dict):
        return {key: _plain(value) for key, value in data.items()}
    return data


def json_output(data: Any, pretty: bool = False) -> None:
    """Print entities, lists and dicts of them as JSON."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(_plain(data), indent=indent, default=str))


def error_output(error: PrintNodeError) -> None:
    """Print the error object and exit 1."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print fixed-width columns; long cells are cut to the column width."""
    title = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(title)
    print("-" * len(title))
    for row in rows:
        print("  ".join(str(v if v is not None else "")[:w].ljust(w) for v, w in zip(row, widths)))


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_whoami(client: PrintNodeClient, _args: argparse.Namespace) -> None:
    """Show the authenticated account."""
    try:
        me = client.account.whoami()
        if is_tty():
            print(f"Account: {me.id} {me.firstname or ''} {me.lastname or ''}".rstrip())
            print(f"Email: {me.email}")
            print(f"State: {me.state}")
            print(f"Computers: {me.num_computers}  Prints: {me.total_prints}  Credits: {me.credits}")
        else:
            success_output(me)
    except PrintNodeError as e:
        error_output(e)


def cmd_computers_list(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """List computers."""
    try:
        if is_tty():
            computers = client.computers.list(
                limit=args.limit if args.limit is not None else HUMAN_LIMIT,
                offset=args.offset or 0,
            )
            if not computers:
                print("No computers found.")
                return
            table_output(
                ["ID", "Name", "Hostname", "State"],
                [[c.id, c.name, c.hostname, c.state] for c in computers],
                [10, 30, 30, 12],
            )
        else:
            computers = client.computers.list_all()
            success_output({"data": computers, "total_count": len(computers)})
    except PrintNodeError as e:
        error_output(e)


def cmd_computers_get(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """Get a computer by ID."""
    try:
        success_output(client.computers.get(args.computer_id))
    except PrintNodeError as e:
        error_output(e)


def cmd_computers_scales(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """List scales attached to a computer."""
    try:
        scales = client.computers.scales(args.computer_id, args.device_name, args.device_number)
        if is_tty():
            if not scales:
                print("No scales found.")
                return
            table_output(
                ["Device", "Num", "Vendor", "Product", "Mass"],
                [[s.device_name, s.device_num, s.vendor, s.product, s.mass] for s in scales],
                [20, 5, 20, 20, 20],
            )
        else:
            success_output({"data": scales})
    except PrintNodeError as e:
        error_output(e)


def cmd_printers_list(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """List printers."""
    try:
        if is_tty() or args.computer is not None:
            printers = client.printers.list(
                computer_set=args.computer,
                limit=args.limit if args.limit is not None else HUMAN_LIMIT,
                offset=args.offset or 0,
            )
        else:
            printers = client.printers.list_all()

        if is_tty():
            if not printers:
                print("No printers found.")
                return
            table_output(
                ["ID", "Name", "Computer", "State", "Default"],
                [
                    [p.id, p.name, p.computer.name if p.computer else "", p.state, "yes" if p.default else ""]
                    for p in printers
                ],
                [10, 35, 25, 10, 7],
            )
        else:
            success_output({"data": printers, "total_count": len(printers)})
    except PrintNodeError as e:
        error_output(e)


def cmd_printers_get(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """Get a printer by ID."""
    try:
        success_output(client.printers.get(args.printer_id))
    except PrintNodeError as e:
        error_output(e)


def cmd_jobs_list(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """List print jobs."""
    try:
        if is_tty() or args.printer is not None:
            jobs = client.print_jobs.list(
                printer_set=args.printer,
                limit=args.limit if args.limit is not None else HUMAN_LIMIT,
                offset=args.offset or 0,
            )
        else:
            jobs = client.print_jobs.list_all()

        if is_tty():
            if not jobs:
                print("No print jobs found.")
                return
            table_output(
                ["ID", "Title", "Printer", "State", "Created"],
                [
                    [j.id, j.title, j.printer.name if j.printer else "", j.state, j.create_timestamp]
                    for j in jobs
                ],
                [12, 30, 25, 12, 24],
            )
        else:
            success_output({"data": jobs, "total_count": len(jobs)})
    except PrintNodeError as e:
        error_output(e)


def cmd_jobs_get(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """Get a print job by ID."""
    try:
        success_output(client.print_jobs.get(args.print_job_id))
    except PrintNodeError as e:
        error_output(e)


def cmd_jobs_create(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """Submit a print job from a file or URL."""
    try:
        job = PrintJob(printer_id=args.printer_id, title=args.title, source="printnode-cli", qty=args.qty)
        if args.url:
            job.attach_url(args.source, content_type="raw_uri" if args.raw else "pdf_uri")
        else:
            job.attach_file(args.source, content_type="raw_base64" if args.raw else "pdf_base64")

        response = client.print_jobs.create(job)
        success_output({"id": response.decoded_content(), "message": "Print job submitted."})
    except OSError as e:
        error_output(PrintNodeError(f"Cannot read {args.source}: {e.strerror or e}"))
    except PrintNodeError as e:
        error_output(e)


def cmd_jobs_states(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """Show the state history of print jobs."""
    try:
        states = client.print_jobs.states(args.print_job_ids or None)
        if is_tty():
            rows = [
                [s.print_job_id, s.state, s.message, s.create_timestamp]
                for job_states in states
                for s in (job_states if isinstance(job_states, list) else [job_states])
            ]
            if not rows:
                print("No states found.")
                return
            table_output(["Job", "State", "Message", "Time"], rows, [12, 15, 40, 24])
        else:
            success_output({"data": states})
    except PrintNodeError as e:
        error_output(e)


def cmd_tags_list(client: PrintNodeClient, _args: argparse.Namespace) -> None:
    """List tags."""
    try:
        success_output(client.tags.list())
    except PrintNodeError as e:
        error_output(e)


def cmd_tags_set(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """Set a tag value."""
    try:
        client.tags.set(args.name, args.value)
        success_output({"success": True, "message": f"Tag {args.name} set"})
    except PrintNodeError as e:
        error_output(e)


def cmd_tags_delete(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """Delete a tag."""
    try:
        client.tags.delete(args.name)
        success_output({"success": True, "message": f"Tag {args.name} deleted"})
    except PrintNodeError as e:
        error_output(e)


def cmd_apikeys_list(client: PrintNodeClient, _args: argparse.Namespace) -> None:
    """List API keys."""
    try:
        success_output(client.api_keys.list())
    except PrintNodeError as e:
        error_output(e)


def cmd_apikeys_create(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """Create an API key."""
    try:
        key = client.api_keys.create(args.description)
        success_output({"description": args.description, "key": key})
    except PrintNodeError as e:
        error_output(e)


def cmd_apikeys_delete(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """Delete an API key."""
    try:
        client.api_keys.delete(args.description)
        success_output({"success": True, "message": f"API key {args.description} deleted"})
    except PrintNodeError as e:
        error_output(e)


def cmd_downloads_clients(client: PrintNodeClient, _args: argparse.Namespace) -> None:
    """List client releases."""
    try:
        clients = client.downloads.clients()
        if is_tty():
            if not clients:
                print("No clients found.")
                return
            table_output(
                ["ID", "OS", "Edition", "Version", "Enabled"],
                [[c.id, c.os, c.edition, c.version, "yes" if c.enabled else "no"] for c in clients],
                [8, 10, 20, 12, 7],
            )
        else:
            success_output({"data": clients})
    except PrintNodeError as e:
        error_output(e)


def cmd_downloads_latest(client: PrintNodeClient, args: argparse.Namespace) -> None:
    """Show the latest client installer for an OS."""
    try:
        success_output(client.downloads.latest(args.os, args.edition))
    except PrintNodeError as e:
        error_output(e)


# =============================================================================
# Main CLI
# =============================================================================


def create_parser() -> argparse.ArgumentParser:  # noqa: PLR0915
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="printnode",
        description="PrintNode CLI - Command-line interface for the PrintNode API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output Modes:
  Terminal:     Tables, first 20 rows
  Pipe:         Full JSON

Examples:
  printnode whoami
  printnode printers list --computer 12,13
  printnode jobs create 34 invoice.pdf --title "Invoice 1001"
  printnode jobs states 5001 | jq '.data'
  printnode --child-email child@example.com computers list
""",
    )
    parser.add_argument("--base-url", help="API base URL (overrides PRINTNODE_BASE_URL)")
    parser.add_argument("--child-id", help="Act as the child account with this id")
    parser.add_argument("--child-email", help="Act as the child account with this email")
    parser.add_argument("--child-ref", help="Act as the child account with this creator reference")
    parser.add_argument("--pretty", action="store_true", help="Ask the API for indented JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Account ==========
    whoami = subparsers.add_parser("whoami", help="Show the authenticated account")
    whoami.set_defaults(func=cmd_whoami)

    # ========== Computers ==========
    computers = subparsers.add_parser("computers", help="List computers and their scales")
    computers.set_defaults(func=lambda _c, _a: computers.print_help())
    computers_sub = computers.add_subparsers(dest="subcommand")

    c_list = computers_sub.add_parser("list", help="List computers")
    c_list.add_argument("--limit", "-l", type=int, help="Max results (TTY only)")
    c_list.add_argument("--offset", "-o", type=int, help="Offset for pagination")
    c_list.set_defaults(func=cmd_computers_list)

    c_get = computers_sub.add_parser("get", help="Get computer details")
    c_get.add_argument("computer_id", type=int, help="Computer ID")
    c_get.set_defaults(func=cmd_computers_get)

    c_scales = computers_sub.add_parser("scales", help="List scales on a computer")
    c_scales.add_argument("computer_id", type=int, help="Computer ID")
    c_scales.add_argument("device_name", nargs="?", help="Device name")
    c_scales.add_argument("device_number", nargs="?", type=int, help="Device number")
    c_scales.set_defaults(func=cmd_computers_scales)

    # ========== Printers ==========
    printers = subparsers.add_parser("printers", help="List printers")
    printers.set_defaults(func=lambda _c, _a: printers.print_help())
    printers_sub = printers.add_subparsers(dest="subcommand")

    p_list = printers_sub.add_parser("list", help="List printers")
    p_list.add_argument("--computer", "-c", help="Only printers on these computer ids (comma separated)")
    p_list.add_argument("--limit", "-l", type=int, help="Max results")
    p_list.add_argument("--offset", "-o", type=int, help="Offset for pagination")
    p_list.set_defaults(func=cmd_printers_list)

    p_get = printers_sub.add_parser("get", help="Get printer details")
    p_get.add_argument("printer_id", type=int, help="Printer ID")
    p_get.set_defaults(func=cmd_printers_get)

    # ========== Print Jobs ==========
    jobs = subparsers.add_parser("jobs", help="Submit and inspect print jobs")
    jobs.set_defaults(func=lambda _c, _a: jobs.print_help())
    jobs_sub = jobs.add_subparsers(dest="subcommand")

    j_list = jobs_sub.add_parser("list", help="List print jobs")
    j_list.add_argument("--printer", "-p", help="Only jobs sent to these printer ids (comma separated)")
    j_list.add_argument("--limit", "-l", type=int, help="Max results")
    j_list.add_argument("--offset", "-o", type=int, help="Offset for pagination")
    j_list.set_defaults(func=cmd_jobs_list)

    j_get = jobs_sub.add_parser("get", help="Get print job details")
    j_get.add_argument("print_job_id", type=int, help="Print job ID")
    j_get.set_defaults(func=cmd_jobs_get)

    j_create = jobs_sub.add_parser("create", help="Submit a print job")
    j_create.add_argument("printer_id", type=int, help="Printer ID")
    j_create.add_argument("source", help="File to print (or URL with --url)")
    j_create.add_argument("--title", "-t", default="printnode-cli job", help="Job title")
    j_create.add_argument("--qty", "-q", type=int, help="Number of copies")
    j_create.add_argument("--url", action="store_true", help="Source is a URL the client downloads")
    j_create.add_argument("--raw", action="store_true", help="Send as raw printer data instead of PDF")
    j_create.set_defaults(func=cmd_jobs_create)

    j_states = jobs_sub.add_parser("states", help="Show print job state history")
    j_states.add_argument("print_job_ids", nargs="*", type=int, help="Print job IDs (all if omitted)")
    j_states.set_defaults(func=cmd_jobs_states)

    # ========== Tags ==========
    tags = subparsers.add_parser("tags", help="Manage account tags")
    tags.set_defaults(func=lambda _c, _a: tags.print_help())
    tags_sub = tags.add_subparsers(dest="subcommand")

    t_list = tags_sub.add_parser("list", help="List tags")
    t_list.set_defaults(func=cmd_tags_list)

    t_set = tags_sub.add_parser("set", help="Set a tag value")
    t_set.add_argument("name", help="Tag name")
    t_set.add_argument("value", help="Tag value")
    t_set.set_defaults(func=cmd_tags_set)

    t_delete = tags_sub.add_parser("delete", help="Delete a tag (child accounts only)")
    t_delete.add_argument("name", help="Tag name")
    t_delete.set_defaults(func=cmd_tags_delete)

    # ========== API Keys ==========
    apikeys = subparsers.add_parser("apikeys", help="Manage API keys")
    apikeys.set_defaults(func=lambda _c, _a: apikeys.print_help())
    apikeys_sub = apikeys.add_subparsers(dest="subcommand")

    k_list = apikeys_sub.add_parser("list", help="List API keys")
    k_list.set_defaults(func=cmd_apikeys_list)

    k_create = apikeys_sub.add_parser("create", help="Create an API key")
    k_create.add_argument("description", help="Key description")
    k_create.set_defaults(func=cmd_apikeys_create)

    k_delete = apikeys_sub.add_parser("delete", help="Delete an API key (child accounts only)")
    k_delete.add_argument("description", help="Key description")
    k_delete.set_defaults(func=cmd_apikeys_delete)

    # ========== Downloads ==========
    downloads = subparsers.add_parser("downloads", help="PrintNode client downloads")
    downloads.set_defaults(func=lambda _c, _a: downloads.print_help())
    downloads_sub = downloads.add_subparsers(dest="subcommand")

    d_clients = downloads_sub.add_parser("clients", help="List client releases")
    d_clients.set_defaults(func=cmd_downloads_clients)

    d_latest = downloads_sub.add_parser("latest", help="Latest client for an OS")
    d_latest.add_argument("os", choices=["windows", "osx", "linux"], help="Operating system")
    d_latest.add_argument("--edition", "-e", help="Client edition")
    d_latest.set_defaults(func=cmd_downloads_latest)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        setup_logging("DEBUG")

    try:
        client = PrintNodeClient(base_url=args.base_url, pretty=args.pretty)
        if client.api.credentials is None:
            raise PrintNodeError("PRINTNODE_API_KEY environment variable not set")

        child_id = args.child_id or os.environ.get("PRINTNODE_CHILD_ACCOUNT_ID")
        child_email = args.child_email or os.environ.get("PRINTNODE_CHILD_ACCOUNT_EMAIL")
        child_ref = args.child_ref or os.environ.get("PRINTNODE_CHILD_ACCOUNT_CREATOR_REF")
        if child_id or child_email or child_ref:
            client.act_as(child_id=child_id, email=child_email, creator_ref=child_ref)
    except PrintNodeError as e:
        error_output(e)

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
