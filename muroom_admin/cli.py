"""Command line interface for the muroom admin client."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

from rich.prompt import Confirm

from .cli_progress import (
    UploadProgressDisplay,
    console,
    render_configuration_summary,
    render_filter_options,
    render_problems,
    render_stations,
    render_studio_detail,
    render_studio_page,
    render_term_content,
    render_terms,
    render_upload_report,
)
from .errors import MuroomError, SubmissionError, UploadIncompleteError, ValidationError
from .forms import StudioForm
from .models import ClientConfig, ImageCategory, LocalFile
from .orchestrator import AdminClient, CompositeSubmissionBuilder
from .settings import SettingsError, config_from_env, configure_logging, default_env_file, load_env_file
from .use_cases.terms import TargetRole, TermsDraft, TermsType

Handler = Callable[[AdminClient, argparse.Namespace], Awaitable[int]]


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _read_files(paths: Optional[Sequence[Path]]) -> List[LocalFile]:
    files = []
    for path in paths or []:
        path = Path(path).expanduser()
        if not path.is_file():
            raise CLIError(f"image file does not exist: {path}")
        files.append(LocalFile.from_path(path))
    return files


def _load_studio_form(args: argparse.Namespace) -> StudioForm:
    form_path = Path(args.form).expanduser()
    try:
        data = json.loads(form_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CLIError(f"could not read studio form {form_path}: {exc}") from exc
    except ValueError as exc:
        raise CLIError(f"studio form {form_path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CLIError(f"studio form {form_path} must be a JSON object")

    form = StudioForm.from_dict(data)
    selections = [
        (ImageCategory.MAIN, args.main),
        (ImageCategory.BUILDING, args.building),
        (ImageCategory.ROOM, args.room),
        (ImageCategory.BLUEPRINT, [args.blueprint] if args.blueprint else []),
        (ImageCategory.COMMON_OPTION, args.common_option),
        (ImageCategory.INDIVIDUAL_OPTION, args.individual_option),
    ]
    for category, paths in selections:
        for local_file in _read_files(paths):
            form.uploads.select(category, local_file)
    return form


def _confirm(question: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    return Confirm.ask(question, console=console, default=False)


# --- command handlers ------------------------------------------------------


async def _cmd_options(admin: AdminClient, args: argparse.Namespace) -> int:
    render_filter_options(await admin.repository.fetch_filter_options())
    return 0


async def _cmd_stations(admin: AdminClient, args: argparse.Namespace) -> int:
    render_stations(await admin.repository.find_nearby_stations(args.address))
    return 0


async def _cmd_owner_nickname(admin: AdminClient, args: argparse.Namespace) -> int:
    console.print(await admin.generate_nickname())
    return 0


async def _cmd_owner_new(admin: AdminClient, args: argparse.Namespace) -> int:
    nickname = args.nickname
    if not nickname:
        nickname = await admin.generate_nickname()
        console.print(f"[cyan]Generated nickname:[/cyan] {nickname}")
    await admin.register_owner(nickname, args.phone)
    console.print(f"[green]Owner registered:[/green] {nickname}")
    return 0


async def _cmd_studio_list(admin: AdminClient, args: argparse.Namespace) -> int:
    size = args.size or admin.config.page_size
    render_studio_page(await admin.repository.list_studios(page=args.page, size=size))
    return 0


async def _cmd_studio_show(admin: AdminClient, args: argparse.Namespace) -> int:
    render_studio_detail(await admin.repository.get_studio(args.studio_id))
    return 0


async def _cmd_studio_new(admin: AdminClient, args: argparse.Namespace) -> int:
    form = _load_studio_form(args)
    builder = CompositeSubmissionBuilder(form.uploads.rules)
    builder.validate(form)

    if not _confirm(f"Create studio '{form.studio_name}' with {len(form.uploads)} image(s)?", args.yes):
        console.print("Cancelled.")
        return 1

    display = UploadProgressDisplay()
    display.attach(admin.events)
    flow = admin.studio_flow(builder)

    while True:
        try:
            receipt = await flow.submit(form)
        except UploadIncompleteError as exc:
            render_upload_report(form.uploads)
            render_problems(
                "Some images could not be uploaded:",
                [f"{i.file.name} ({i.category.value}): {i.error}" for i in exc.failed_items],
            )
            if args.yes or not _confirm("Retry the failed uploads?", False):
                return 1
            continue
        except SubmissionError as exc:
            render_problems("Studio was not created:", [str(exc)])
            if args.yes or not _confirm("Resubmit (uploaded images are reused)?", False):
                return 1
            continue
        break

    render_upload_report(form.uploads)
    console.print(f"[green]Studio created:[/green] {form.studio_name}")
    if receipt.response is not None:
        console.print(receipt.response)
    return 0


async def _cmd_terms_list(admin: AdminClient, args: argparse.Namespace) -> int:
    render_terms(await admin.repository.list_terms(role=args.role))
    return 0


async def _cmd_terms_signup(admin: AdminClient, args: argparse.Namespace) -> int:
    render_terms(await admin.repository.list_signup_terms(role=args.role))
    return 0


async def _cmd_terms_show(admin: AdminClient, args: argparse.Namespace) -> int:
    render_term_content(await admin.repository.get_term(args.term_id))
    return 0


async def _cmd_terms_new(admin: AdminClient, args: argparse.Namespace) -> int:
    content_path = Path(args.content_file).expanduser()
    try:
        content = content_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read terms content {content_path}: {exc}") from exc

    draft = TermsDraft(
        code=TermsType(args.code),
        target_role=TargetRole(args.role),
        title=args.title,
        effective_date=args.date,
        effective_time=args.time,
        content=content,
        is_mandatory=not args.optional,
    )
    problems = draft.problems()
    if problems:
        raise ValidationError(problems)
    if not _confirm(f"Publish terms '{draft.title}'?", args.yes):
        console.print("Cancelled.")
        return 1
    await admin.create_terms(draft)
    console.print(f"[green]Terms published:[/green] {draft.title}")
    return 0


async def _run_command(config: ClientConfig, handler: Handler, args: argparse.Namespace) -> int:
    async with AdminClient(config) as admin:
        return await handler(admin, args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="muroom-admin",
        description="Administer muroom owners, studios and terms through the muroom API.",
    )
    parser.add_argument("--api-url", default=None, help="API base URL (default from MUROOM_API_BASE_URL)")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument("--version", action="version", version="muroom-admin 0.3.0")

    commands = parser.add_subparsers(dest="command")

    options = commands.add_parser("options", help="Show studio filter options")
    options.set_defaults(handler=_cmd_options)

    stations = commands.add_parser("stations", help="Find subway stations near an address")
    stations.add_argument("address")
    stations.set_defaults(handler=_cmd_stations)

    owners = commands.add_parser("owners", help="Owner registration").add_subparsers(dest="owners_command")
    nickname = owners.add_parser("nickname", help="Generate a random owner nickname")
    nickname.set_defaults(handler=_cmd_owner_nickname)
    owner_new = owners.add_parser("new", help="Register an owner")
    owner_new.add_argument("--phone", required=True, help="Owner phone number (hyphens are removed)")
    owner_new.add_argument("--nickname", default=None, help="Nickname (generated when omitted)")
    owner_new.set_defaults(handler=_cmd_owner_new)

    studios = commands.add_parser("studios", help="Studios").add_subparsers(dest="studios_command")
    studio_list = studios.add_parser("list", help="List studios")
    studio_list.add_argument("--page", type=int, default=0, help="Zero-based page number")
    studio_list.add_argument("--size", type=int, default=None, help="Page size")
    studio_list.set_defaults(handler=_cmd_studio_list)
    studio_show = studios.add_parser("show", help="Show studio details")
    studio_show.add_argument("studio_id", type=int)
    studio_show.set_defaults(handler=_cmd_studio_show)
    studio_new = studios.add_parser("new", help="Create a studio from a JSON form and image files")
    studio_new.add_argument("form", type=Path, help="JSON document with the studio fields")
    studio_new.add_argument("--main", type=Path, nargs="+", action="extend", default=[], help="Main images")
    studio_new.add_argument("--building", type=Path, nargs="+", action="extend", default=[], help="Building images")
    studio_new.add_argument("--room", type=Path, nargs="+", action="extend", default=[], help="Room images")
    studio_new.add_argument("--blueprint", type=Path, default=None, help="Blueprint image")
    studio_new.add_argument(
        "--common-option", type=Path, nargs="+", action="extend", default=[], help="Common option images"
    )
    studio_new.add_argument(
        "--individual-option", type=Path, nargs="+", action="extend", default=[], help="Individual option images"
    )
    studio_new.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    studio_new.set_defaults(handler=_cmd_studio_new)

    terms = commands.add_parser("terms", help="Legal terms").add_subparsers(dest="terms_command")
    terms_list = terms.add_parser("list", help="List terms of a role")
    terms_list.add_argument("--role", default="musician")
    terms_list.set_defaults(handler=_cmd_terms_list)
    terms_signup = terms.add_parser("signup", help="List signup terms of a role")
    terms_signup.add_argument("--role", default="musician")
    terms_signup.set_defaults(handler=_cmd_terms_signup)
    terms_show = terms.add_parser("show", help="Show a terms document")
    terms_show.add_argument("term_id", type=int)
    terms_show.set_defaults(handler=_cmd_terms_show)
    terms_new = terms.add_parser("new", help="Publish a terms document")
    terms_new.add_argument("--code", required=True, choices=[t.value for t in TermsType])
    terms_new.add_argument("--role", required=True, choices=[r.value for r in TargetRole])
    terms_new.add_argument("--title", required=True)
    terms_new.add_argument("--date", required=True, help="Effective date (YYYY-MM-DD, local time)")
    terms_new.add_argument("--time", default="00:00", help="Effective time (HH:MM, local time)")
    terms_new.add_argument("--content-file", required=True, type=Path, help="HTML content file")
    terms_new.add_argument("--optional", action="store_true", help="Terms are not mandatory")
    terms_new.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    terms_new.set_defaults(handler=_cmd_terms_new)

    return parser


def _fail(message: object) -> int:
    print(f"ERROR: {message}", file=sys.stderr)
    return 1


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file = args.env_file or default_env_file()
    try:
        if env_file is not None:
            load_env_file(env_file)
        log_mode = configure_logging(debug=args.debug, silent=args.silent, log_level=args.log_level)

        handler: Optional[Handler] = getattr(args, "handler", None)
        if handler is None:
            parser.print_help()
            return 0
        config = config_from_env(args.api_url)
    except SettingsError as exc:
        return _fail(exc)

    if args.debug:
        render_configuration_summary(
            {
                "API": config.api_base_url,
                "Parallel uploads": config.max_parallel_uploads,
                "Env file": env_file or "-",
                "Logging": log_mode,
            }
        )

    try:
        return asyncio.run(_run_command(config, handler, args))
    except ValidationError as exc:
        render_problems("Input is incomplete:", exc.problems)
        return 1
    except (CLIError, MuroomError) as exc:
        return _fail(exc)
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
