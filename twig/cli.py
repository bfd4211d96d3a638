import argparse
import sys
from pathlib import Path
from typing import Callable

from twig.config import TwigConfig
from twig.errors import NotInitializedError, TwigError
from twig.impl.fs import is_repository, open_repository
from twig.logging import configure_logging
from twig.render import format_log, format_status
from twig.repo import Repository

FILE_SEPARATOR = "--"

Handler = Callable[[Repository, argparse.Namespace, TwigConfig], str | None]


def _split_file_operand(argv: list[str]) -> tuple[list[str], str | None]:
    """
    Pull the ``-- FILE`` operand of ``checkout`` out before argparse sees it.

    argparse drops a bare ``--``, which would make ``checkout -- FILE``
    indistinguishable from ``checkout BRANCH``.
    """
    if "checkout" not in argv or FILE_SEPARATOR not in argv:
        return argv, None

    separator = argv.index(FILE_SEPARATOR)
    if argv.index("checkout") > separator or len(argv) != separator + 2:
        return argv, None
    return argv[:separator], argv[separator + 1]


def _init(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> None:
    repo.init(config.default_branch)


def _add(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> None:
    repo.add(args.file)


def _commit(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> None:
    repo.commit(args.message)


def _rm(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> None:
    repo.rm(args.file)


def _log(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> str:
    return format_log(repo.log())


def _global_log(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> str:
    return format_log(repo.global_log())


def _find(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> str:
    return "\n".join(repo.find(args.message))


def _status(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> str:
    return format_status(repo.status())


def _checkout(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> None:
    if args.file is not None and not args.detach:
        repo.checkout_file(args.file, args.target)
    elif args.target is None or args.file is not None:
        raise TwigError("Incorrect operands.")
    elif args.detach:
        repo.checkout_detached(args.target)
    else:
        repo.checkout_branch(args.target)


def _branch(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> None:
    repo.branch(args.name)


def _rm_branch(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> None:
    repo.rm_branch(args.name)


def _reset(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> None:
    repo.reset(args.commit)


def _merge(repo: Repository, args: argparse.Namespace, config: TwigConfig) -> str:
    result = repo.merge(args.branch)
    if result.fast_forward:
        return "Current branch fast-forwarded."
    if result.has_conflicts:
        return "Encountered a merge conflict."
    return ""


COMMANDS: dict[str, Handler] = {
    "init": _init,
    "add": _add,
    "commit": _commit,
    "rm": _rm,
    "log": _log,
    "global-log": _global_log,
    "find": _find,
    "status": _status,
    "checkout": _checkout,
    "branch": _branch,
    "rm-branch": _rm_branch,
    "reset": _reset,
    "merge": _merge,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twig", description="Minimal local version control"
    )
    parser.add_argument(
        "-C", dest="work_dir", default=".", help="Run as if started in this directory"
    )
    parser.add_argument(
        "--log-level", default=None, help="Log level for stderr (default: WARNING)"
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("init", help="Create a repository in the working directory")
    commands.add_parser("add", help="Stage a file").add_argument("file")
    commands.add_parser("commit", help="Record staged changes").add_argument(
        "message", nargs="?", default=""
    )
    commands.add_parser("rm", help="Unstage or remove a file").add_argument("file")
    commands.add_parser("log", help="Show first-parent history of HEAD")
    commands.add_parser("global-log", help="Show every commit")
    commands.add_parser("find", help="Find commits by message").add_argument(
        "message"
    )
    commands.add_parser("status", help="Show branches, staging and working tree")

    checkout = commands.add_parser(
        "checkout",
        help="Switch branches or restore a file",
        usage="twig checkout BRANCH | --detach COMMIT | [COMMIT] -- FILE",
    )
    checkout.add_argument("target", nargs="?", default=None)
    checkout.add_argument(
        "--detach", action="store_true", help="Detach HEAD at the given commit"
    )

    commands.add_parser("branch", help="Create a branch at HEAD").add_argument("name")
    commands.add_parser("rm-branch", help="Delete a branch").add_argument("name")
    commands.add_parser("reset", help="Move the branch to a commit").add_argument(
        "commit"
    )
    commands.add_parser("merge", help="Merge a branch into HEAD").add_argument(
        "branch"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    argv, file_operand = _split_file_operand(argv)

    args = build_parser().parse_args(argv)
    if args.command == "checkout":
        args.file = file_operand

    config = TwigConfig()
    if args.log_level:
        config = config.model_copy(update={"log_level": args.log_level})
    configure_logging(config.log_level)

    work_dir = Path(args.work_dir)
    if args.command != "init" and not is_repository(work_dir, config):
        print(NotInitializedError())
        return 1

    repo = open_repository(work_dir, config)
    try:
        output = COMMANDS[args.command](repo, args, config)
    except TwigError as e:
        print(e)
        return 1

    if output:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
