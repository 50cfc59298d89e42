"""
Built-in git popups.

Each popup is declared as a table of switches, options and actions. The
accompanying command layer is a dry run: it prints the git command line an
action would execute and returns it as a list.
"""

import logging
import shlex
from typing import Any, Callable, Dict, List, Optional

from prompt_toolkit import prompt
from prompt_toolkit.completion import PathCompleter

from keypop.console.popup_console import entry_points
from keypop.console.rendering import render_message
from keypop.popup.commands import CommandFunc, CommandRegistry, Invocation
from keypop.popup.definition import PopupRegistry
from keypop.runtime_config import RuntimeConfig

logger = logging.getLogger(__name__)


def read_path(prompt_text: str) -> Optional[str]:
    """Read a file system path with completion; None when cancelled."""
    try:
        return prompt(prompt_text, completer=PathCompleter(expanduser=True))
    except (KeyboardInterrupt, EOFError):
        return None


# (command id, git argv, documentation)
GIT_COMMANDS = [
    ("git-log-oneline", ["log", "--oneline"], "Show the short log of the current branch."),
    ("git-log-long", ["log", "--stat"], "Show the long log, with changed files."),
    ("git-log-all", ["log", "--oneline", "--all"], "Show the short log of all refs."),
    ("git-reflog", ["reflog"], "Show the reflog of HEAD."),
    ("git-commit", ["commit"], "Create a new commit from the staged changes."),
    ("git-commit-amend", ["commit", "--amend"], "Amend the last commit."),
    ("git-commit-fixup", ["commit", "--fixup=HEAD"], "Create a fixup commit for HEAD."),
    ("git-fetch", ["fetch"], "Fetch from the current remote."),
    ("git-fetch-all", ["fetch", "--all"], "Fetch from all remotes."),
    ("git-remote-update", ["remote", "update"], "Update all remotes."),
    ("git-push", ["push"], "Push the current branch."),
    ("git-push-tags", ["push", "--tags"], "Push all tags."),
    ("git-pull", ["pull"], "Pull from the upstream branch."),
    ("git-branch-list", ["branch", "--list", "-vv"], "List local branches."),
    ("git-switch-create", ["switch", "-c"], "Create and switch to a new branch."),
    ("git-branch-delete", ["branch", "-d"], "Delete a branch."),
    ("git-branch-rename", ["branch", "-m"], "Rename a branch."),
    ("git-tag", ["tag"], "Create a lightweight tag."),
    ("git-tag-annotated", ["tag", "-a"], "Create an annotated tag."),
    ("git-stash-push", ["stash", "push"], "Stash the working tree changes."),
    ("git-stash-snapshot", ["stash", "create"], "Create a stash commit, leaving the working tree alone."),
    ("git-stash-pop", ["stash", "pop"], "Apply and drop the newest stash."),
    ("git-merge", ["merge"], "Merge a branch into the current one."),
    ("git-merge-abort", ["merge", "--abort"], "Abort the merge in progress."),
]


def git_command(argv: List[str], doc: str) -> CommandFunc:
    def run(invocation: Invocation) -> List[str]:
        command = ["git", *argv, *invocation.arguments]
        render_message(shlex.join(command), role="command")
        return command

    run.__doc__ = doc
    return run


def build_commands() -> CommandRegistry:
    commands = CommandRegistry()
    for command_id, argv, doc in GIT_COMMANDS:
        commands.register(command_id, git_command(argv, doc))
    return commands


def build_registry() -> PopupRegistry:
    """Return a registry holding the built-in git popups."""
    registry = PopupRegistry()

    registry.define_popup(
        "logging",
        man_page="git-log",
        switches=[
            ("m", "Only merge commits", "--merges"),
            ("d", "Date order", "--date-order"),
            ("f", "First parent", "--first-parent"),
            ("i", "Case insensitive patterns", "-i"),
            ("g", "Show graph", "--graph"),
            ("n", "Name only", "--name-only"),
        ],
        options=[
            ("r", "Relative", "--relative=", read_path),
            ("c", "Committer", "--committer="),
            (">", "Since", "--since="),
            ("<", "Before", "--before="),
            ("g", "Grep messages", "--grep="),
            ("s", "Pickaxe search", "-S"),
            ("a", "Author", "--author="),
        ],
        actions=[
            ("l", "Short", "git-log-oneline"),
            ("L", "Long", "git-log-long"),
            ("a", "All refs", "git-log-all"),
            ("h", "Reflog", "git-reflog"),
        ],
    )

    registry.define_popup(
        "committing",
        man_page="git-commit",
        switches=[
            ("r", "Reset author", "--reset-author"),
            ("a", "Stage all modified files", "--all"),
            ("e", "Allow empty commit", "--allow-empty"),
            ("v", "Show diff of changes", "--verbose"),
            ("n", "Bypass git hooks", "--no-verify"),
            ("s", "Add Signed-off-by line", "--signoff"),
        ],
        options=[
            ("m", "Message", "--message="),
            ("A", "Override author", "--author="),
            ("S", "Sign using gpg", "--gpg-sign="),
        ],
        actions=[
            ("c", "Commit", "git-commit"),
            ("a", "Amend", "git-commit-amend"),
            ("f", "Fixup", "git-commit-fixup"),
        ],
    )

    registry.define_popup(
        "fetching",
        man_page="git-fetch",
        switches=[("p", "Prune", "--prune")],
        actions=[
            ("f", "Current", "git-fetch"),
            ("a", "All", "git-fetch-all"),
            ("u", "Remote update", "git-remote-update"),
        ],
    )

    registry.define_popup(
        "pushing",
        man_page="git-push",
        switches=[
            ("f", "Force with lease", "--force-with-lease"),
            ("d", "Dry run", "--dry-run"),
            ("u", "Set upstream", "--set-upstream"),
        ],
        actions=[
            ("P", "Push", "git-push"),
            ("t", "Push tags", "git-push-tags"),
        ],
    )

    registry.define_popup(
        "pulling",
        man_page="git-pull",
        switches=[
            ("f", "Fast-forward only", "--ff-only"),
            ("r", "Rebase", "--rebase"),
        ],
        actions=[("F", "Pull", "git-pull")],
    )

    registry.define_popup(
        "branching",
        man_page="git-branch",
        switches=[("f", "Force", "--force")],
        options=[("t", "Track", "--track=")],
        actions=[
            ("v", "Branch manager", "git-branch-list"),
            ("c", "Create", "git-switch-create"),
            ("k", "Delete", "git-branch-delete"),
            ("m", "Rename", "git-branch-rename"),
        ],
    )

    registry.define_popup(
        "tagging",
        man_page="git-tag",
        switches=[("f", "Force", "--force")],
        options=[("m", "Message", "--message=")],
        actions=[
            ("t", "Lightweight", "git-tag"),
            ("a", "Annotated", "git-tag-annotated"),
        ],
    )

    registry.define_popup(
        "stashing",
        man_page="git-stash",
        switches=[
            ("k", "Keep index", "--keep-index"),
            ("u", "Include untracked files", "--include-untracked"),
            ("a", "Include all files", "--all"),
        ],
        options=[("m", "Message", "--message=")],
        actions=[
            ("z", "Save", "git-stash-push"),
            ("s", "Snapshot", "git-stash-snapshot"),
            ("p", "Pop", "git-stash-pop"),
        ],
    )

    registry.define_popup(
        "merging",
        man_page="git-merge",
        switches=[
            ("f", "Fast-forward only", "--ff-only"),
            ("n", "No fast-forward", "--no-ff"),
            ("s", "Squash", "--squash"),
        ],
        options=[("s", "Strategy", "--strategy=")],
        actions=[
            ("m", "Merge", "git-merge"),
            ("A", "Abort", "git-merge-abort"),
        ],
    )

    logger.debug("Built-in popups: %s", ", ".join(registry))
    return registry


def build_entry_points(
    config: Optional[RuntimeConfig] = None,
) -> Dict[str, Callable[..., Any]]:
    """`open_<name>` callables for the built-in popups."""
    return entry_points(build_registry(), build_commands(), config)
