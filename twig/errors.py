class TwigError(Exception):
    """
    Base class for recoverable repository errors.

    The message is the one line shown to the user; no state has been
    changed when one of these is raised.
    """

    default_message = "twig error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NotInitializedError(TwigError):
    default_message = "Not in an initialized twig directory."


class RepositoryExistsError(TwigError):
    default_message = (
        "A twig version-control system already exists in the current directory."
    )


class NotFoundError(TwigError):
    default_message = "File does not exist."


class ObjectNotFoundError(NotFoundError):
    default_message = "No object with that id exists."


class NoSuchCommitError(NotFoundError):
    default_message = "No commit with that id exists."


class BranchNotFoundError(NotFoundError):
    default_message = "A branch with that name does not exist."


class FileNotInCommitError(NotFoundError):
    default_message = "File does not exist in that commit."


class EmptyMessageError(TwigError):
    default_message = "Please enter a commit message."


class NoChangesError(TwigError):
    default_message = "No changes added to the commit."


class NothingToRemoveError(TwigError):
    default_message = "No reason to remove the file."


class UntrackedFileError(TwigError):
    default_message = (
        "There is an untracked file in the way; "
        "delete it, or add and commit it first."
    )


class UncommittedChangesError(TwigError):
    default_message = "You have uncommitted changes."


class SelfMergeError(TwigError):
    default_message = "Cannot merge a branch with itself."


class AlreadyUpToDateError(TwigError):
    default_message = "Given branch is an ancestor of the current branch."


class BranchExistsError(TwigError):
    default_message = "A branch with that name already exists."


class CurrentBranchError(TwigError):
    default_message = "Cannot remove the current branch."
