import sys

from awspurge.core.errors import PromptAbortedError


def prompt(expect: str, stream=None) -> None:
    """Ask the operator to type `expect` before anything destructive happens."""
    stream = stream or sys.stdin
    print("Do you want to continue? Enter account alias to continue.")
    print("> ", end="", flush=True)
    text = stream.readline().strip()
    if text != expect:
        raise PromptAbortedError(f"aborted: expected {expect!r}, got {text!r}")
    print()
