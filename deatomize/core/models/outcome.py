"""
Outcome categories a record can end up in after reconciliation.
"""

from enum import Enum


class Outcome(str, Enum):
    """Terminal classification of a reconciled record."""

    REPAIRABLE = "repairable"
    NASTY_NOT_CHUNK = "nasty_not_chunk"
    NASTY_NO_VERSIONS = "nasty_no_versions"
    NASTY_INVALID_VERSION = "nasty_invalid_version"
    NASTY_NOT_EXISTS_ANYMORE = "nasty_not_exists_anymore"

    @property
    def is_repairable(self) -> bool:
        return self is Outcome.REPAIRABLE


OUTCOME_DESCRIPTIONS: dict[Outcome, str] = {
    Outcome.REPAIRABLE: (
        "the file can be automatically repaired because a valid version was found"
    ),
    Outcome.NASTY_NOT_CHUNK: (
        "the current file is not an aborted upload, so we cannot tell whether it is good or not"
    ),
    Outcome.NASTY_NO_VERSIONS: "there are no versions available for this file",
    Outcome.NASTY_INVALID_VERSION: (
        "the available versions are invalid because they are chunked uploads too"
    ),
    Outcome.NASTY_NOT_EXISTS_ANYMORE: "the current file does not exist anymore",
}

# Report order for the unrepairable categories
UNREPAIRABLE_OUTCOMES: tuple[Outcome, ...] = (
    Outcome.NASTY_INVALID_VERSION,
    Outcome.NASTY_NO_VERSIONS,
    Outcome.NASTY_NOT_CHUNK,
    Outcome.NASTY_NOT_EXISTS_ANYMORE,
)


def describe_outcome(outcome: Outcome) -> str:
    """Return the human-readable explanation for an outcome."""
    return OUTCOME_DESCRIPTIONS[outcome]
