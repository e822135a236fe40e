"""
Release gate.

Decides whether the current commit is an authorized release point. A
negative decision is an expected outcome, not an error: the caller logs
the reason and exits successfully.
"""

import logging
from dataclasses import dataclass

from release_publisher.dist_info import ReleaseInfo


logger = logging.getLogger("release_publisher.release_gate")

PUBLISHABLE_CHANNELS = frozenset({"production", "test", "beta"})


@dataclass(frozen=True)
class GateDecision:
    """
    Outcome of the release gate.

    Attributes:
        publish: True if the commit may be published
        reason: Human-readable explanation of the decision
    """
    publish: bool
    reason: str


def check_release_gate(info: ReleaseInfo) -> GateDecision:
    """
    Check whether the build described by info may be published.

    The build is publishable only if its channel is in PUBLISHABLE_CHANNELS,
    a release SHA is known, and the current SHA starts with the release SHA
    (case-insensitive).

    Args:
        info: Release metadata for the current build

    Returns:
        GateDecision with publish=True on success
    """
    channel = info.channel
    if channel not in PUBLISHABLE_CHANNELS:
        return GateDecision(False, f"Channel '{channel}' is not a publishable channel")

    release_sha = info.release_sha
    if not release_sha:
        return GateDecision(False, "No release SHA found for this build")

    current_sha = info.current_sha
    if not current_sha.upper().startswith(release_sha.upper()):
        return GateDecision(
            False,
            f"Current commit {current_sha or '(unknown)'} does not match "
            f"release SHA {release_sha}",
        )

    logger.debug(f"Release gate passed channel={channel} sha={current_sha}")
    return GateDecision(True, f"Publishing {current_sha} to channel '{channel}'")
