"""Active profile selection.

Purpose
-------
Turn a candidate profile (often derived from host facts) into the single
profile a resolution will use, or stop the resolution before any layer is
read.

Contents
--------
* :func:`select_profile` – validate a candidate with optional fallback.
* :func:`profile_candidate` – derive a candidate from a facts mapping.
"""

from __future__ import annotations

from typing import Any, Collection, Mapping, Sequence

from ..domain.errors import InvalidProfile, MissingRequiredInput
from ..observability import log_info


def select_profile(candidate: str, profile_list: Collection[str], fallback: str | None = None) -> str:
    """Return the profile a resolution should use.

    Why
    ----
    A resolution must never proceed with a profile nobody declared; partial
    configuration is worse than an explicit stop.

    What
    ----
    Returns *candidate* when permitted, otherwise *fallback* when one is
    configured. The fallback must itself be a permitted profile.

    Raises
    ------
    InvalidProfile
        Neither the candidate nor a usable fallback is permitted.

    Examples
    --------
    >>> select_profile("PROD", {"UAT", "PROD"})
    'PROD'
    >>> select_profile("DEV", {"UAT", "PROD"}, fallback="UAT")
    'UAT'
    >>> select_profile("UNKNOWN", {"UAT", "PROD"})
    Traceback (most recent call last):
    ...
    lib_layered_vars.domain.errors.InvalidProfile: Profile 'UNKNOWN' is not one of the permitted profiles: PROD, UAT
    """

    if candidate in profile_list:
        log_info("profile_selected", profile=candidate, fallback=False)
        return candidate
    if fallback is None:
        raise InvalidProfile(candidate, profile_list)
    if fallback not in profile_list:
        raise InvalidProfile(candidate, profile_list, reason=f"fallback {fallback!r} is not permitted either")
    log_info("profile_fallback", profile=fallback, rejected=candidate)
    return fallback


def profile_candidate(facts: Mapping[str, Any], keys: Sequence[str], *, separator: str = "-") -> str:
    """Join the fact values named by *keys* into a profile identifier.

    Examples
    --------
    >>> profile_candidate({"os_family": "RedHat", "major": 9}, ["os_family", "major"])
    'RedHat-9'
    >>> profile_candidate({"stage": "PROD"}, ["stage"])
    'PROD'
    """

    missing = [key for key in keys if facts.get(key) in (None, "")]
    if missing:
        raise MissingRequiredInput(f"facts.{key}" for key in missing)
    return separator.join(str(facts[key]) for key in keys)
