"""
Translation of the "project saved in version" token (field ``PSIV`` of the Project block) into the IDE version
format used for the root element of the XML document.

The token looks like ``YYYY.RRB``, where ``YYYY`` is the year, ``RR`` the two-digit release and ``B`` an optional
one-digit bugfix number. It translates to ``YYYYrR[.B]``, e.g. ``2019.011`` -> ``2019r1.1``, ``2018.04`` -> ``2018r4``.
"""

SAVED_IN_VERSION_TAG = 'PSIV'

FALLBACK_VERSION = '2019r1.1'

_DEFAULT_RELEASE = 1


def translate_saved_in_version(token: str, fallback: str = FALLBACK_VERSION) -> str:
    """
    Translates a ``YYYY.RRB`` token into a displayable IDE version.

    - If the year part is missing or not numeric, the whole token is unusable and `fallback` is returned.
    - If the release part is missing or not numeric, release 1 is assumed.
    - A bugfix digit that is not numeric is dropped.
    """
    parts = token.strip().split('.')

    year_str = parts[0]
    if not year_str.isdigit():
        return fallback

    tail = parts[1] if len(parts) > 1 else ''
    release_str = tail[:2]
    bugfix_str = tail[2:3]

    release = int(release_str) if release_str.isdigit() else _DEFAULT_RELEASE

    version = f"{int(year_str):04d}r{release}"
    if bugfix_str.isdigit():
        version += f".{int(bugfix_str)}"

    return version
