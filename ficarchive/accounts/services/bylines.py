import re

from accounts.models import Pseud


BYLINE_WITH_LOGIN = re.compile(r"^(?P<name>.+?)\s*\((?P<login>[^()]+)\)$")


def split_bylines(text):
    """
    Split free-text bylines on commas, dropping blanks and repeats
    (case-insensitive) while keeping the original order.
    """
    seen = set()
    bylines = []

    for raw in (text or "").split(","):
        byline = raw.strip()
        if not byline or byline.lower() in seen:
            continue
        seen.add(byline.lower())
        bylines.append(byline)

    return bylines


def parse_bylines(text, *, assume_matching_login=False):
    """
    Resolve comma-separated bylines to Pseud objects.

    Accepted forms:
    - "name (login)"  → that user's pseud called name
    - "name"          → the only pseud called name; when several users
                        share it, ``assume_matching_login`` picks the pseud
                        whose owner's login is also name

    Returns a dict:
        pseuds           → resolved Pseud objects (no repeats)
        ambiguous_pseuds → {byline: [candidate pseuds]}
        invalid_pseuds   → bylines that matched nothing
    """
    result = {
        "pseuds": [],
        "ambiguous_pseuds": {},
        "invalid_pseuds": [],
    }

    for byline in split_bylines(text):
        match = BYLINE_WITH_LOGIN.match(byline)

        if match:
            pseud = (
                Pseud.objects
                .select_related("user")
                .filter(
                    name__iexact=match.group("name").strip(),
                    user__username__iexact=match.group("login").strip(),
                )
                .first()
            )
            candidates = [pseud] if pseud else []
        else:
            candidates = list(
                Pseud.objects
                .select_related("user")
                .filter(name__iexact=byline)
            )

        if not candidates:
            result["invalid_pseuds"].append(byline)
            continue

        if len(candidates) > 1:
            matching_login = [
                pseud for pseud in candidates
                if pseud.user.username.lower() == byline.lower()
            ]
            if assume_matching_login and len(matching_login) == 1:
                candidates = matching_login
            else:
                result["ambiguous_pseuds"][byline] = candidates
                continue

        pseud = candidates[0]
        if pseud not in result["pseuds"]:
            result["pseuds"].append(pseud)

    return result
