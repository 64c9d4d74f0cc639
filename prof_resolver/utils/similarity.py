"""Name similarity primitives: Jaro-Winkler and nickname equivalence."""


WINKLER_SCALE = 0.1
WINKLER_MAX_PREFIX = 4

# Nickname -> formal given names it commonly stands for
COMMON_NICKNAMES: dict[str, tuple[str, ...]] = {
    "liz": ("elizabeth", "liza", "beth"),
    "beth": ("elizabeth", "bethany"),
    "bill": ("william",),
    "will": ("william", "willard"),
    "bob": ("robert",),
    "rob": ("robert",),
    "dick": ("richard", "rich"),
    "rich": ("richard",),
    "tom": ("thomas",),
    "chris": ("christopher", "christian", "christina"),
    "mike": ("michael",),
    "matt": ("matthew",),
    "jon": ("jonathan", "john"),
    "john": ("jonathan",),
    "alex": ("alexander", "alexandra", "alexis"),
    "sam": ("samuel", "samantha"),
    "dan": ("daniel",),
    "danny": ("daniel",),
    "dave": ("david",),
    "andy": ("andrew",),
    "joe": ("joseph",),
    "steve": ("stephen", "steven"),
    "jen": ("jennifer",),
    "jenny": ("jennifer",),
    "kat": ("katherine", "kathryn", "kathleen"),
    "kate": ("katherine", "kathryn"),
    "kathy": ("katherine", "kathleen"),
    "becky": ("rebecca",),
    "bec": ("rebecca",),
    "sue": ("susan", "suzanne"),
    "pat": ("patrick", "patricia"),
    "nick": ("nicholas",),
    "nate": ("nathan", "nathaniel"),
    "ben": ("benjamin",),
    "fred": ("frederick",),
    "greg": ("gregory",),
    "ed": ("edward", "edwin"),
    "ted": ("theodore", "edward"),
    "tim": ("timothy",),
    "jim": ("james",),
    "jimmy": ("james",),
    "josh": ("joshua",),
    "ken": ("kenneth",),
    "lizzy": ("elizabeth",),
}


def jaro_winkler(s1: str, s2: str) -> float:
    """Jaro-Winkler similarity of two strings, case-insensitive, in [0, 1].

    The match window is floor(max(len)/2) - 1, floored at zero so that
    single-character strings can still match themselves. The Winkler boost
    uses a 0.1 scale over a common prefix of at most 4 characters.

    Example:
        >>> round(jaro_winkler("martha", "marhta"), 3)
        0.961
    """
    if not s1 or not s2:
        return 0.0

    s1 = s1.lower()
    s2 = s2.lower()
    len1, len2 = len(s1), len(s2)

    match_window = max(0, max(len1, len2) // 2 - 1)
    matched1 = [False] * len1
    matched2 = [False] * len2

    matches = 0
    for i, ch in enumerate(s1):
        start = max(0, i - match_window)
        end = min(i + match_window + 1, len2)
        for j in range(start, end):
            if not matched2[j] and s2[j] == ch:
                matched1[i] = True
                matched2[j] = True
                matches += 1
                break

    if matches == 0:
        return 0.0

    # Count half-transpositions between the two matched sequences
    transpositions = 0
    k = 0
    for i in range(len1):
        if matched1[i]:
            while not matched2[k]:
                k += 1
            if s1[i] != s2[k]:
                transpositions += 1
            k += 1
    transpositions /= 2

    jaro = (
        matches / len1 + matches / len2 + (matches - transpositions) / matches
    ) / 3

    prefix = 0
    for a, b in zip(s1[:WINKLER_MAX_PREFIX], s2[:WINKLER_MAX_PREFIX]):
        if a != b:
            break
        prefix += 1

    return jaro + prefix * WINKLER_SCALE * (1 - jaro)


def is_nickname_match(name1: str, name2: str) -> bool:
    """True if the two given names are the same or one is a nickname of the other.

    The alias table is consulted in both directions, so the result does not
    depend on argument order.
    """
    if not name1 or not name2:
        return False
    n1 = name1.lower()
    n2 = name2.lower()

    if n1 == n2:
        return True
    if n2 in COMMON_NICKNAMES.get(n1, ()):
        return True
    if n1 in COMMON_NICKNAMES.get(n2, ()):
        return True
    return False
