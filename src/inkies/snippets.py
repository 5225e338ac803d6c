"""Ink 代码片段

编辑器 "Ink" 菜单中可插入的常用代码片段，按类别分组。
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Snippet:
    """代码片段"""

    name: str
    ink: str

    def to_dict(self) -> dict:
        return {"name": self.name, "ink": self.ink}


@dataclass(frozen=True)
class SnippetCategory:
    """片段类别"""

    name: str
    snippets: tuple[Snippet, ...]

    def to_dict(self) -> dict:
        return {"name": self.name, "snippets": [s.to_dict() for s in self.snippets]}


BASIC_STRUCTURE = SnippetCategory(
    "Basic structure",
    (
        Snippet(
            "Knot (main section)",
            "=== knotName ===\nThis is the content of the knot.\n-> END\n",
        ),
        Snippet(
            "Stitch (sub-section)",
            "= stitchName\n"
            "This is the content of the stitch that should be embedded within a knot.\n"
            "-> END\n",
        ),
        Snippet("Divert", "-> targetKnotName"),
        Snippet("Ending indicator", "-> END\n"),
    ),
)

CHOICES = SnippetCategory(
    "Choices",
    (
        Snippet("Basic Choice", "* This is a choice that can only be chosen once\n"),
        Snippet(
            "Sticky choice",
            "+ This is a sticky choice - the player can choose it more than once\n",
        ),
        Snippet(
            "Choice without printing",
            "* [A choice where the content isn't printed after choosing]\n",
        ),
        Snippet("Choice with mixed output", "* Try [it] this example!\n"),
    ),
)

VARIABLES = SnippetCategory(
    "Variables",
    (
        Snippet("Global variable", "VAR myNumber = 5\n"),
        Snippet("Temporary variable", "temp myTemporaryValue = 5\n"),
        Snippet("Modify variable", "~ myNumber = myNumber + 1\n"),
    ),
)

LOGIC = SnippetCategory(
    "Logic",
    (
        Snippet(
            "Inline condition",
            "{yourVariable: This is written if yourVariable is true|Otherwise this is written}",
        ),
        Snippet(
            "Multi-line condition",
            "{yourVariable:\n"
            "    This is written if yourVariable is true.\n"
            "  - else:\n"
            "    Otherwise this is written.\n"
            "}\n",
        ),
    ),
)

COMMENTS = SnippetCategory(
    "Comments",
    (
        Snippet("Single-line comment", "// This line is a comment.\n"),
        Snippet(
            "Block comment",
            "/* ---------------------------------\n\n"
            "   This whole section is a comment\n\n"
            " ----------------------------------*/\n",
        ),
    ),
)

LIST_HANDLING = SnippetCategory(
    "List-handling",
    (
        Snippet(
            "List: pop",
            "=== function pop(ref list)\n"
            "    ~ temp x = LIST_MIN(list)\n"
            "    ~ list -= x\n"
            "    ~ return x\n",
        ),
        Snippet(
            "List: pop_random",
            "=== function pop_random(ref list)\n"
            "    ~ temp x = LIST_RANDOM(list)\n"
            "    ~ list -= x\n"
            "    ~ return x\n",
        ),
        Snippet(
            "List: list_item_is_member_of",
            "=== function list_item_is_member_of(item, list)\n"
            "    ~ return LIST_COUNT(list ^ item) > 0\n",
        ),
    ),
)

USEFUL_FUNCTIONS = SnippetCategory(
    "Useful functions",
    (
        Snippet("Logic: maybe", "=== function maybe(p)\n    ~ return RANDOM(1, 100) <= p\n"),
        Snippet(
            "Mathematics: abs",
            "=== function abs(x)\n"
            "{ x < 0:\n"
            "      ~ return -1 * x\n"
            "  - else:\n"
            "      ~ return x\n"
            "}\n",
        ),
        Snippet(
            "Flow: came_from",
            "=== function came_from(-> x)\n    ~ return TURNS_SINCE(x) == 0\n",
        ),
        Snippet(
            "Flow: seen_very_recently",
            "=== function seen_very_recently(-> x)\n"
            "    ~ return TURNS_SINCE(x) >= 0 && TURNS_SINCE(x) <= 3\n",
        ),
    ),
)

FULL_STORIES = SnippetCategory(
    "Full stories",
    (
        Snippet(
            "Crime Scene",
            "VAR found_clues = 0\n\n"
            "=== start ===\n"
            "The room was dark, save for the single pool of light around the body.\n\n"
            "* [Examine the body]\n"
            "    -> examine_body\n"
            "* [Look around the room]\n"
            "    -> look_around\n"
            "* {found_clues >= 2} [Make an accusation]\n"
            "    -> accusation\n\n"
            "=== examine_body ===\n"
            "~ found_clues++\n"
            "The victim was a middle-aged man. There was a strange mark on his neck.\n"
            "-> start\n\n"
            "=== look_around ===\n"
            "~ found_clues++\n"
            "You notice a half-empty wine glass on the table.\n"
            "-> start\n\n"
            "=== accusation ===\n"
            '"It was poison in the wine!" you declare.\n'
            "-> END\n",
        ),
    ),
)

ALL_CATEGORIES: tuple[SnippetCategory, ...] = (
    BASIC_STRUCTURE,
    CHOICES,
    VARIABLES,
    LOGIC,
    COMMENTS,
    LIST_HANDLING,
    USEFUL_FUNCTIONS,
    FULL_STORIES,
)


def find_snippet(name: str) -> Snippet | None:
    """按名称查找片段（不区分大小写）"""
    wanted = name.strip().lower()
    for category in ALL_CATEGORIES:
        for snippet in category.snippets:
            if snippet.name.lower() == wanted:
                return snippet
    return None


def catalogue() -> list[dict]:
    """全部片段（/api/snippets 使用）"""
    return [category.to_dict() for category in ALL_CATEGORIES]
