"""
Built-in question bank.

Questions are grouped per (subject, topic[, subtopic]) under a slug key such
as "dsa-trees" or "dsa-trees-traversals". Lookups try the subtopic key first
and fall back to the topic key.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^a-z0-9\-]")


@dataclass(frozen=True)
class Question:
    """A multiple-choice question."""

    question_id: str
    prompt: str
    options: tuple[str, ...]
    correct_index: int
    difficulty: str = "medium"

    def is_correct(self, selected_index: int) -> bool:
        return selected_index == self.correct_index

    def to_dict(self, include_answer: bool = False) -> dict:
        data = {
            "question_id": self.question_id,
            "prompt": self.prompt,
            "options": list(self.options),
            "difficulty_tag": self.difficulty,
        }
        if include_answer:
            data["correct_index"] = self.correct_index
        return data


def slugify(value: str | None) -> str:
    """
    Slug for bank keys: "Linked List" -> "linked-list".

    Lowercases, trims, turns whitespace runs into "-" and drops anything
    that is not a-z, 0-9 or "-".
    """
    if not value:
        return ""
    slug = _WHITESPACE.sub("-", value.lower().strip())
    return _NON_SLUG.sub("", slug)


def bank_keys(subject: str, topic: str, subtopic: str | None = None) -> list[str]:
    """Candidate bank keys in lookup order."""
    base_key = f"{slugify(subject)}-{slugify(topic)}"
    if subtopic:
        return [f"{base_key}-{slugify(subtopic)}", base_key]
    return [base_key]


def _q(question_id: str, prompt: str, options: list[str], correct_index: int, difficulty: str) -> Question:
    return Question(question_id, prompt, tuple(options), correct_index, difficulty)


QUESTION_BANK: dict[str, tuple[Question, ...]] = {
    "dsa-arrays": (
        _q("dsa-arr-1", "What is the time complexity of accessing an element by index in an array?",
           ["O(1)", "O(n)", "O(log n)", "O(n^2)"], 0, "easy"),
        _q("dsa-arr-2", "Which of the following sorting algorithms has the best average time complexity?",
           ["Bubble Sort", "Quick Sort", "Selection Sort", "Insertion Sort"], 1, "medium"),
        _q("dsa-arr-3", "In the two-pointer technique for a sorted array, what's the initial setup?",
           ["Both at start", "One at start, one at end", "Both at middle", "Random positions"], 1, "medium"),
        _q("dsa-arr-4", "What is the space complexity of merge sort?",
           ["O(1)", "O(log n)", "O(n)", "O(n^2)"], 2, "hard"),
        _q("dsa-arr-5", "Which algorithm is best for nearly sorted arrays?",
           ["Bubble Sort", "Quick Sort", "Insertion Sort", "Merge Sort"], 2, "medium"),
    ),
    "dsa-linked-list": (
        _q("dsa-ll-1", "Time complexity to insert at the beginning of a singly linked list?",
           ["O(1)", "O(n)", "O(log n)", "O(n^2)"], 0, "easy"),
        _q("dsa-ll-2", "How do you reverse a singly linked list in-place?",
           ["Use a stack", "Use three pointers", "Create a new list", "Sort and rebuild"], 1, "hard"),
        _q("dsa-ll-3", "What is a circular linked list?",
           ["Last node points to first", "Nodes form a circle", "Head and tail same", "All above"], 3, "medium"),
        _q("dsa-ll-4", "Difference between singly and doubly linked list?",
           ["Doubly has 2 pointers", "Speed difference", "Memory difference", "Both A and C"], 3, "medium"),
        _q("dsa-ll-5", "Time complexity to find middle of linked list using slow-fast pointer?",
           ["O(1)", "O(n/2)", "O(n)", "O(n log n)"], 2, "medium"),
    ),
    "dsa-trees": (
        _q("dsa-tree-1", "What is the height of a binary tree with only root node?",
           ["0", "1", "-1", "Undefined"], 0, "easy"),
        _q("dsa-tree-2", "Which tree traversal visits nodes in sorted order for BST?",
           ["Preorder", "Inorder", "Postorder", "Level order"], 1, "medium"),
        _q("dsa-tree-3", "What property defines a Binary Search Tree?",
           ["Left < Root < Right", "All leaves same level", "Balanced always", "Complete tree"], 0, "medium"),
        _q("dsa-tree-4", "Time complexity of search in balanced BST?",
           ["O(n)", "O(log n)", "O(n log n)", "O(n^2)"], 1, "medium"),
        _q("dsa-tree-5", "What is the main difference between AVL and Red-Black trees?",
           ["Balancing factor", "Color properties", "Complexity guarantees", "All are similar"], 0, "hard"),
    ),
    "dsa-trees-traversals": (
        _q("dsa-tree-trav-1", "In-order traversal visits nodes in what order for a BST?",
           ["Ascending", "Descending", "Random", "Level order"], 0, "medium"),
        _q("dsa-tree-trav-2", "Pre-order traversal processes nodes before or after children?",
           ["Before children", "After children", "During", "Random"], 0, "medium"),
        _q("dsa-tree-trav-3", "Level-order traversal is also called?",
           ["DFS", "BFS", "Post-order", "Pre-order"], 1, "easy"),
    ),
    "dsa-graphs": (
        _q("dsa-graph-1", "What data structure is used to implement BFS?",
           ["Stack", "Queue", "Heap", "Tree"], 1, "easy"),
        _q("dsa-graph-2", "What is the time complexity of DFS?",
           ["O(V)", "O(E)", "O(V+E)", "O(V*E)"], 2, "medium"),
        _q("dsa-graph-3", "Which algorithm finds shortest path in weighted graph?",
           ["DFS", "BFS", "Dijkstra", "Floyd-Warshall"], 2, "medium"),
        _q("dsa-graph-4", "Can Dijkstra work with negative edge weights?",
           ["Yes", "No", "Only if no cycle", "Only positive cycles"], 1, "hard"),
        _q("dsa-graph-5", "What does topological sort do?",
           ["Sorts by weight", "Orders for DAG", "Sorts vertices", "Finds cycles"], 1, "hard"),
    ),
    "python-ml-numpy": (
        _q("py-np-1", "How do you create a NumPy array from a Python list?",
           ["np.array(list)", "np.create(list)", "np.make(list)", "np.build(list)"], 0, "easy"),
        _q("py-np-2", "What is broadcasting in NumPy?",
           ["Casting to bool", "Operating on different shapes", "Network feature", "Data transfer"], 1, "medium"),
        _q("py-np-3", "What does np.reshape do?",
           ["Changes values", "Changes array shape", "Changes data type", "Creates copy"], 1, "easy"),
        _q("py-np-4", "Time complexity of NumPy array indexing?",
           ["O(1)", "O(n)", "O(log n)", "O(n^2)"], 0, "medium"),
        _q("py-np-5", "What is the dtype of NumPy array?",
           ["Data type", "Python type", "Array length", "Shape info"], 0, "easy"),
    ),
    "python-ml-pandas": (
        _q("py-pd-1", "What is a DataFrame in Pandas?",
           ["2D array", "Table structure", "Dictionary", "List of lists"], 1, "easy"),
        _q("py-pd-2", "How do you select a column from a DataFrame?",
           ["df[col]", "df.col", "df.get(col)", "All work"], 3, "easy"),
        _q("py-pd-3", "What does df.fillna() do?",
           ["Fills empty values", "Removes NaN", "Creates NaN", "Validates data"], 0, "medium"),
        _q("py-pd-4", "What is the result of df.groupby()?",
           ["DataFrame", "GroupBy object", "Dictionary", "List"], 1, "medium"),
        _q("py-pd-5", "How to merge two DataFrames?",
           ["df.merge()", "pd.merge()", "df.join()", "All work"], 3, "medium"),
    ),
}


def lookup(
    subject: str,
    topic: str,
    subtopic: str | None = None,
    bank: dict[str, tuple[Question, ...]] | None = None,
) -> tuple[str, tuple[Question, ...]]:
    """
    Find the questions for a session scope.

    Args:
        subject: Subject name (e.g. "DSA")
        topic: Topic name (e.g. "Trees")
        subtopic: Optional subtopic (e.g. "Traversals")
        bank: Bank to search; defaults to QUESTION_BANK

    Returns:
        (matched key, questions); questions is empty when nothing matched
        and the key is then the topic-level key
    """
    bank = QUESTION_BANK if bank is None else bank
    keys = bank_keys(subject, topic, subtopic)
    for key in keys:
        questions = bank.get(key)
        if questions:
            return key, questions
    return keys[-1], ()
