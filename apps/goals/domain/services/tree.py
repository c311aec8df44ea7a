# apps/goals/domain/services/tree.py
from collections import defaultdict
from dataclasses import replace
from typing import Dict, Iterable, List, Optional
from apps.goals.domain.entities import GoalEntity, GoalStatus, GoalTreeNode
from apps.goals.domain.exceptions import GoalHierarchyError
from apps.goals.domain.services.progress import ProgressCalculator


def build_goal_tree(goals: List[GoalEntity], calculator: ProgressCalculator = None) -> List[GoalTreeNode]:
    """
    Buduje drzewo celów ze snapshotu (bez dodatkowych zapytań do repozytorium).
    Korzenie to cele bez rodzica; kolejność jak w wejściu.
    """
    calculator = calculator or ProgressCalculator()
    known_ids = {g.id for g in goals}

    children: Dict[int, List[GoalEntity]] = defaultdict(list)
    roots = []
    for g in goals:
        if g.parent_id is None:
            roots.append(g)
        elif g.parent_id in known_ids:
            children[g.parent_id].append(g)
        else:
            raise GoalHierarchyError(f"Goal {g.id} references missing parent {g.parent_id}")

    def build(goal: GoalEntity) -> GoalTreeNode:
        kids = children.get(goal.id, [])
        child_nodes = [build(k) for k in kids]
        done = sum(1 for k in kids if k.status == GoalStatus.COMPLETED)
        return GoalTreeNode(
            goal=goal,
            level=goal.level,
            children=child_nodes,
            child_count=len(kids),
            progress=calculator.progress_with_children(goal, len(kids), done),
        )

    tree = [build(r) for r in roots]

    # Cele, do których nie da się dojść od żadnego korzenia, siedzą w cyklu
    reachable = set()
    stack = list(tree)
    while stack:
        node = stack.pop()
        reachable.add(node.goal.id)
        stack.extend(node.children)
    orphaned = known_ids - reachable
    if orphaned:
        raise GoalHierarchyError(f"Cycle detected in goal hierarchy among goals {sorted(orphaned)}")

    return tree


def flatten_tree(nodes: Iterable[GoalTreeNode], expanded_ids: Optional[set] = None) -> List[GoalTreeNode]:
    """Spłaszcza drzewo do listy wierszy - schodzi tylko w rozwinięte węzły."""
    expanded_ids = expanded_ids or set()
    result = []
    for node in nodes:
        is_expanded = node.goal.id in expanded_ids
        result.append(replace(node, is_expanded=is_expanded))
        if is_expanded and node.children:
            result.extend(flatten_tree(node.children, expanded_ids))
    return result
