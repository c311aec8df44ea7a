# apps/goals/domain/exceptions.py


class GoalError(Exception):
    pass


class GoalNotFound(GoalError, LookupError):
    def __init__(self, goal_id):
        super().__init__(f"Goal {goal_id} not found")
        self.goal_id = goal_id


class GoalValidationError(GoalError, ValueError):
    pass


class InvalidStatusTransition(GoalValidationError):
    def __init__(self, goal_id, current, target):
        super().__init__(f"Goal {goal_id}: cannot change status from {current.value} to {target.value}")
        self.goal_id = goal_id
        self.current = current
        self.target = target


class GoalHierarchyError(GoalError):
    """Naruszona integralność drzewa celów (cykl lub wisząca referencja do rodzica)."""
    pass
