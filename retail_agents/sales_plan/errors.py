"""Exceptions raised by the plan board. All are raised before any write."""


class PlanBoardError(Exception):
    """Base class for plan board failures."""


class RowNotFound(PlanBoardError):
    def __init__(self, row_id: str):
        super().__init__(f"Row '{row_id}' not found.")
        self.row_id = row_id


class InvalidInput(PlanBoardError):
    """A caller-supplied argument is outside what the board accepts."""


class InvalidRegion(InvalidInput):
    pass


class InvalidValue(InvalidInput):
    pass


class InvalidDateIndex(InvalidInput):
    pass


class HierarchyIntegrityError(PlanBoardError):
    """A row the hierarchy says must exist is missing from the store."""
