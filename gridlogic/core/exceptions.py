class GridLogicError(Exception):
    """Base class for all errors raised by the puzzle engine and its services"""


# Authoring / schema errors: fatal for the current round
class TemplateDefinitionError(GridLogicError):
    """A template definition is malformed or references something it cannot"""


class UnresolvedPlaceholderError(TemplateDefinitionError):
    def __init__(self, key: str):
        super().__init__(f"Placeholder '{key}' is not resolved in the statement details")
        self.key = key


class UnknownDirectionError(TemplateDefinitionError):
    def __init__(self, direction):
        super().__init__(f"Unknown direction: {direction!r}")
        self.direction = direction


class ConditionTypeError(TemplateDefinitionError):
    """Two resolved values cannot be ordered against each other"""


# Internal consistency errors: the engine called the evaluator with an incomplete context
class EvaluationContextError(GridLogicError):
    pass


class MissingNeighborError(EvaluationContextError):
    def __init__(self, property_name: str):
        super().__init__(f"neighborProperty '{property_name}' requested without a neighbor in context")
        self.property_name = property_name


# Loader errors
class TemplateLoadError(GridLogicError):
    """Template bank could not be read or decoded"""


class DifficultyNotFoundError(GridLogicError, LookupError):
    def __init__(self, difficulty: str):
        super().__init__(f"No templates for difficulty '{difficulty}'")
        self.difficulty = difficulty


# Session controller errors
class DistractorExhaustedError(GridLogicError):
    """Not enough false statements could be generated for a round"""
